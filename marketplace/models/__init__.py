"""ORM Models - SQLAlchemy declarative models for all marketplace entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Project is the aggregate root for requests and tasks; a task owns its submission

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from marketplace.models.user import User  # noqa: F401
from marketplace.models.project import Project  # noqa: F401
from marketplace.models.request import ProjectRequest  # noqa: F401
from marketplace.models.task import Task  # noqa: F401
from marketplace.models.submission import Submission  # noqa: F401
