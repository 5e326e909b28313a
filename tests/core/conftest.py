"""Core fixtures - plain dataclasses standing in for ORM rows.

The guard and the engine only read the attributes named in the *Like
protocols, so these are enough to drive every pure function.
"""

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest


@dataclass
class FakeUser:
    id: UUID
    role: str


@dataclass
class FakeProject:
    id: UUID
    buyer_id: UUID
    assigned_solver_id: UUID | None = None
    status: str = "open"
    version: int = 0


@dataclass
class FakeRequest:
    id: UUID
    project_id: UUID
    solver_id: UUID
    status: str = "pending"


@dataclass
class FakeTask:
    id: UUID
    project_id: UUID
    status: str = "pending"


@dataclass
class FakeSubmission:
    id: UUID
    task_id: UUID
    solver_id: UUID
    file_path: str = "old__work.zip"
    message: str | None = None
    status: str = "pending"


@pytest.fixture
def admin():
    return FakeUser(uuid4(), "admin")


@pytest.fixture
def buyer():
    return FakeUser(uuid4(), "buyer")


@pytest.fixture
def other_buyer():
    return FakeUser(uuid4(), "buyer")


@pytest.fixture
def solver():
    return FakeUser(uuid4(), "problem_solver")


@pytest.fixture
def other_solver():
    return FakeUser(uuid4(), "problem_solver")


@pytest.fixture
def open_project(buyer):
    return FakeProject(uuid4(), buyer.id)


@pytest.fixture
def assigned_project(buyer, solver):
    return FakeProject(uuid4(), buyer.id, solver.id, "assigned")


@pytest.fixture
def active_project(buyer, solver):
    return FakeProject(uuid4(), buyer.id, solver.id, "in_progress")


@pytest.fixture
def task(active_project):
    return FakeTask(uuid4(), active_project.id, "submitted")


@pytest.fixture
def submission(task, solver):
    return FakeSubmission(uuid4(), task.id, solver.id)


@pytest.fixture
def new_request():
    """Factory: new_request(project, solver_id, status="pending")."""
    def _make(project, solver_id, status="pending"):
        return FakeRequest(uuid4(), project.id, solver_id, status)
    return _make


@pytest.fixture
def new_task():
    """Factory: new_task(project, status="pending")."""
    def _make(project, status="pending"):
        return FakeTask(uuid4(), project.id, status)
    return _make
