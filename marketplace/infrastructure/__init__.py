"""Infrastructure Layer - database, entity store, blob store, logging.

Invariants:
    - Infrastructure implements the protocols in core/repository_protocols.py
    - Driver exceptions are mapped to core/errors.py types before leaving this layer
"""
