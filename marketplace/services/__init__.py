"""Services Layer - per-resource handlers: load state, call core, persist the Plan.

Invariants:
    - Handlers never decide business rules; guard and engine in core/ do
    - Every write goes through commit_plan (one transaction per request)

Design Decisions:
    - One handler file per resource for locality
"""
