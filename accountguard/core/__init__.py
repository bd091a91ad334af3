"""Core Layer - pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - All functions are deterministic; every timestamp is passed in by the caller

Design Decisions:
    - Functional core separated from imperative shell
"""
