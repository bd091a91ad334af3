"""Services Layer - orchestration between the pure core and the persistence shell.

Invariants:
    - Services own IO ordering: load, run core operation, save
    - Services never reimplement core rules

Design Decisions:
    - One service per aggregate (AccountService for AccountState)
"""
