"""Infrastructure Layer - persistence collaborators and cross-cutting concerns.

Invariants:
    - Infrastructure never calls core operations; it only stores and returns snapshots
    - All database calls wrapped with rollback and error mapping

Design Decisions:
    - Repositories implement core/repository_protocols.AccountRepository structurally
"""
