"""Infrastructure Layer — store adapters and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/repository_protocols.py; core never imports it
    - All SQLAlchemy failures mapped to StoreError before leaving this layer

Design Decisions:
    - One adapter per aggregate (tasks, identity) over a generic repository
"""
