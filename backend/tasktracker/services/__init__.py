"""Services Layer — orchestrates the pure core around repository IO.

Invariants:
    - Services take repositories through core/repository_protocols.py
    - No SQLAlchemy imports here
"""
