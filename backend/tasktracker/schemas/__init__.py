"""Pydantic Schemas — request/response shapes for API endpoints and the client.

Invariants:
    - Wire JSON uses camelCase keys (ownerId, createdAt, updatedAt)
    - Request schemas only shape types; content rules live in core/enforce_task_fields.py

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Same Task schema parses server responses on the client side
"""
