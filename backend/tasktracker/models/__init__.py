"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every task is scoped by owner_id -> users.id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from tasktracker.models.user import User  # noqa: F401
from tasktracker.models.auth_token import AuthToken  # noqa: F401
from tasktracker.models.task import Task  # noqa: F401
