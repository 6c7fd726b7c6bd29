"""Management Commands — provision the store and run the API server.

Usage:
    python -m tasktracker.manage create-schema
    python -m tasktracker.manage create-user --name Ada --email ada@example.com
    python -m tasktracker.manage issue-token --user-id <uuid>
    python -m tasktracker.manage revoke-token --token <token>
    python -m tasktracker.manage serve --port 8000

Invariants:
    - Provisioning talks to the store directly through a session factory, not the API
    - Raw credentials are printed once and never persisted
"""

import argparse
import asyncio
import sys
from uuid import UUID

import uvicorn

from tasktracker.config import get_settings
from tasktracker.core.domain_types import OwnerId
from tasktracker.db.session import (
    create_engine, create_session_factory, create_schema,
)
from tasktracker.infrastructure.identity_repository import SqlIdentityRepository
from tasktracker.infrastructure.observability import setup_logging


async def run(args: argparse.Namespace) -> int:
    engine = create_engine(args.database_url)
    factory = create_session_factory(engine)
    try:
        if args.command == "create-schema":
            await create_schema(engine)
            print("Schema created")
            return 0
        async with factory() as db:
            identity = SqlIdentityRepository(db)
            if args.command == "create-user":
                user = await identity.create_user(args.name, args.email)
                token = await identity.issue_token(OwnerId(user.id))
                print(f"user_id={user.id}")
                print(f"token={token}")
            elif args.command == "issue-token":
                user = await identity.get_user(OwnerId(args.user_id))
                if user is None:
                    print(f"No user {args.user_id}", file=sys.stderr)
                    return 1
                print(f"token={await identity.issue_token(OwnerId(user.id))}")
            elif args.command == "revoke-token":
                if not await identity.revoke_token(args.token):
                    print("Token not found or already revoked", file=sys.stderr)
                    return 1
                print("Token revoked")
        return 0
    finally:
        await engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasktracker.manage",
        description="Provision the task tracker store.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL from the environment",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("create-schema", help="Create missing tables")

    create_user = sub.add_parser("create-user", help="Create a user and a credential")
    create_user.add_argument("--name", required=True)
    create_user.add_argument("--email", required=True)

    issue = sub.add_parser("issue-token", help="Issue a credential for a user")
    issue.add_argument("--user-id", required=True, type=UUID)

    revoke = sub.add_parser("revoke-token", help="Revoke a credential")
    revoke.add_argument("--token", required=True)

    serve = sub.add_parser("serve", help="Run the API under uvicorn (uses DATABASE_URL)")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", default=8000, type=int)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    if args.command == "serve":
        uvicorn.run("tasktracker.main:app", host=args.host, port=args.port)
        return 0
    if args.database_url is None:
        args.database_url = settings.database_url
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
