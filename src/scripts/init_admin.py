"""Create or promote the site admin account.

Usage:
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=changeme123 python -m src.scripts.init_admin
    python -m src.scripts.init_admin --email admin@example.com --password changeme123 --create-tables
"""

import argparse
import asyncio
import logging
import os
import sys

from src.database import client as db_client
from src.database.base import Base
from src.features.auth.models import RefreshToken  # noqa: F401  (registers the table)
from src.features.user.bootstrap import ensure_admin
from src.features.user.exceptions import AdminBootstrapError
from src.features.user.repository import UserRepository

logger = logging.getLogger(__name__)


async def run(email: str, password: str, create_tables: bool) -> int:
    await db_client.init_db()
    try:
        if create_tables:
            async with db_client.get_engine().begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        async with db_client.get_session() as session:
            user, status = await ensure_admin(UserRepository(session), email, password)

        print(f"{status}: {user.email} (id: {user.id})")
        return 0
    finally:
        await db_client.close_db()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote the admin account")
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    args = parser.parse_args(argv)

    if not args.email or not args.password:
        parser.error("--email/--password (or ADMIN_EMAIL/ADMIN_PASSWORD) are required")

    logging.basicConfig(level=logging.INFO)
    try:
        return asyncio.run(run(args.email, args.password, args.create_tables))
    except AdminBootstrapError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
