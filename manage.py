#!/usr/bin/env python3
"""
Database management commands.
Creates and drops the schema and bootstraps administrator accounts.
"""

import asyncio
import sys
import argparse
import logging

from rentals.config import settings
from rentals.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from rentals.models.user import UserRole
from rentals.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class DatabaseManager:
    """Schema and account bootstrap operations."""

    async def create_tables(self) -> None:
        logger.info("Creating database tables")
        await create_tables()

    async def drop_tables(self) -> None:
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def reset_database(self) -> None:
        """Drop and recreate all tables. Development and testing only."""
        if not settings.is_development and not settings.is_testing:
            raise RuntimeError("Database reset is only allowed in development or test mode")

        await self.drop_tables()
        await self.create_tables()
        logger.info("Database reset completed")

    async def create_admin(self, email: str, password: str, name: str) -> None:
        """
        Create an administrator account.
        An existing account with the same email is promoted instead.
        """
        async with AsyncSessionLocal() as session:
            user_repo = UserRepository(session)

            existing = await user_repo.get_by_email(email)
            if existing is not None:
                if existing.role == UserRole.ADMIN:
                    logger.info(f"User {email} is already an admin, skipping")
                    return
                await user_repo.update(existing, {"role": UserRole.ADMIN})
                logger.info(f"Promoted existing user {email} to admin")
                return

            user = await user_repo.create_user({
                "email": email,
                "name": name,
                "password": password,
                "role": UserRole.ADMIN,
            })
            logger.info(f"Admin user created: {user.email} ({user.id})")


async def run(args: argparse.Namespace) -> None:
    manager = DatabaseManager()
    try:
        if args.command == "create-tables":
            await manager.create_tables()

        elif args.command == "drop-tables":
            await manager.drop_tables()

        elif args.command == "reset":
            await manager.reset_database()

        elif args.command == "create-admin":
            await manager.create_admin(args.email, args.password, args.name)
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Square One Rentals database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")

    drop_parser = subparsers.add_parser("drop-tables", help="Drop all tables (development only)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping tables")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    admin_parser = subparsers.add_parser("create-admin", help="Create or promote an administrator")
    admin_parser.add_argument("email", help="Administrator email")
    admin_parser.add_argument("password", help="Password (minimum 8 characters)")
    admin_parser.add_argument("--name", default="Administrator", help="Display name")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command in ("drop-tables", "reset") and not args.confirm:
        print(f"{args.command} requires --confirm flag")
        return

    try:
        asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
