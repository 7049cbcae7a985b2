#!/usr/bin/env python3
"""
Create the first ADMIN account.

Usage:
  ADMIN_EMAIL=owner@academy.example ADMIN_PASSWORD='...' python scripts/create_admin.py
  # Requires DATABASE_URL and SECRET_KEY in .env (or export)
"""
import asyncio
import os
import sys

# Load .env from project root
from dotenv import load_dotenv

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(_root, ".env"))

from academy.config import settings
from academy.database import Database
from academy.models.enums import UserRole
from academy.services.user_service import UserService


async def main() -> int:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    full_name = os.getenv("ADMIN_NAME", "Academy Admin")
    if not email or not password:
        print("ERROR: ADMIN_EMAIL and ADMIN_PASSWORD must be set.")
        return 1
    if len(password) < 8:
        print("ERROR: ADMIN_PASSWORD must be at least 8 characters.")
        return 1

    database = Database(settings)
    try:
        async with database.session() as session:
            try:
                user = await UserService.create_user(
                    session, email, password, full_name, UserRole.ADMIN
                )
            except ValueError as e:
                print(f"ERROR: {e}")
                return 1
        print(f"SUCCESS: admin {user.email} created (id={user.id}).")
        return 0
    finally:
        await database.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
