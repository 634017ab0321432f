#!/usr/bin/env python3
"""
User Management Utility

This script provides utilities to manage API users:
- Create a user and issue an API key
- List all users
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from api.database import UserService
from utilities.config import config
from utilities.logger import setup_logging


def _user_service(client: AsyncIOMotorClient) -> UserService:
    return UserService(
        client[config.mongodb_database],
        collection_name=config.users_collection
    )


async def create_user(name: str, email: str) -> bool:
    """Create a user and print their API key."""
    print("\n🔑 CREATING USER")
    print("=" * 80)

    client = AsyncIOMotorClient(config.mongodb_url)
    try:
        user_service = _user_service(client)
        await user_service.ensure_indexes()
        created = await user_service.create_user(name, email)

        print("✅ USER CREATED:")
        print(f"   ID: {created.user.id}")
        print(f"   Name: {created.user.name}")
        print(f"   Email: {created.user.email}")
        print(f"   API Key: {created.api_key}")
        print()
        print("⚠️  Store this key now, it cannot be shown again.")
        return True

    except DuplicateKeyError:
        print(f"❌ A user with email '{email}' already exists")
        return False
    except PyMongoError as e:
        print(f"❌ Error creating user: {e}")
        return False
    finally:
        client.close()


async def list_users() -> bool:
    """List all users in the database."""
    print("\n" + "=" * 80)
    print("👥 ALL USERS")
    print("=" * 80)

    client = AsyncIOMotorClient(config.mongodb_url)
    try:
        users = await _user_service(client).list_users()

        if not users:
            print("❌ No users found in database")
            return True

        print(f"✅ Found {len(users)} users:")
        print()

        for i, user in enumerate(users, 1):
            print(f"{i:3d}. {user.name} <{user.email}>")
            print(f"     ID: {user.id}")
            print(f"     Created: {user.created_at}")
            print()
        return True

    except PyMongoError as e:
        print(f"❌ Error listing users: {e}")
        return False
    finally:
        client.close()


async def main():
    """Main function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_users.py [create|list] [name] [email]")
        print()
        print("Commands:")
        print("  create   - Create a user and issue an API key")
        print("  list     - List all users")
        print()
        print("Examples:")
        print("  python manage_users.py create 'Jane Doe' jane@example.com")
        print("  python manage_users.py list")
        sys.exit(1)

    command = sys.argv[1].lower()

    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )

    if command == "create":
        if len(sys.argv) < 4:
            print("❌ Error: name and email required for create command")
            print("Usage: python manage_users.py create <name> <email>")
            sys.exit(1)
        ok = await create_user(sys.argv[2], sys.argv[3])
    elif command == "list":
        ok = await list_users()
    else:
        print(f"❌ Unknown command: {command}")
        print("Available commands: create, list")
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
