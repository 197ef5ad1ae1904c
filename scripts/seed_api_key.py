"""Seed script to insert a user and an API key for local development/testing.

Usage:
  python scripts/seed_api_key.py
  python scripts/seed_api_key.py --key my-secret-key --username alice
  python scripts/seed_api_key.py --reset
"""

import hashlib
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse
from sqlmodel import Session
from sqlalchemy import delete

from models.api_key import APIKey
from models.user import User
from repositories.api_key_repository import APIKeyRepository
from repositories.user_repository import UserRepository
from utils.database import init_db

DEFAULT_RAW_KEY = "sandbox-dev-key"
DEFAULT_NAME = "sandbox-key"
DEFAULT_USER = "dev"


def hash_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def seed_api_key(raw_key: str = DEFAULT_RAW_KEY, username: str = DEFAULT_USER, reset: bool = False) -> bool:
    engine = init_db()
    key_hash = hash_key(raw_key)

    try:
        with Session(engine) as db:
            # Ensure the user exists. Users inserted here bypass the event bus,
            # so run the API with SANDBOX_RETROACTIVE=true to give them a sandbox.
            print("Creating/verifying user...")
            users = UserRepository(db)
            user = users.get_by_username(username)

            if not user:
                user = users.create(User(username=username))
                print(f"✅ Created user '{username}'")
            else:
                print(f"✅ User '{username}' exists (sandbox={user.sandbox_id})")

            if reset:
                res = db.exec(delete(APIKey).where(APIKey.key_hash == key_hash))
                deleted = res.rowcount if hasattr(res, "rowcount") and res.rowcount else 0
                db.commit()
                print(f"Reset: removed {deleted} existing key(s)")

            keys = APIKeyRepository(db)
            existing = keys.get_by_hash(key_hash)

            if existing:
                print(f"API key already exists (name={existing.name}, user={existing.username})")
                return True

            keys.create_for_user(key_hash=key_hash, name=DEFAULT_NAME, username=username)

            print("API key seeded successfully:")
            print(f"  Raw key: {raw_key}")
            print(f"  Hash:    {key_hash[:16]}...")
            print(f"  Name:    {DEFAULT_NAME}")
            print(f"  User:    {username}")
            return True

    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a user and API key for local dev/testing")
    parser.add_argument("--key", default=DEFAULT_RAW_KEY, help=f"Raw API key value (default: {DEFAULT_RAW_KEY})")
    parser.add_argument("--username", default=DEFAULT_USER, help=f"User the key authenticates as (default: {DEFAULT_USER})")
    parser.add_argument("--reset", action="store_true", help="Remove existing key before inserting")
    args = parser.parse_args()

    ok = seed_api_key(raw_key=args.key, username=args.username, reset=args.reset)
    sys.exit(0 if ok else 1)
