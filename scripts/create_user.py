#!/usr/bin/env python3
"""
Script to create a new user interactively.

Usage:
    python scripts/create_user.py

    # Or with username and email as arguments:
    python scripts/create_user.py John.Windler84 --email Johan.Gerlach17@hotmail.com

    # Admin account:
    python scripts/create_user.py admin --email admin@example.com --admin
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ecom.config import load_config
from ecom.auth.users import UserStore, DuplicateUserError, USER_TYPE_ADMIN, USER_TYPE_USER
from ecom.auth.password import normalize_email


def main():
    parser = argparse.ArgumentParser(description="Create a new user")
    parser.add_argument("username", nargs="?", help="Unique login name")
    parser.add_argument("--email", "-e", help="User's email")
    parser.add_argument("--name", "-n", help="User's name")
    parser.add_argument("--mobile", "-m", help="User's mobile number")
    parser.add_argument("--admin", action="store_true", help="Create an admin account")
    parser.add_argument("--users-file", type=Path, help="Users JSON file (default: from USERS_FILE)")
    args = parser.parse_args()

    store = UserStore(args.users_file or load_config().users_file)

    username = args.username
    if not username:
        username = input("Username: ").strip()

    if not username:
        print("❌ Username is required!")
        sys.exit(1)

    email = args.email
    if not email:
        email = input("Email: ").strip()

    if not normalize_email(email):
        print(f"❌ Invalid email address: {email}")
        sys.exit(1)

    if store.user_exists(username=username, email=email):
        print("❌ A user with this username or email already exists!")
        sys.exit(1)

    password = getpass.getpass("Enter password: ")
    confirm = getpass.getpass("Confirm password: ")

    if password != confirm:
        print("❌ Passwords do not match!")
        sys.exit(1)

    if not password:
        print("❌ Password is required!")
        sys.exit(1)

    name = args.name
    if not name:
        name = input("Name (optional, press Enter to skip): ").strip() or None

    try:
        user = store.create_user(
            username=username,
            email=email,
            password=password,
            name=name,
            mobile_no=args.mobile,
            user_type=USER_TYPE_ADMIN if args.admin else USER_TYPE_USER
        )
    except DuplicateUserError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"❌ Failed to create user: {e}")
        sys.exit(1)

    print()
    print("✅ User created successfully!")
    print(f"   Username: {user.username}")
    print(f"   Email: {user.email}")
    print(f"   User ID: {user.user_id}")
    if user.name:
        print(f"   Name: {user.name}")
    print(f"   Admin: {'Yes' if user.user_type == USER_TYPE_ADMIN else 'No'}")


if __name__ == "__main__":
    main()
