#!/usr/bin/env python3
"""
VaultKeep -- Password manager core.

Usage:
  python main.py generate
  python main.py generate --length 24 --no-symbols
  python main.py generate --length 12 --exclude-ambiguous --count 5
  python main.py create-user alice@example.com Alice Smith

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the store (default: sqlite file in the repo root)
  SECRET_KEY    JWT signing key. Not needed by these commands, but required
                unless DEBUG=true because settings are validated on load.
"""

import argparse
import getpass
import sys

from core.errors import VaultKeepError
from core.generator import MAX_LENGTH, MIN_LENGTH, generate_password


def _cmd_generate(args: argparse.Namespace) -> int:
    for _ in range(args.count):
        try:
            generated = generate_password(
                length=args.length,
                include_uppercase=not args.no_uppercase,
                include_lowercase=not args.no_lowercase,
                include_numbers=not args.no_numbers,
                include_symbols=not args.no_symbols,
                exclude_ambiguous=args.exclude_ambiguous,
            )
        except VaultKeepError as e:
            print(f"  [!] {e.message}")
            return 1
        print(f"  {generated.password}  ({generated.strength})")
    return 0


def _cmd_create_user(args: argparse.Namespace) -> int:
    # Imported here so `generate` works without touching the database.
    from auth.accounts import create_user, default_vault_name
    from auth.tokens import MAX_PASSWORD_BYTES, password_too_long
    from vault.store import VaultStore

    password = getpass.getpass("  Password: ")
    if len(password) < 8:
        print("  [!] Password must be at least 8 characters.")
        return 1
    if password_too_long(password):
        print(f"  [!] Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded.")
        return 1
    if password != getpass.getpass("  Confirm:  "):
        print("  [!] Passwords do not match.")
        return 1

    store = VaultStore(args.db_url) if args.db_url else VaultStore()
    try:
        user = create_user(store, args.email, password, args.first_name, args.last_name)
    except VaultKeepError as e:
        print(f"  [!] {e.message}")
        return 1
    finally:
        store.close()

    print(f"  Created user {user.id} <{user.email}> with vault \"{default_vault_name(user.first_name)}\".")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="vaultkeep",
        description="Password manager core: vaults, encrypted items, sharing and search.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py generate
  python main.py generate --length 32 --count 3
  python main.py generate --no-symbols --exclude-ambiguous
  python main.py create-user alice@example.com Alice Smith
  DATABASE_URL=sqlite:////tmp/vk.db python main.py create-user bob@example.com Bob Jones
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    gen = sub.add_parser("generate", help="Generate random passwords")
    gen.add_argument(
        "--length",
        type=int,
        default=16,
        metavar="N",
        help=f"Password length, {MIN_LENGTH}-{MAX_LENGTH} (default: 16)",
    )
    gen.add_argument("--count", type=int, default=1, metavar="N", help="How many passwords to print (default: 1)")
    gen.add_argument("--no-uppercase", action="store_true", help="Leave out A-Z")
    gen.add_argument("--no-lowercase", action="store_true", help="Leave out a-z")
    gen.add_argument("--no-numbers", action="store_true", help="Leave out 0-9")
    gen.add_argument("--no-symbols", action="store_true", help="Leave out punctuation")
    gen.add_argument(
        "--exclude-ambiguous",
        action="store_true",
        help="Leave out characters that are easy to confuse (0 O 1 l I)",
    )
    gen.set_defaults(func=_cmd_generate)

    create = sub.add_parser("create-user", help="Register a user with a default vault")
    create.add_argument("email", help="Login email (must be unique)")
    create.add_argument("first_name", help="First name; also names the default vault")
    create.add_argument("last_name", help="Last name")
    create.add_argument("--db-url", default=None, metavar="URL", help="Override DATABASE_URL for this run")
    create.set_defaults(func=_cmd_create_user)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
