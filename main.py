#!/usr/bin/env python3
"""
CourierDesk -- staff authentication, user directory and shipment statistics API.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 5000 --reload
  python main.py seed
  python main.py create-user alice --role courier --full-name "Alice Smith"

Environment variables (see core/config.py for the full list):
  SECRET_KEY         JWT signing key. Unset = insecure placeholder (dev only).
  DATABASE_URL       SQLAlchemy URL for the user and shipment tables.
  SEED_DEFAULT_USERS Create admin/courier1/courier2 on startup (default true).
"""

import argparse
import getpass
import sys

from sqlalchemy.exc import IntegrityError

from auth.models import ROLES, User
from auth.passwords import hash_password
from auth.seed import seed_default_users
from auth.store import UserStore
from core.config import get_settings


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _cmd_seed(args: argparse.Namespace) -> int:
    store = UserStore(get_settings().database_url)
    try:
        created = seed_default_users(store)
    finally:
        store.close()
    if created:
        print(f"  Created: {', '.join(created)}")
    else:
        print("  All default users already exist.")
    return 0


def _cmd_create_user(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("  [!] Password must not be empty.")
        return 1
    store = UserStore(get_settings().database_url)
    try:
        user_id = store.create_user(
            User(
                username=args.username,
                hashed_password=hash_password(password),
                role=args.role,
                full_name=args.full_name or "",
                email=args.email,
                phone=args.phone,
            )
        )
    except IntegrityError:
        print(f"  [!] Username '{args.username}' is already taken.")
        return 1
    finally:
        store.close()
    print(f"  Created {args.role} '{args.username}' (id={user_id})")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CourierDesk API server and admin utilities.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")
    serve.set_defaults(func=_cmd_serve)

    seed = sub.add_parser("seed", help="Create the default admin and courier accounts if missing")
    seed.set_defaults(func=_cmd_seed)

    create = sub.add_parser("create-user", help="Create a staff account")
    create.add_argument("username")
    create.add_argument("--role", choices=ROLES, default="courier")
    create.add_argument("--password", help="Prompted for when omitted")
    create.add_argument("--full-name")
    create.add_argument("--email")
    create.add_argument("--phone")
    create.set_defaults(func=_cmd_create_user)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
