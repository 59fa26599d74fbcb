#!/usr/bin/env python3
"""
Polly operator commands.

Usage:
    python manage.py init-db                      # Create tables
    python manage.py grant-admin user@example.com # Set the admin flag
    python manage.py revoke-admin user@example.com
    python manage.py serve --port 8000            # Run the API with uvicorn

The admin flag is server-controlled: no HTTP endpoint can set it, so this
script is the only way to create an admin.
"""
import argparse
import sys

from dotenv import load_dotenv, find_dotenv

env_path = find_dotenv()
if env_path:
    load_dotenv(env_path, override=False)


def init_db(args):
    from polly.db import Base, engine

    Base.metadata.create_all(bind=engine)
    print("Tables created.")
    return 0


def set_admin(args, is_admin):
    from polly.auth.provider import set_admin_flag
    from polly.core.errors import NotFoundError
    from polly.db import get_db_context
    from polly.store import SqlRowStore

    with get_db_context() as db:
        try:
            user = set_admin_flag(SqlRowStore(db), args.email, is_admin)
        except NotFoundError:
            print(f"No user with email {args.email}")
            return 1

    print(f"{user.email}: isAdmin={user.is_admin}")
    return 0


def serve(args):
    import uvicorn

    uvicorn.run("polly.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Polly operator commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")

    grant = sub.add_parser("grant-admin", help="Give a user the admin role")
    grant.add_argument("email")

    revoke = sub.add_parser("revoke-admin", help="Take the admin role away")
    revoke.add_argument("email")

    run = sub.add_parser("serve", help="Run the API server")
    run.add_argument("--host", default="127.0.0.1")
    run.add_argument("--port", type=int, default=8000)
    run.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        return init_db(args)
    if args.command == "grant-admin":
        return set_admin(args, True)
    if args.command == "revoke-admin":
        return set_admin(args, False)
    return serve(args)


if __name__ == "__main__":
    sys.exit(main())
