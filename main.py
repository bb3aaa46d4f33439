"""Command-line interface for the authentication service."""

from __future__ import annotations
import argparse
import logging
import sys
from getpass import getpass
from typing import Sequence

from authservice.config import Settings, load_settings
from authservice.database import Database
from authservice.errors import AuthServiceError, ConfigurationError, ValidationError
from authservice.models import RegistrationRequest
from authservice.service import build_service

logger = logging.getLogger("authservice.main")

_KNOWN_COMMANDS = {"serve", "init-db", "create-user", "list-users"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Authentication service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the user database")
    subparsers.add_parser("list-users", help="List registered accounts")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP authentication service")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )

    create_parser = subparsers.add_parser("create-user", help="Register a new account")
    create_parser.add_argument("name", help="Display name for the user")
    create_parser.add_argument("email", help="Unique email address for login")

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in _KNOWN_COMMANDS:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    from authservice.application import create_application
    import uvicorn

    logger.info("Starting authentication API on http://%s:%s", host, port)
    app = create_application(settings, database=database)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass("Password: ")
        if not password.strip():
            print("Password must not be blank. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def _create_user(settings: Settings, database: Database, name: str, email: str) -> int:
    password = _prompt_for_password()
    if password is None:
        print("Aborted creating user.", file=sys.stderr)
        return 1

    service = build_service(settings, database=database)
    try:
        service.register(RegistrationRequest(name=name, email=email, password=password))
    except ValidationError as exc:
        for error in exc.errors:
            print(f"Error: {error.field} {error.message}", file=sys.stderr)
        return 1
    except AuthServiceError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    user = database.find_by_email(email)
    if user is not None:
        print(f"Created user #{user.id}: {user.name} <{user.email}>")
    return 0


def _list_users(database: Database) -> None:
    users = database.list_users()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 80)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
        print(f"{user.id:>4}  {user.name:<24}  {user.email:<32}  {created}")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    args = _parse_args(argv)
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(settings=settings, database=database, host=args.host, port=args.port)
    elif args.command == "create-user":
        return _create_user(settings, database, args.name, args.email)
    elif args.command == "list-users":
        _list_users(database)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
