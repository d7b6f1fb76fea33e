import argparse
import getpass
import logging
import sys
from pathlib import Path

from src.adapters.auth.crypto import hash_password
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import Settings
from src.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.db_path, settings.migrations_dir)

    if args.status:
        pending = migrator.pending()
        print(f"Pending migrations: {len(pending)}")
        for filename in pending:
            print(f" - {filename}")
        return

    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def handle_hash_password(args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Admin password: ")
    if not password:
        logger.error("Password must not be empty.")
        sys.exit(1)
    # Goes into ADMIN_PASSWORD_HASH
    print(hash_password(password))


def handle_check_rules(settings: Settings) -> None:
    try:
        rules = load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Rules invalid: %s", e)
        sys.exit(1)
    print(f"Rules OK ({settings.rules_path}, version {rules.rules_version}).")


def handle_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("src.api.main:create_app", factory=True, host=args.host, port=args.port)


def main() -> None:
    parser = argparse.ArgumentParser(description="Analytics API CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending SQL migrations")
    migrate_parser.add_argument("--status", action="store_true", help="List pending only")

    # hash-password
    hash_parser = subparsers.add_parser(
        "hash-password", help="Print an argon2 hash for ADMIN_PASSWORD_HASH"
    )
    hash_parser.add_argument("--password", help="Password (prompted when omitted)")

    # check-rules
    subparsers.add_parser("check-rules", help="Validate the rules file")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API with uvicorn")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "hash-password":
        handle_hash_password(args)
    elif args.command == "check-rules":
        handle_check_rules(settings)
    elif args.command == "serve":
        handle_serve(args)


if __name__ == "__main__":
    main()
