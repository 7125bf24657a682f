"""
Create the users, production_settings and orders tables.

Usage:
    python migrations/create_production_tables.py [--database-url URL]
        [--admin-username NAME --admin-password PASSWORD]

The script is idempotent and safe to run multiple times. It inspects the current
schema and only creates what is missing. Pass admin credentials to create the
first admin user, who can then force queue recalculations.
"""

import argparse
import os
import sys

from dotenv import load_dotenv

from sqlalchemy import create_engine, inspect, select
from sqlalchemy.exc import OperationalError, ProgrammingError

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_SQLITE_PATH = os.path.join(ROOT_DIR, "orders.sqlite")

sys.path.insert(0, ROOT_DIR)

from orderqueue.auth.utils import hash_password
from orderqueue.db_config import normalize_database_url
from orderqueue.models import db

# Load environment variables from a .env file if present
load_dotenv()

TABLES = ["users", "production_settings", "orders"]


def normalize_sqlite_path(path: str) -> str:
    """Return a SQLAlchemy-friendly SQLite URL for the given path."""
    if not os.path.isabs(path):
        path = os.path.join(ROOT_DIR, path)
    return f"sqlite:///{path}"


def infer_database_url(cli_url: str = None) -> str:
    """Figure out which database to hit, honoring CLI and environment defaults."""
    candidates = [
        cli_url,
        os.environ.get("DATABASE_URL"),
        os.environ.get("PRODUCTION_DATABASE_URL"),
        os.environ.get("SANDBOX_DATABASE_URL"),
        os.environ.get("LOCAL_DATABASE_URL"),
    ]

    for value in candidates:
        if not value:
            continue

        value = normalize_database_url(value.strip())
        if value.startswith(("postgresql://", "mysql://", "mariadb://", "sqlite://")):
            return value

        # Treat anything else as a filesystem path to a SQLite DB
        return normalize_sqlite_path(value)

    # Fall back to local SQLite file
    return normalize_sqlite_path(DEFAULT_SQLITE_PATH)


def table_exists(bind, table_name: str) -> bool:
    """Check if a given table exists."""
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def index_exists(bind, table_name: str, index_name: str) -> bool:
    """Check if a named index exists on the specified table."""
    inspector = inspect(bind)
    return any(idx["name"] == index_name for idx in inspector.get_indexes(table_name))


def create_admin_user(conn, username: str, password: str) -> None:
    users = db.metadata.tables["users"]
    existing = conn.execute(select(users.c.id).where(users.c.username == username)).first()
    if existing:
        print(f"✓ User '{username}' already exists.")
        return

    conn.execute(users.insert().values(
        username=username,
        password_hash=hash_password(password),
        full_name=None,
        is_admin=True,
        is_active=True,
    ))
    print(f"✓ Created admin user '{username}'.")


def migrate(database_url: str = None, admin_username: str = None, admin_password: str = None) -> bool:
    """Create missing tables and indexes, optionally adding an admin user."""
    db_url = infer_database_url(database_url)
    print(f"Connecting to database: {db_url}")

    engine = create_engine(db_url)

    try:
        with engine.begin() as conn:
            for table_name in TABLES:
                table = db.metadata.tables[table_name]
                if not table_exists(conn, table_name):
                    print(f"Creating '{table_name}' table...")
                    table.create(conn)
                    print(f"✓ Successfully created '{table_name}' table.")
                else:
                    print(f"✓ Table '{table_name}' already exists.")

            for index in db.metadata.tables["orders"].indexes:
                if not index_exists(conn, "orders", index.name):
                    print(f"Creating index '{index.name}'...")
                    index.create(conn)

            if admin_username and admin_password:
                create_admin_user(conn, admin_username, admin_password)

        print("✓ Migration completed successfully.")
        return True

    except (OperationalError, ProgrammingError) as exc:
        print(f"✗ Database error during migration: {exc}")
        import traceback
        traceback.print_exc()
        return False
    finally:
        engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Create the users, production_settings and orders tables."
    )
    parser.add_argument(
        "--database-url",
        help="Override database URL (otherwise inferred from env or defaults).",
    )
    parser.add_argument("--admin-username", help="Create an admin user with this username.")
    parser.add_argument("--admin-password", help="Password for --admin-username.")
    args = parser.parse_args()

    if bool(args.admin_username) != bool(args.admin_password):
        parser.error("--admin-username and --admin-password must be given together")

    success = migrate(args.database_url, args.admin_username, args.admin_password)
    sys.exit(0 if success else 1)
