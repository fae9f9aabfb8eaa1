"""
Alembic environment for the POS schema.

- DB_URL from the environment (or .env), SQLite file under ./data otherwise
- Migrations run through the async engine, same driver as the app
- SQLite uses batch mode so ALTER TABLE operations recreate the table
"""

import asyncio
import os
from logging.config import fileConfig
from pathlib import Path
from sqlalchemy import pool, event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context
from dotenv import load_dotenv

# Every model must be imported so autogenerate sees its table
from pos_api.core.db.base import Base
from pos_api.modules.users.models import User  # noqa: F401
from pos_api.modules.items.models import Item  # noqa: F401
from pos_api.modules.transactions.models import Transaction, TransactionItem  # noqa: F401
from pos_api.modules.cash_sessions.models import CashSession  # noqa: F401
from pos_api.modules.audit_logs.models import AuditLog  # noqa: F401
from pos_api.modules.attendance.models import Attendance  # noqa: F401

load_dotenv()

config = context.config

db_url = os.getenv("DB_URL")
if not db_url:
    data_dir = Path(__file__).resolve().parent.parent / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    db_url = f"sqlite+aiosqlite:///{data_dir / 'pos.db'}"

config.set_main_option("sqlalchemy.url", db_url)
is_sqlite = db_url.startswith("sqlite")

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(
        config.get_main_option("sqlalchemy.url"), poolclass=pool.NullPool
    )

    if is_sqlite:
        @event.listens_for(connectable.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=30000")
            cursor.close()

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
