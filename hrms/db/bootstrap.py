"""
Idempotent schema bootstrap, run once at startup.

Every step is safe to re-run against a database that already has some or all
objects.  Each step runs in its own transaction so one failure does not abort
the rest.  A unique violation on an internal ``*_seq`` object (two processes
creating the same table at once) is benign; anything else is logged and the
routine carries on, leaving the server to start against the existing schema.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import CheckConstraint, inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateColumn, CreateIndex

from hrms.db.base import Base

# Ensure all models are imported so metadata can see them
from hrms.models.accounting import AccountingEntry  # noqa: F401
from hrms.models.activity import Activity  # noqa: F401
from hrms.models.employee import Attendance, Employee  # noqa: F401
from hrms.models.leave import Leave  # noqa: F401
from hrms.models.payroll import Payroll  # noqa: F401
from hrms.models.performance import Performance  # noqa: F401
from hrms.models.recruitment import JobPosting  # noqa: F401
from hrms.models.setting import SystemSetting  # noqa: F401
from hrms.models.user import PasswordResetToken, User  # noqa: F401

logger = logging.getLogger(__name__)

# Columns from older revisions that no longer exist on the models.
RETIRED_COLUMNS: dict[str, tuple[str, ...]] = {
    "performance": (
        "overall_performance",
        "productivity",
        "quality",
        "communication",
        "teamwork",
        "punctuality",
        "comments",
        "reviewed_by",
    ),
}


# ── Steps ───────────────────────────────────────────────────────────
def _create_tables(sync_conn: Connection) -> None:
    Base.metadata.create_all(sync_conn, checkfirst=True)


def _add_missing_columns(sync_conn: Connection) -> None:
    inspector = inspect(sync_conn)
    existing_tables = set(inspector.get_table_names())
    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            continue
        live = {c["name"] for c in inspector.get_columns(table.name)}
        for column in table.columns:
            if column.name in live:
                continue
            if not column.nullable and column.server_default is None:
                logger.warning(
                    "Cannot add NOT NULL column %s.%s without a default; skipped",
                    table.name,
                    column.name,
                )
                continue
            ddl = CreateColumn(column).compile(dialect=sync_conn.dialect)
            sync_conn.execute(text(f"ALTER TABLE {table.name} ADD COLUMN {ddl}"))
            logger.info("Added column %s.%s", table.name, column.name)


def _drop_retired_columns(sync_conn: Connection) -> None:
    inspector = inspect(sync_conn)
    existing_tables = set(inspector.get_table_names())
    for table_name, columns in RETIRED_COLUMNS.items():
        if table_name not in existing_tables:
            continue
        live = {c["name"] for c in inspector.get_columns(table_name)}
        for column in columns:
            if column in live:
                sync_conn.execute(text(f"ALTER TABLE {table_name} DROP COLUMN {column}"))
                logger.info("Dropped retired column %s.%s", table_name, column)


def _refresh_check_constraints(sync_conn: Connection) -> None:
    """Drop-then-recreate named CHECK constraints (PostgreSQL only).

    Lets an allowed-value list widen on databases created by older revisions.
    """
    if sync_conn.dialect.name != "postgresql":
        return
    for table in Base.metadata.sorted_tables:
        for constraint in table.constraints:
            if not isinstance(constraint, CheckConstraint) or not constraint.name:
                continue
            sqltext = constraint.sqltext.compile(
                dialect=sync_conn.dialect, compile_kwargs={"literal_binds": True}
            )
            sync_conn.execute(
                text(f"ALTER TABLE {table.name} DROP CONSTRAINT IF EXISTS {constraint.name}")
            )
            sync_conn.execute(
                text(
                    f"ALTER TABLE {table.name} ADD CONSTRAINT {constraint.name} "
                    f"CHECK ({sqltext})"
                )
            )


def _create_missing_indexes(sync_conn: Connection) -> None:
    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            sync_conn.execute(CreateIndex(index, if_not_exists=True))


STEPS: list[tuple[str, Callable[[Connection], None]]] = [
    ("create_tables", _create_tables),
    ("add_missing_columns", _add_missing_columns),
    ("drop_retired_columns", _drop_retired_columns),
    ("refresh_check_constraints", _refresh_check_constraints),
    ("create_missing_indexes", _create_missing_indexes),
]


# ── Runner ──────────────────────────────────────────────────────────
def _is_benign(exc: Exception) -> bool:
    return isinstance(exc, IntegrityError) and "_seq" in str(exc.orig)


async def _run_step(
    engine: AsyncEngine, name: str, step: Callable[[Connection], None]
) -> bool:
    try:
        async with engine.begin() as conn:
            await conn.run_sync(step)
    except Exception as exc:
        if _is_benign(exc):
            logger.info("Bootstrap step %s raced another process; ignoring", name)
            return True
        logger.error("Bootstrap step %s failed: %s", name, exc)
        return False
    return True


async def bootstrap_schema(engine: AsyncEngine) -> list[str]:
    """Bring the database schema up to date.  Never raises.

    Returns the names of the steps that failed (empty on success).
    """
    failed: list[str] = []
    for name, step in STEPS:
        if not await _run_step(engine, name, step):
            failed.append(name)
    if failed:
        logger.warning(
            "Schema bootstrap finished with failures in %s; assuming existing tables are correct",
            ", ".join(failed),
        )
    else:
        logger.info("Database schema initialised")
    return failed
