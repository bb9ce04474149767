"""
Startup bootstrap: session table schema and default admin account.

Both routines may run concurrently from several instances against one
database. Creation is attempted directly and "already exists" errors are
treated as success, so there is no gap between checking and creating.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from app.core.database import (
    DUPLICATE_OBJECT,
    DUPLICATE_TABLE,
    INVALID_TABLE_DEFINITION,
    UNDEFINED_TABLE,
    UNIQUE_VIOLATION,
    sqlstate,
)
from app.core.security import hash_password
from app.models import SESSION_TABLE_NAME, User
from app.models.session_record import SESSION_EXPIRE_INDEX
from app.services.permissions import ADMIN_ROLE

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# SQLSTATEs meaning another run already created the object. 23505 comes from
# two concurrent CREATE ... IF NOT EXISTS racing on the pg_type/pg_class catalogs.
ALREADY_EXISTS_CODES = frozenset(
    {DUPLICATE_TABLE, DUPLICATE_OBJECT, INVALID_TABLE_DEFINITION, UNIQUE_VIOLATION}
)

SESSION_TABLE_STEPS: tuple[tuple[str, str], ...] = (
    (
        "create session table",
        f"""
        CREATE TABLE IF NOT EXISTS "{SESSION_TABLE_NAME}" (
            "sid" varchar NOT NULL COLLATE "default",
            "sess" json NOT NULL,
            "expire" timestamp(6) NOT NULL
        )
        """,
    ),
    (
        "add session primary key",
        f"""
        ALTER TABLE "{SESSION_TABLE_NAME}"
        ADD CONSTRAINT "{SESSION_TABLE_NAME}_pkey" PRIMARY KEY ("sid")
        NOT DEFERRABLE INITIALLY IMMEDIATE
        """,
    ),
    (
        "create session expire index",
        f"""
        CREATE INDEX IF NOT EXISTS "{SESSION_EXPIRE_INDEX}"
        ON "{SESSION_TABLE_NAME}" ("expire")
        """,
    ),
)

USERS_TABLE_EXISTS_SQL = text(
    """
    SELECT EXISTS (
        SELECT FROM information_schema.tables
        WHERE table_schema = current_schema()
        AND table_name = 'users'
    )
    """
)

DEFAULT_ADMIN_FULL_NAME = "Default Admin"


def _is_connectivity_error(exc: DBAPIError) -> bool:
    # Statement-level errors carry a SQLSTATE; lost/refused connections do not.
    return isinstance(exc, (OperationalError, InterfaceError)) and sqlstate(exc) is None


def initialize_session_table(engine: Engine | None = None) -> None:
    """
    Ensure the session table, its primary key and its expire index exist.

    Each step runs in its own transaction. "Already exists" errors are logged
    as warnings and treated as success; other SQL errors are logged and the
    remaining steps still run. Connectivity failures propagate to the caller.
    """
    if engine is None:
        from app.core.database import engine as default_engine

        engine = default_engine

    failed_steps: list[str] = []
    for step, statement in SESSION_TABLE_STEPS:
        try:
            with engine.begin() as conn:
                conn.execute(text(statement))
        except DBAPIError as e:
            if _is_connectivity_error(e):
                logger.error("Database unreachable while initializing session table: %s", e)
                raise
            code = sqlstate(e)
            if code in ALREADY_EXISTS_CODES:
                logger.warning(
                    "Session table bootstrap: %s skipped, object already exists (%s)",
                    step,
                    code,
                )
                continue
            logger.error("Session table bootstrap: %s failed (%s): %s", step, code, e)
            failed_steps.append(step)

    if failed_steps:
        logger.error(
            "Session table initialized with errors; failed steps: %s",
            ", ".join(failed_steps),
        )
    else:
        logger.info("Session table checked/initialized successfully")


def create_default_admin(
    db_factory: Callable[[], Session] | None = None,
    settings: Settings | None = None,
) -> bool:
    """
    Ensure at least one user with role 'admin' exists.

    Returns True if this call created the admin. Skips with a warning when the
    users table has not been migrated yet. On a unique violation the admin
    count is read again: an admin created by a concurrent instance counts as
    success, while a non-admin user holding the default username is logged as
    an error. Any other error is logged and re-raised.
    """
    if db_factory is None:
        from app.core.database import SessionLocal

        db_factory = SessionLocal
    if settings is None:
        from app.core.config import get_settings

        settings = get_settings()

    db = db_factory()
    try:
        if not db.scalar(USERS_TABLE_EXISTS_SQL):
            logger.warning(
                "Users table does not exist yet. Default admin cannot be created. "
                "Run migrations (alembic upgrade head) first."
            )
            return False

        admin_count = db.query(User).filter(User.role == ADMIN_ROLE).count()
        if admin_count > 0:
            logger.info("Admin user(s) already exist (%s), skipping default admin creation.", admin_count)
            return False

        password = settings.DEFAULT_ADMIN_PASSWORD.get_secret_value()
        db.add(
            User(
                username=settings.DEFAULT_ADMIN_USERNAME,
                password_hash=hash_password(password),
                role=ADMIN_ROLE,
                full_name=DEFAULT_ADMIN_FULL_NAME,
                email=settings.DEFAULT_ADMIN_EMAIL,
            )
        )
        db.commit()
        logger.info("Default admin user '%s' created.", settings.DEFAULT_ADMIN_USERNAME)
        if password == "admin":
            logger.warning("Default admin uses the built-in password; set DEFAULT_ADMIN_PASSWORD.")
        return True
    except IntegrityError as e:
        db.rollback()
        if sqlstate(e) == UNIQUE_VIOLATION:
            admin_count = db.query(User).filter(User.role == ADMIN_ROLE).count()
            if admin_count > 0:
                logger.warning("Default admin already created by another instance: %s", e.orig)
            else:
                logger.error(
                    "Default admin not created: username '%s' is taken by a non-admin user "
                    "and no admin exists. Set DEFAULT_ADMIN_USERNAME or promote a user.",
                    settings.DEFAULT_ADMIN_USERNAME,
                )
            return False
        logger.error("Error creating default admin user: %s", e)
        raise
    except DBAPIError as e:
        db.rollback()
        if sqlstate(e) == UNDEFINED_TABLE:
            logger.warning("Users table does not exist yet (checked again). Default admin cannot be created.")
            return False
        logger.error("Error creating default admin user: %s", e)
        raise
    finally:
        db.close()
