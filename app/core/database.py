"""PostgreSQL connection and session management."""

from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

# PostgreSQL SQLSTATE codes handled explicitly by the application.
UNIQUE_VIOLATION = "23505"
UNDEFINED_TABLE = "42P01"
DUPLICATE_TABLE = "42P07"
DUPLICATE_OBJECT = "42710"
INVALID_TABLE_DEFINITION = "42P16"

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def sqlstate(exc: BaseException) -> str | None:
    """Return the PostgreSQL SQLSTATE of a wrapped DBAPI error, if any."""
    orig = exc.orig if isinstance(exc, DBAPIError) else exc
    # psycopg2 exposes pgcode; psycopg 3 exposes sqlstate.
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
