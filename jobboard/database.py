"""
Database schema, connection management and the storage interface.

Uses SQLAlchemy for schema declaration and statement execution. SQLite
backs development and tests; any SQLAlchemy URL works.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Sequence

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from .logger import get_logger

logger = get_logger()

Base = declarative_base()

_PLACEHOLDER = re.compile(r"\$(\d+)")


class Company(Base):
    """Company a job belongs to. Managed outside this package."""

    __tablename__ = "companies"

    handle = Column(String(25), primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    num_employees = Column(Integer, CheckConstraint("num_employees >= 0"))
    description = Column(Text)
    logo_url = Column(Text)


class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False, unique=True)
    salary = Column(Integer, CheckConstraint("salary >= 0"))
    equity = Column(Numeric, CheckConstraint("equity <= 1.0"))
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connection(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Built-in LOWER only folds ASCII.
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def get_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    For file-backed SQLite the parent directory is created. Every SQLite
    connection enforces foreign keys and folds case with a Unicode-aware
    LOWER.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy engine
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url)
    if is_sqlite:
        event.listen(engine, "connect", _configure_sqlite_connection)
    return engine


def init_database(database_url: str) -> Engine:
    """
    Initialize database and create tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        The engine the tables were created with
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    logger.info("Database initialized", url=engine.url.render_as_string(hide_password=True))
    return engine


def get_session(database_url: str):
    """
    Get database session.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy session
    """
    engine = get_engine(database_url)
    Session = sessionmaker(bind=engine)
    return Session()


def bind_positional(sql: str, params: Sequence[Any]):
    """
    Rewrite `$n` placeholders to named binds.

    Returns the rewritten SQL and the bind dict. Raises ValueError when a
    placeholder has no matching parameter.
    """
    def replace(match):
        idx = int(match.group(1))
        if idx < 1 or idx > len(params):
            raise ValueError(
                f"Placeholder ${idx} has no parameter ({len(params)} given)"
            )
        return f":p{idx}"

    named_sql = _PLACEHOLDER.sub(replace, sql)
    return named_sql, {f"p{idx}": value for idx, value in enumerate(params, start=1)}


class Database:
    """
    Query-execution capability used by the repositories.

    Each call runs in its own transaction and either commits fully or
    rolls back. SQLAlchemy errors propagate unmodified.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "Database":
        return cls(get_engine(database_url))

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Execute one statement written with `$n` placeholders.

        Args:
            sql: SQL text using $1..$n for positional parameters
            params: Values for the placeholders, in order

        Returns:
            Rows as dicts keyed by column name; empty if the statement
            returns no rows
        """
        named_sql, binds = bind_positional(sql, params)
        logger.debug("Executing statement", sql=" ".join(sql.split()), params=len(binds))

        with self.engine.begin() as conn:
            result = conn.execute(text(named_sql), binds)
            rows = [dict(row._mapping) for row in result] if result.returns_rows else []

        logger.record_query(len(rows))
        return rows

    def dispose(self) -> None:
        self.engine.dispose()
