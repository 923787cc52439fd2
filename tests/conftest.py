"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List

from jobboard.database import Database, init_database
from jobboard.repositories import JobRepository


SEED_JOBS = [
    ("J1", 1, "0.3", "c1"),
    ("J2", 2, "0.2", "c2"),
    ("J3", 3, "0.1", "c2"),
]


@pytest.fixture
def database_url(tmp_path) -> str:
    """URL of a file-backed SQLite database in a temp directory."""
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def db(database_url):
    """Initialized, empty database."""
    database = Database(init_database(database_url))
    yield database
    database.dispose()


@pytest.fixture
def seeded_db(db):
    """Database with companies c1, c2 and jobs J1-J3."""
    db.query(
        "INSERT INTO companies (handle, name, num_employees) VALUES ($1, $2, $3), ($4, $5, $6)",
        ["c1", "C1", 1, "c2", "C2", 2],
    )
    for title, salary, equity, handle in SEED_JOBS:
        db.query(
            "INSERT INTO jobs (title, salary, equity, company_handle) VALUES ($1, $2, $3, $4)",
            [title, salary, equity, handle],
        )
    return db


@pytest.fixture
def jobs(seeded_db) -> JobRepository:
    """Repository over the seeded database."""
    return JobRepository(seeded_db)


@pytest.fixture
def job_ids(seeded_db) -> Dict[str, int]:
    """Map of seeded job title to its id."""
    rows = seeded_db.query("SELECT id, title FROM jobs")
    return {row["title"]: row["id"] for row in rows}


@pytest.fixture
def seed_jobs() -> List[Dict[str, Any]]:
    """Seeded jobs in their public shape, ordered by title."""
    return [
        {"title": title, "salary": salary, "equity": equity, "companyHandle": handle}
        for title, salary, equity, handle in SEED_JOBS
    ]


class RecordingDatabase:
    """Stand-in for Database that records statements and replays canned rows."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.statements = []

    def query(self, sql, params=()):
        self.statements.append((sql, list(params)))
        if self.error is not None:
            raise self.error
        return self.rows


@pytest.fixture
def recording_db() -> RecordingDatabase:
    return RecordingDatabase()
