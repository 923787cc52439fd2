"""
Jobs Repository.

Responsibilities:
- CRUD operations for jobs table.
- Assemble statements with the SQL fragment builders.
- Map uniqueness violations to ConflictError, missing rows to NotFoundError.

Non-Responsibilities:
- No request validation beyond the set of updatable fields.
- No retries.

Invariant:
Values are always bound positionally; only fixed column names reach SQL text.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..database import Database
from ..errors import ConflictError, NotFoundError, ValidationError
from ..logger import get_logger
from ..sql import JobFilter, sql_for_job_filter, sql_for_partial_update

logger = get_logger()

UPDATABLE_FIELDS = frozenset({"title", "salary", "equity"})
JS_TO_SQL = {"companyHandle": "company_handle"}

PUBLIC_COLUMNS = 'title, salary, equity, company_handle AS "companyHandle"'


UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Classify by driver error code; fall back to the first line of the message."""
    orig = exc.orig
    # psycopg2 sets pgcode, psycopg 3 sets sqlstate
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname:
        return errorname == "SQLITE_CONSTRAINT_UNIQUE"

    # Later lines (postgres DETAIL) echo row values.
    lines = str(orig).splitlines()
    first_line = lines[0] if lines else ""
    return (
        first_line.startswith("UNIQUE constraint failed")
        or "violates unique constraint" in first_line
    )


def _to_job(row: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize a row: equity is a decimal string whatever the driver returns."""
    job = dict(row)
    if job.get("equity") is not None:
        job["equity"] = str(Decimal(str(job["equity"])))
    return job


class JobRepository:
    """Data access for the jobs table."""

    def __init__(self, db: Database):
        self.db = db

    def _fail(self, operation: str, exc: Exception, **context) -> None:
        logger.record_operation_failure(operation, type(exc).__name__)
        logger.warning(f"Job {operation} failed", error=str(exc), **context)

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a job and return its public fields.

        Args:
            data: {title, salary, equity, companyHandle}

        Returns:
            {title, salary, equity, companyHandle}

        Raises:
            ConflictError: If a job with the same title exists
        """
        logger.record_operation("create")
        title = data["title"]
        try:
            rows = self.db.query(
                f"""INSERT INTO jobs (title, salary, equity, company_handle)
                    VALUES ($1, $2, $3, $4)
                    RETURNING {PUBLIC_COLUMNS}""",
                [title, data.get("salary"), data.get("equity"), data["companyHandle"]],
            )
        except IntegrityError as e:
            if not _is_unique_violation(e):
                self._fail("create", e, title=title)
                raise
            err = ConflictError(f"Duplicate job: {title}")
            self._fail("create", err, title=title)
            raise err from e

        job = _to_job(rows[0])
        logger.info("Job created", title=title, company_handle=job["companyHandle"])
        return job

    def find_all(self, job_filter: Optional[JobFilter] = None) -> List[Dict[str, Any]]:
        """
        List jobs matching the filter, ordered by title.

        Filters:
            title_like: case-insensitive substring of the title
            min_salary: salary at least this much
            has_equity: if true, only jobs with non-zero equity; if false
                or absent, jobs regardless of equity

        Returns:
            [{id, title, salary, equity, companyHandle}, ...]
        """
        logger.record_operation("find_all")
        where, values = sql_for_job_filter(job_filter)
        rows = self.db.query(
            f"""SELECT id, {PUBLIC_COLUMNS}
                FROM jobs
                {where}
                ORDER BY title""",
            values,
        )
        logger.debug("Jobs listed", count=len(rows), params=len(values))
        return [_to_job(row) for row in rows]

    def get(self, job_id: int) -> Dict[str, Any]:
        """
        Fetch one job by id.

        Returns:
            {id, title, salary, equity, companyHandle}

        Raises:
            NotFoundError: If no job has this id
        """
        logger.record_operation("get")
        rows = self.db.query(
            f"""SELECT id, {PUBLIC_COLUMNS}
                FROM jobs
                WHERE id = $1""",
            [job_id],
        )
        if not rows:
            err = NotFoundError(f"No job: {job_id}")
            self._fail("get", err, job_id=job_id)
            raise err
        return _to_job(rows[0])

    def update(self, job_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update a job; only the fields present in data change.

        Data can include: {title, salary, equity}

        Returns:
            {title, salary, equity, companyHandle}

        Raises:
            ValidationError: If data is empty or names other fields
            NotFoundError: If no job has this id
            ConflictError: If the new title is taken
        """
        logger.record_operation("update")
        unknown = sorted(k for k in data if k not in UPDATABLE_FIELDS)
        if unknown:
            err = ValidationError(f"Cannot update fields: {', '.join(unknown)}")
            self._fail("update", err, job_id=job_id)
            raise err

        try:
            set_cols, values = sql_for_partial_update(data, JS_TO_SQL)
        except ValidationError as e:
            self._fail("update", e, job_id=job_id)
            raise

        id_var_idx = f"${len(values) + 1}"
        try:
            rows = self.db.query(
                f"""UPDATE jobs
                    SET {set_cols}
                    WHERE id = {id_var_idx}
                    RETURNING {PUBLIC_COLUMNS}""",
                [*values, job_id],
            )
        except IntegrityError as e:
            if not _is_unique_violation(e):
                self._fail("update", e, job_id=job_id)
                raise
            err = ConflictError(f"Duplicate job: {data.get('title')}")
            self._fail("update", err, job_id=job_id)
            raise err from e

        if not rows:
            err = NotFoundError(f"No job: {job_id}")
            self._fail("update", err, job_id=job_id)
            raise err

        logger.info("Job updated", job_id=job_id, fields=list(data.keys()))
        return _to_job(rows[0])

    def remove(self, job_id: int) -> None:
        """
        Delete a job.

        Raises:
            NotFoundError: If no job has this id
        """
        logger.record_operation("remove")
        rows = self.db.query(
            """DELETE
               FROM jobs
               WHERE id = $1
               RETURNING id""",
            [job_id],
        )
        if not rows:
            err = NotFoundError(f"No job: {job_id}")
            self._fail("remove", err, job_id=job_id)
            raise err
        logger.info("Job removed", job_id=job_id)
