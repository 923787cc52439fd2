"""
SQL fragment builders.

Both builders emit text with positional `$n` placeholders and return the
values to bind alongside it. Values are never interpolated into the SQL;
column names are, so callers only pass field names from a fixed schema.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, NamedTuple, Optional

from .errors import ValidationError


class SqlFragment(NamedTuple):
    """A piece of SQL text and the positional values it binds."""

    clause: str
    values: List[Any]


def sql_for_partial_update(
    data_to_update: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]] = None,
) -> SqlFragment:
    """
    Build the SET clause for a partial update.

    Args:
        data_to_update: Field name -> new value, in the order to bind
        js_to_sql: Field name -> column name for fields whose column
            differs; fields not listed use their own name

    Returns:
        SqlFragment, e.g. for {"firstName": "Aliya", "age": 32}:
        clause '"firstName"=$1, "age"=$2', values ["Aliya", 32]

    Raises:
        ValidationError: If data_to_update is empty
    """
    keys = list(data_to_update.keys())
    if not keys:
        raise ValidationError("No data")

    js_to_sql = js_to_sql or {}
    cols = [
        f'"{js_to_sql.get(col_name, col_name)}"=${idx}'
        for idx, col_name in enumerate(keys, start=1)
    ]

    return SqlFragment(", ".join(cols), [data_to_update[k] for k in keys])


@dataclass(frozen=True)
class JobFilter:
    """
    Optional predicates for listing jobs.

    None means the predicate is absent. has_equity=False is accepted and,
    like None, places no constraint on equity.
    """

    title_like: Optional[str] = None
    min_salary: Optional[int] = None
    has_equity: Optional[bool] = None


def _like_pattern(term: str) -> str:
    # Wildcards typed by the user match literally.
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def sql_for_job_filter(job_filter: Optional[JobFilter] = None) -> SqlFragment:
    """
    Build the WHERE clause for a job listing.

    Predicates are evaluated in a fixed order (title, salary, equity) and
    joined with AND. Placeholders are numbered from $1 in that order.
    The clause is an empty string when no predicate applies.
    """
    if job_filter is None:
        return SqlFragment("", [])

    conditions: List[str] = []
    values: List[Any] = []

    if job_filter.title_like is not None:
        values.append(_like_pattern(job_filter.title_like))
        conditions.append(f"LOWER(title) LIKE LOWER(${len(values)}) ESCAPE '\\'")

    if job_filter.min_salary is not None:
        values.append(job_filter.min_salary)
        conditions.append(f"salary >= ${len(values)}")

    if job_filter.has_equity:
        conditions.append("equity > 0")

    if not conditions:
        return SqlFragment("", [])

    return SqlFragment("WHERE " + " AND ".join(conditions), values)
