from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping

from .errors import ValidationError
from .sql import JobFilter

NEW_JOB_FIELDS = ["title", "salary", "equity", "companyHandle"]
UPDATABLE_JOB_FIELDS = ["title", "salary", "equity"]
FILTER_FIELDS = ["titleLike", "minSalary", "hasEquity"]

MAX_TITLE_LENGTH = 200


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_int(v: Any) -> bool:
    # bool is an int subclass; True is not a salary
    return isinstance(v, int) and not isinstance(v, bool)


def _check_unknown(data: Mapping[str, Any], allowed: List[str]) -> List[str]:
    return [f"Unknown field: {k}" for k in data if k not in allowed]


def _check_title(data: Mapping[str, Any]) -> List[str]:
    title = data["title"]
    if not _is_non_empty_str(title):
        return ["Field 'title' must be a non-empty string"]
    if len(title) > MAX_TITLE_LENGTH:
        return [f"Field 'title' length must be at most {MAX_TITLE_LENGTH}"]
    return []


def _check_salary(data: Mapping[str, Any]) -> List[str]:
    salary = data["salary"]
    if salary is None:
        return []
    if not _is_int(salary) or salary < 0:
        return ["Field 'salary' must be a non-negative integer"]
    return []


def _check_equity(data: Mapping[str, Any]) -> List[str]:
    equity = data["equity"]
    if equity is None:
        return []
    if isinstance(equity, bool) or not isinstance(equity, (str, int, float, Decimal)):
        return ["Field 'equity' must be a decimal string or number"]
    try:
        value = Decimal(str(equity))
    except InvalidOperation:
        return ["Field 'equity' must be a decimal string or number"]
    if not value.is_finite() or value < 0 or value > 1:
        return ["Field 'equity' must be between 0 and 1"]
    return []


_FIELD_CHECKS = {
    "title": _check_title,
    "salary": _check_salary,
    "equity": _check_equity,
}


def validate_new_job(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a job to create.
    Empty list means valid.
    """
    errors = _check_unknown(data, NEW_JOB_FIELDS)

    if "title" not in data:
        errors.append("Missing required field: title")
    if "companyHandle" not in data:
        errors.append("Missing required field: companyHandle")
    elif not _is_non_empty_str(data["companyHandle"]):
        errors.append("Field 'companyHandle' must be a non-empty string")

    for field, check in _FIELD_CHECKS.items():
        if field in data:
            errors.extend(check(data))

    return errors


def validate_job_update(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a partial update.
    Only title, salary and equity may change.
    """
    if not data:
        return ["No data"]

    errors = _check_unknown(data, UPDATABLE_JOB_FIELDS)
    for field, check in _FIELD_CHECKS.items():
        if field in data:
            errors.extend(check(data))
    return errors


def _parse_bool(v: Any):
    if isinstance(v, bool):
        return v
    if isinstance(v, str) and v.strip().lower() in ("true", "false"):
        return v.strip().lower() == "true"
    return None


def _parse_int(v: Any):
    if _is_int(v):
        return v
    if isinstance(v, str) and v.strip().isdecimal():
        return int(v.strip())
    return None


def validate_job_filter(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for listing filters.
    Values may arrive as query-string text ("3", "true").
    """
    errors = _check_unknown(data, FILTER_FIELDS)

    if "titleLike" in data and not _is_non_empty_str(data["titleLike"]):
        errors.append("Filter 'titleLike' must be a non-empty string")

    if "minSalary" in data:
        min_salary = _parse_int(data["minSalary"])
        if min_salary is None or min_salary < 0:
            errors.append("Filter 'minSalary' must be a non-negative integer")

    if "hasEquity" in data and _parse_bool(data["hasEquity"]) is None:
        errors.append("Filter 'hasEquity' must be true or false")

    return errors


def parse_job_filter(data: Dict[str, Any]) -> JobFilter:
    """
    Validate raw filter input and convert it to a JobFilter.

    Raises:
        ValidationError: Carrying every message from validate_job_filter
    """
    errors = validate_job_filter(data)
    if errors:
        raise ValidationError("Invalid job filter", errors)

    return JobFilter(
        title_like=data.get("titleLike"),
        min_salary=_parse_int(data["minSalary"]) if "minSalary" in data else None,
        has_equity=_parse_bool(data["hasEquity"]) if "hasEquity" in data else None,
    )
