import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .config import get_database_url, load_env

from . import __version__
from .database import Database, init_database
from .errors import JobBoardError
from .logger import configure_logger
from .repositories import JobRepository
from .schema import (
    parse_job_filter,
    validate_job_filter,
    validate_job_update,
    validate_new_job,
)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _exit_invalid(errors: List[str]) -> None:
    print("Invalid:")
    for e in errors:
        print(f" - {e}")
    raise SystemExit(2)


def _repository(args: argparse.Namespace) -> JobRepository:
    # Disposed by main once the command finishes.
    args.database = Database.from_url(args.database_url)
    return JobRepository(args.database)


def _job_fields(args: argparse.Namespace) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if args.title is not None:
        data["title"] = args.title
    if args.salary is not None:
        data["salary"] = args.salary
    if args.equity is not None:
        data["equity"] = args.equity
    return data


def cmd_init_db(args: argparse.Namespace) -> None:
    engine = init_database(args.database_url)
    engine.dispose()
    print(f"Initialized {args.database_url}")


def cmd_create(args: argparse.Namespace) -> None:
    data = _job_fields(args)
    data["companyHandle"] = args.company_handle
    errors = validate_new_job(data)
    if errors:
        _exit_invalid(errors)
    _print_json(_repository(args).create(data))


def cmd_list(args: argparse.Namespace) -> None:
    raw: Dict[str, Any] = {}
    if args.title_like is not None:
        raw["titleLike"] = args.title_like
    if args.min_salary is not None:
        raw["minSalary"] = args.min_salary
    if args.has_equity:
        raw["hasEquity"] = True
    errors = validate_job_filter(raw)
    if errors:
        _exit_invalid(errors)
    jobs = _repository(args).find_all(parse_job_filter(raw))
    if not jobs:
        print("No jobs found.")
        return
    _print_json(jobs)


def cmd_get(args: argparse.Namespace) -> None:
    _print_json(_repository(args).get(args.id))


def cmd_update(args: argparse.Namespace) -> None:
    data = _job_fields(args)
    errors = validate_job_update(data)
    if errors:
        _exit_invalid(errors)
    _print_json(_repository(args).update(args.id, data))


def cmd_remove(args: argparse.Namespace) -> None:
    _repository(args).remove(args.id)
    print(f"Removed job {args.id}")


def _add_job_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title", help="Job title (unique)")
    parser.add_argument("--salary", type=int, help="Salary as a whole number")
    parser.add_argument("--equity", help="Equity as a decimal string between 0 and 1, e.g. 0.05")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobboard", description="Job board data access CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (default: JOBBOARD_DATABASE_URL or sqlite:///data/jobboard.db)",
    )

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    ini.set_defaults(func=cmd_init_db)

    cre = subparsers.add_parser("create", help="Create a job")
    _add_job_fields(cre)
    cre.add_argument("--company-handle", required=True, help="Handle of the company offering the job")
    cre.set_defaults(func=cmd_create)

    lst = subparsers.add_parser("list", help="List jobs ordered by title")
    lst.add_argument("--title-like", help="Case-insensitive substring of the title")
    lst.add_argument("--min-salary", type=int, help="Minimum salary (inclusive)")
    lst.add_argument("--has-equity", action="store_true", help="Only jobs offering non-zero equity")
    lst.set_defaults(func=cmd_list)

    get = subparsers.add_parser("get", help="Show one job")
    get.add_argument("id", type=int, help="Job id")
    get.set_defaults(func=cmd_get)

    upd = subparsers.add_parser("update", help="Change some fields of a job")
    upd.add_argument("id", type=int, help="Job id")
    _add_job_fields(upd)
    upd.set_defaults(func=cmd_update)

    rem = subparsers.add_parser("remove", help="Delete a job")
    rem.add_argument("id", type=int, help="Job id")
    rem.set_defaults(func=cmd_remove)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    # Load .env if present (JOBBOARD_DATABASE_URL, JOBBOARD_LOG_LEVEL, etc.)
    load_env()
    configure_logger()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if args.database_url is None:
        args.database_url = get_database_url()

    if hasattr(args, "func"):
        try:
            args.func(args)
        except JobBoardError as e:
            print(f"Error: {e}", file=sys.stderr)
            raise SystemExit(1)
        finally:
            database = getattr(args, "database", None)
            if database is not None:
                database.dispose()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
