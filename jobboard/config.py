import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///data/jobboard.db"
DEFAULT_TEST_DATABASE_URL = "sqlite:///data/jobboard_test.db"
DEFAULT_LOG_LEVEL = "INFO"


def load_env() -> None:
    """Load .env from the working directory if present.
    Variables already set in the environment are left alone.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def get_database_url(testing: bool = False) -> str:
    """Database URL for the application, or for the test suite."""
    if testing:
        return os.getenv("JOBBOARD_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)
    return os.getenv("JOBBOARD_DATABASE_URL", DEFAULT_DATABASE_URL)


def get_log_level() -> str:
    return os.getenv("JOBBOARD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def get_log_dir() -> Optional[Path]:
    """Directory for log files; None disables file logging."""
    log_dir = os.getenv("JOBBOARD_LOG_DIR")
    if not log_dir:
        return None
    return Path(log_dir)
