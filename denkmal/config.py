"""
Runtime configuration read from environment variables.

Call env.load_env() first to pick up a .env file.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError
from .ranking import GROUP_KEYS

DEFAULT_DB_PATH = "data/denkmal.db"
DEFAULT_LOG_DIR = "logs"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in TRUE_VALUES:
        return True
    if v in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be one of {sorted(TRUE_VALUES | FALSE_VALUES)}, got {value!r}")


class Settings:
    """
    Settings for the search service and CLI.

    Attributes:
        db_path: SQLite file holding the monument dataset
        log_level: Level for console logging
        log_dir: Directory for daily log files
        group_by: Ranking group key, "id" (primary key) or "name"
        participant_search: Whether the participant facet queries the database
    """

    def __init__(
        self,
        db_path: Path = Path(DEFAULT_DB_PATH),
        log_level: str = "INFO",
        log_dir: Path = Path(DEFAULT_LOG_DIR),
        group_by: str = "id",
        participant_search: bool = True,
    ):
        if log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {log_level!r}")
        if group_by not in GROUP_KEYS:
            raise ConfigError(f"group_by must be one of {sorted(GROUP_KEYS)}, got {group_by!r}")

        self.db_path = db_path
        self.log_level = log_level.upper()
        self.log_dir = log_dir
        self.group_by = group_by
        self.participant_search = participant_search

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from DENKMAL_* variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests)
        """
        env = os.environ if environ is None else environ
        return cls(
            db_path=Path(env.get("DENKMAL_DB_PATH", DEFAULT_DB_PATH)),
            log_level=env.get("DENKMAL_LOG_LEVEL", "INFO"),
            log_dir=Path(env.get("DENKMAL_LOG_DIR", DEFAULT_LOG_DIR)),
            group_by=env.get("DENKMAL_GROUP_BY", "id").strip().lower(),
            participant_search=_parse_bool(
                "DENKMAL_PARTICIPANT_SEARCH", env.get("DENKMAL_PARTICIPANT_SEARCH", "1")
            ),
        )

    def __repr__(self) -> str:
        return (
            f"Settings(db_path={str(self.db_path)!r}, log_level={self.log_level!r}, "
            f"group_by={self.group_by!r}, participant_search={self.participant_search!r})"
        )
