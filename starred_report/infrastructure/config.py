"""Runtime configuration loaded from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from starred_report.domain.errors import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_VARIABLES = ("NOTION_DATABASE_ID", "NOTION_API_KEY", "GITHUB_TOKEN")


def _get_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Config:
    """Settings for one synchronization run."""

    notion_database_id: str
    notion_api_key: str
    github_token: str
    fetch_limit: int = 50
    report_tag: str = "GitHub"
    request_timeout: int = 30
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build configuration from environment variables.

        Values from a ``.env`` file in the working directory are loaded first
        when ``environ`` is not given. Existing process variables win.

        Args:
            environ: Mapping to read instead of ``os.environ`` (used by tests).

        Raises:
            ConfigError: If a required variable is missing or a number is malformed.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        missing = [name for name in REQUIRED_VARIABLES if not environ.get(name)]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        fetch_limit = _get_int(environ, "STARRED_FETCH_LIMIT", 50)
        if fetch_limit < 1:
            raise ConfigError(f"STARRED_FETCH_LIMIT must be positive, got {fetch_limit}")

        request_timeout = _get_int(environ, "REQUEST_TIMEOUT", 30)
        if request_timeout < 1:
            raise ConfigError(f"REQUEST_TIMEOUT must be at least 1 second, got {request_timeout}")

        log_level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"LOG_LEVEL must be a logging level name, got {environ.get('LOG_LEVEL')!r}")

        config = cls(
            notion_database_id=environ["NOTION_DATABASE_ID"],
            notion_api_key=environ["NOTION_API_KEY"],
            github_token=environ["GITHUB_TOKEN"],
            fetch_limit=fetch_limit,
            report_tag=environ.get("REPORT_TAG") or "GitHub",
            request_timeout=request_timeout,
            log_level=log_level,
        )
        logger.debug(f"Loaded configuration (fetch_limit={config.fetch_limit}, report_tag={config.report_tag})")
        return config
