#!/usr/bin/env python3
"""Script to sync today's GitHub stars into the daily Notion report page."""

import logging
import sys
import os

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from starred_report.infrastructure.config import Config
from starred_report.infrastructure.github_client import GitHubGraphQLClient
from starred_report.infrastructure.database import NotionDatabase
from starred_report.application.report_service import ReportService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Fetch today's stars and write them to the report page."""
    database = None
    try:
        config = Config.from_env()
        logging.getLogger().setLevel(config.log_level)

        # Initialize clients
        github_client = GitHubGraphQLClient(token=config.github_token, timeout=config.request_timeout)
        database = NotionDatabase(
            database_id=config.notion_database_id,
            api_key=config.notion_api_key,
            timeout=config.request_timeout
        )
        database.connect()

        service = ReportService(
            github_client,
            database,
            fetch_limit=config.fetch_limit,
            report_tag=config.report_tag
        )
        result = service.sync()

        logger.info(f"Sync completed: {result.action} ({len(result.written)} repositories for {result.report_date.isoformat()})")
        return 0

    except Exception as e:
        logger.error(f"Sync failed: {e}", exc_info=True)
        return 1
    finally:
        if database is not None:
            database.close()


if __name__ == "__main__":
    sys.exit(main())
