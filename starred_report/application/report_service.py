"""Application service for syncing today's starred repositories into Notion."""

import logging
from datetime import datetime
from typing import Optional

from starred_report.domain.report import exclude_existing, filter_starred_today, report_date, slug_for
from starred_report.domain.starred_repo import SyncResult
from starred_report.infrastructure.database import NotionDatabase, build_list_item
from starred_report.infrastructure.github_client import GitHubGraphQLClient

logger = logging.getLogger(__name__)


class ReportService:
    """Service that writes today's GitHub stars to a daily Notion report page."""

    def __init__(
        self,
        github_client: GitHubGraphQLClient,
        database: NotionDatabase,
        fetch_limit: int = 50,
        report_tag: str = "GitHub"
    ):
        """
        Initialize report service.

        Args:
            github_client: GitHub API client
            database: Notion database holding report pages
            fetch_limit: How many recent stars to inspect
            report_tag: Tag set on newly created pages
        """
        self.github_client = github_client
        self.database = database
        self.fetch_limit = fetch_limit
        self.report_tag = report_tag

    def sync(self, now: Optional[datetime] = None) -> SyncResult:
        """
        Append today's new stars to the report page, creating it if needed.

        Errors from either API propagate to the caller unchanged.

        Args:
            now: Reference time. Defaults to the current local time.

        Returns:
            What the run did
        """
        if now is None:
            now = datetime.now().astimezone()
        today = report_date(now)

        repos = self.github_client.get_starred_repositories(limit=self.fetch_limit)
        today_repos = filter_starred_today(repos, now)
        logger.info(f"{len(today_repos)} of {len(repos)} starred repositories were starred on {today.isoformat()}")

        page = self.database.resolve_report_page(today)
        existing_links = page.existing_links if page else set()
        new_repos = exclude_existing(today_repos, existing_links)

        if not new_repos:
            logger.info("No new starred repositories to report")
            return SyncResult(
                action=SyncResult.SKIPPED,
                report_date=today,
                page_id=page.page_id if page else None
            )

        children = [build_list_item(repo) for repo in new_repos]

        if page:
            # One request per item, in fetch order
            for repo, block in zip(new_repos, children):
                self.database.append_block(page.page_id, block)
                logger.info(f"Appended {repo.full_name} to report page {page.page_id}")
            logger.info(f"Appended {len(new_repos)} repositories to the existing report page")
            return SyncResult(
                action=SyncResult.APPENDED,
                report_date=today,
                page_id=page.page_id,
                written=new_repos
            )

        slug = slug_for(today)
        rank = self.database.get_max_rank() + 1
        page_id = self.database.create_report_page(
            day=today,
            rank=rank,
            slug=slug,
            tag=self.report_tag,
            children=children
        )
        logger.info(f"Created report page {page_id} (rank {rank}, slug {slug}) with {len(new_repos)} repositories")
        return SyncResult(
            action=SyncResult.CREATED,
            report_date=today,
            page_id=page_id,
            written=new_repos
        )
