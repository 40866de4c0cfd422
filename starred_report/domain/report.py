"""Date filtering and naming rules for daily report pages."""

from datetime import date, datetime
from typing import Iterable, List, Optional, Set

from starred_report.domain.starred_repo import StarredRepo

REPORT_TITLE_PREFIX = "Github Starred Activity Report"


def _local_now(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` as an aware datetime, treating naive values as local time."""
    if now is None:
        now = datetime.now()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def is_starred_on(repo: StarredRepo, now: datetime) -> bool:
    """Check whether a repo was starred on the same calendar day as ``now``."""
    now = _local_now(now)
    return repo.starred_at.astimezone(now.tzinfo).date() == now.date()


def filter_starred_today(repos: Iterable[StarredRepo], now: Optional[datetime] = None) -> List[StarredRepo]:
    """
    Keep only repositories starred today.
    
    "Today" is the calendar date of ``now`` in its own time zone (the
    process's local zone when ``now`` is omitted or naive). Input order is
    preserved.
    """
    now = _local_now(now)
    return [repo for repo in repos if is_starred_on(repo, now)]


def report_date(now: Optional[datetime] = None) -> date:
    """Calendar date a report page is keyed by."""
    return _local_now(now).date()


def slug_for(day: date) -> str:
    return f"{day.year:04d}{day.month:02d}{day.day:02d}"


def report_title(day: date) -> str:
    return f"{REPORT_TITLE_PREFIX} - {day.isoformat()}"


def exclude_existing(repos: Iterable[StarredRepo], existing_links: Set[str]) -> List[StarredRepo]:
    """
    Drop repos whose URL already appears on the report page.
    
    Repeated URLs within ``repos`` are also dropped after the first one.
    """
    seen = set(existing_links)
    new_repos = []
    for repo in repos:
        if repo.html_url in seen:
            continue
        seen.add(repo.html_url)
        new_repos.append(repo)
    return new_repos
