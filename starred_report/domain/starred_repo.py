"""Domain entities for starred repositories and report pages."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Set


@dataclass(frozen=True)
class StarredRepo:
    """Immutable starred repository entity."""
    
    full_name: str
    html_url: str
    starred_at: datetime


@dataclass(frozen=True)
class ReportPage:
    """An existing daily report page and the repo links already on it."""
    
    page_id: str
    existing_links: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one synchronization run."""
    
    SKIPPED = "skipped"
    APPENDED = "appended"
    CREATED = "created"
    
    action: str
    report_date: date
    page_id: Optional[str] = None
    written: List[StarredRepo] = field(default_factory=list)
