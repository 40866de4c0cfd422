"""Exceptions raised while building the starred activity report."""

from typing import Optional


class StarredReportError(Exception):
    """Base class for all report synchronization errors."""
    pass


class ConfigError(StarredReportError):
    """Raised when required configuration is missing or malformed."""
    pass


class ParseError(StarredReportError):
    """Raised when an API response does not have the expected shape."""
    pass


class AuthenticationError(StarredReportError):
    """Raised when a remote API rejects the configured credentials."""
    pass


class RateLimitExceeded(StarredReportError):
    """Raised when GitHub API rate limit is exceeded."""
    pass


class GitHubAPIError(StarredReportError):
    """Raised when a GraphQL response carries an errors payload."""
    pass


class NotionAPIError(StarredReportError):
    """Raised when the Notion API answers with a non-success status."""
    
    def __init__(self, status: int, code: Optional[str], message: str):
        super().__init__(f"Notion API error {status} ({code or 'unknown'}): {message}")
        self.status = status
        self.code = code
        self.message = message
