"""GitHub GraphQL API client for the viewer's starred repositories."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from starred_report.domain.errors import (
    AuthenticationError,
    GitHubAPIError,
    ParseError,
    RateLimitExceeded,
)
from starred_report.domain.starred_repo import StarredRepo

logger = logging.getLogger(__name__)


class GitHubGraphQLClient:
    """Client for GitHub GraphQL API. Requests are sent once, never retried."""

    GRAPHQL_ENDPOINT = "https://api.github.com/graphql"
    MAX_PAGE_SIZE = 100  # GitHub caps connection page size at 100

    STARRED_QUERY = """
    query($limit: Int!) {
        viewer {
            starredRepositories(first: $limit, orderBy: {field: STARRED_AT, direction: DESC}) {
                edges {
                    starredAt
                    node {
                        nameWithOwner
                        url
                    }
                }
            }
        }
    }
    """

    def __init__(self, token: str, timeout: int = 30):
        """
        Initialize GitHub GraphQL client.

        Args:
            token: GitHub personal access token.
            timeout: Request timeout in seconds.
        """
        self.token = token
        self.timeout = timeout
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    def _execute_query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL query.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            GraphQL response data

        Raises:
            AuthenticationError: If the token is rejected
            RateLimitExceeded: If rate limit is exceeded
            GitHubAPIError: If the response carries GraphQL errors
            requests.HTTPError: For any other non-success status
            requests.RequestException: If the request fails
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        response = requests.post(
            self.GRAPHQL_ENDPOINT,
            json=payload,
            headers=self.headers,
            timeout=self.timeout
        )

        if response.status_code == 401:
            raise AuthenticationError("Authentication failed. Check your GitHub token.")
        if response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            reset_time = response.headers.get("X-RateLimit-Reset", "unknown")
            raise RateLimitExceeded(f"Rate limit exceeded (resets at {reset_time})")
        # Any other 403 (secondary rate limits included) surfaces as requests.HTTPError
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"GitHub returned a non-JSON body: {e}")
        if not isinstance(data, dict):
            raise ParseError("GitHub returned an unexpected response body")

        if data.get("errors"):
            error_messages = [err.get("message", "") for err in data["errors"]]
            if any("rate limit" in msg.lower() for msg in error_messages):
                raise RateLimitExceeded(f"Rate limit exceeded: {error_messages}")
            raise GitHubAPIError(f"GraphQL errors: {error_messages}")

        return data.get("data") or {}

    def get_starred_repositories(self, limit: int = 50) -> List[StarredRepo]:
        """
        Fetch the viewer's most recently starred repositories.

        Args:
            limit: Number of repositories to fetch (clamped to 1..100)

        Returns:
            Starred repositories ordered newest-first

        Raises:
            ParseError: If the response does not have the expected shape
        """
        limit = max(1, min(limit, self.MAX_PAGE_SIZE))
        data = self._execute_query(self.STARRED_QUERY, {"limit": limit})

        try:
            edges = data["viewer"]["starredRepositories"]["edges"]
        except (KeyError, TypeError):
            raise ParseError("Response is missing viewer.starredRepositories.edges")
        if not isinstance(edges, list):
            raise ParseError("starredRepositories.edges is not a list")

        repositories = []
        for edge in edges:
            try:
                node = edge["node"]
                starred_at = datetime.fromisoformat(edge["starredAt"].replace("Z", "+00:00"))
                repo = StarredRepo(
                    full_name=node["nameWithOwner"],
                    html_url=node["url"],
                    starred_at=starred_at
                )
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise ParseError(f"Malformed starred repository edge {edge!r}: {e}")
            repositories.append(repo)

        logger.info(f"Fetched {len(repositories)} starred repositories")
        return repositories
