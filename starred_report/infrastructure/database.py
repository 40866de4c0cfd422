"""Notion database access for daily report pages."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Set

import requests

from starred_report.domain.errors import AuthenticationError, NotionAPIError, ParseError
from starred_report.domain.report import report_title
from starred_report.domain.starred_repo import ReportPage, StarredRepo

logger = logging.getLogger(__name__)


def build_list_item(repo: StarredRepo) -> Dict[str, Any]:
    """Bulleted list item block linking a repository by its full name."""
    return {
        "object": "block",
        "type": "bulleted_list_item",
        "bulleted_list_item": {
            "rich_text": [
                {
                    "type": "text",
                    "text": {
                        "content": repo.full_name,
                        "link": {"url": repo.html_url},
                    },
                }
            ]
        },
    }


def extract_link(block: Dict[str, Any]) -> Optional[str]:
    """Return the link URL of a bulleted list item, or None for any other block."""
    if block.get("type") != "bulleted_list_item":
        return None
    rich_text = (block.get("bulleted_list_item") or {}).get("rich_text") or []
    if not rich_text:
        return None
    first = rich_text[0]
    if first.get("type") != "text":
        return None
    link = (first.get("text") or {}).get("link") or {}
    return link.get("url") or None


class NotionDatabase:
    """Report page storage backed by a Notion database."""

    API_BASE_URL = "https://api.notion.com/v1"
    NOTION_VERSION = "2022-06-28"
    PAGE_SIZE = 100  # Notion's maximum page size for list endpoints

    def __init__(
        self,
        database_id: str,
        api_key: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Notion database access.

        Args:
            database_id: Identifier of the Notion database holding report pages
            api_key: Notion integration secret
            timeout: Request timeout in seconds
            session: Pre-built HTTP session. If None, ``connect`` creates one.
        """
        self.database_id = database_id
        self.api_key = api_key
        self.timeout = timeout
        self.session = session

    def connect(self):
        """Open the HTTP session used for all Notion calls."""
        if self.session is None:
            self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": self.NOTION_VERSION,
            "Content-Type": "application/json",
        })
        logger.info("Notion session opened")

    def close(self):
        """Close the HTTP session."""
        if self.session:
            self.session.close()
            self.session = None
            logger.info("Notion session closed")

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """
        Send one request to the Notion API and decode its JSON body.

        Raises:
            AuthenticationError: If the API key is rejected
            NotionAPIError: For any other non-success status
            ParseError: If the body is not a JSON object
        """
        if self.session is None:
            self.connect()

        response = self.session.request(
            method,
            f"{self.API_BASE_URL}/{path}",
            timeout=self.timeout,
            **kwargs
        )

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            code = body.get("code")
            message = body.get("message") or response.text
            if response.status_code == 401:
                raise AuthenticationError(f"Notion rejected the API key: {message}")
            raise NotionAPIError(response.status_code, code, message)

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"Notion returned a non-JSON body for {method} {path}: {e}")
        if not isinstance(data, dict):
            raise ParseError(f"Notion returned an unexpected body for {method} {path}")
        return data

    def _results(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        results = data.get("results")
        if not isinstance(results, list):
            raise ParseError("Notion response is missing a results list")
        return results

    def query_database(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        page_size: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Run a single database query and return the matching pages."""
        payload: Dict[str, Any] = {}
        if filter:
            payload["filter"] = filter
        if sorts:
            payload["sorts"] = sorts
        if page_size:
            payload["page_size"] = page_size

        data = self._request("POST", f"databases/{self.database_id}/query", json=payload)
        return self._results(data)

    def find_page_by_date(self, day: date) -> Optional[str]:
        """
        Find the report page for a date.

        Args:
            day: Report date matched against the page's Date property

        Returns:
            Page id of the first match, or None if there is no page for that date
        """
        pages = self.query_database(
            filter={"property": "Date", "date": {"equals": day.isoformat()}}
        )
        if not pages:
            return None

        page_id = pages[0].get("id")
        if not page_id:
            raise ParseError("Notion page result has no id")
        return page_id

    def get_max_rank(self) -> int:
        """Highest Rank in the database, or 0 when there is none."""
        pages = self.query_database(
            sorts=[{"property": "Rank", "direction": "descending"}],
            page_size=1
        )
        if not pages:
            return 0

        rank_prop = (pages[0].get("properties") or {}).get("Rank") or {}
        rank_value = rank_prop.get("number")
        if isinstance(rank_value, bool) or not isinstance(rank_value, (int, float)):
            return 0
        return int(rank_value)

    def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """
        Read every child block of a page, following pagination cursors.

        Args:
            block_id: Page or block id

        Returns:
            Child blocks in page order
        """
        blocks: List[Dict[str, Any]] = []
        cursor = None

        while True:
            params: Dict[str, Any] = {"page_size": self.PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor

            data = self._request("GET", f"blocks/{block_id}/children", params=params)
            blocks.extend(self._results(data))

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        return blocks

    def get_repo_links(self, page_id: str) -> Set[str]:
        """Collect the link URLs of all bulleted list items on a page."""
        links = set()
        for block in self.list_block_children(page_id):
            url = extract_link(block)
            if url:
                links.add(url)
        return links

    def resolve_report_page(self, day: date) -> Optional[ReportPage]:
        """
        Look up the report page for a date together with its existing links.

        Returns:
            The resolved page, or None if no page exists for that date
        """
        page_id = self.find_page_by_date(day)
        if page_id is None:
            logger.info(f"No report page found for {day.isoformat()}")
            return None

        links = self.get_repo_links(page_id)
        logger.info(f"Found report page {page_id} for {day.isoformat()} with {len(links)} linked repositories")
        return ReportPage(page_id=page_id, existing_links=links)

    def append_block(self, page_id: str, block: Dict[str, Any]):
        """Append a single child block to a page."""
        self._request("PATCH", f"blocks/{page_id}/children", json={"children": [block]})

    def create_report_page(
        self,
        day: date,
        rank: int,
        slug: str,
        tag: str,
        children: List[Dict[str, Any]]
    ) -> str:
        """
        Create a new report page in the database.

        Args:
            day: Report date
            rank: Rank number of the new page
            slug: Slug text for the page
            tag: Name of the multi-select tag
            children: Initial content blocks

        Returns:
            Id of the created page
        """
        payload = {
            "parent": {"database_id": self.database_id},
            "properties": {
                "Page": {
                    "title": [{"text": {"content": report_title(day)}}],
                },
                "Date": {
                    "date": {"start": day.isoformat()},
                },
                "Published": {
                    "checkbox": True,
                },
                "Tags": {
                    "multi_select": [{"name": tag}],
                },
                "Rank": {
                    "number": rank,
                },
                "Slug": {
                    "rich_text": [{"type": "text", "text": {"content": slug}}],
                },
            },
            "children": children,
        }

        data = self._request("POST", "pages", json=payload)
        page_id = data.get("id")
        if not page_id:
            raise ParseError("Notion did not return an id for the created page")
        return page_id
