from datetime import date, datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
import requests

from starred_report.application.report_service import ReportService
from starred_report.domain.starred_repo import ReportPage, StarredRepo, SyncResult

NOW = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)


def make_repo(name, starred_at=NOW - timedelta(hours=1)):
    return StarredRepo(full_name=name, html_url=f"https://github.com/{name}", starred_at=starred_at)


def make_service(repos, page=None, max_rank=0):
    github_client = Mock()
    github_client.get_starred_repositories.return_value = repos
    database = Mock()
    database.resolve_report_page.return_value = page
    database.get_max_rank.return_value = max_rank
    database.create_report_page.return_value = "new-page"
    service = ReportService(github_client, database, fetch_limit=50, report_tag="GitHub")
    return service, github_client, database


def linked_urls(blocks):
    return [block["bulleted_list_item"]["rich_text"][0]["text"]["link"]["url"] for block in blocks]


def test_creates_page_with_first_rank_when_none_exists():
    service, github_client, database = make_service([make_repo("octo/a"), make_repo("octo/b")])

    result = service.sync(NOW)

    github_client.get_starred_repositories.assert_called_once_with(limit=50)
    database.resolve_report_page.assert_called_once_with(date(2024, 5, 1))
    database.create_report_page.assert_called_once()
    kwargs = database.create_report_page.call_args.kwargs
    assert kwargs["day"] == date(2024, 5, 1)
    assert kwargs["rank"] == 1
    assert kwargs["slug"] == "20240501"
    assert kwargs["tag"] == "GitHub"
    assert linked_urls(kwargs["children"]) == ["https://github.com/octo/a", "https://github.com/octo/b"]
    database.append_block.assert_not_called()

    assert result.action == SyncResult.CREATED
    assert result.page_id == "new-page"
    assert [repo.full_name for repo in result.written] == ["octo/a", "octo/b"]


def test_new_page_rank_follows_previous_maximum():
    service, _, database = make_service([make_repo("octo/a")], max_rank=7)

    service.sync(NOW)

    assert database.create_report_page.call_args.kwargs["rank"] == 8


def test_appends_only_repos_missing_from_existing_page():
    page = ReportPage(page_id="page-1", existing_links={"https://github.com/octo/a"})
    service, _, database = make_service([make_repo("octo/a"), make_repo("octo/b")], page=page)

    result = service.sync(NOW)

    database.append_block.assert_called_once()
    page_id, block = database.append_block.call_args.args
    assert page_id == "page-1"
    assert linked_urls([block]) == ["https://github.com/octo/b"]
    database.create_report_page.assert_not_called()
    database.get_max_rank.assert_not_called()
    assert result.action == SyncResult.APPENDED


def test_appends_one_call_per_repo_in_fetch_order():
    page = ReportPage(page_id="page-1", existing_links=set())
    service, _, database = make_service(
        [make_repo("octo/c"), make_repo("octo/b"), make_repo("octo/a")], page=page
    )

    service.sync(NOW)

    blocks = [call.args[1] for call in database.append_block.call_args_list]
    assert linked_urls(blocks) == [
        "https://github.com/octo/c",
        "https://github.com/octo/b",
        "https://github.com/octo/a",
    ]


def test_no_mutations_when_everything_is_already_listed(caplog):
    page = ReportPage(page_id="page-1", existing_links={"https://github.com/octo/a"})
    service, _, database = make_service([make_repo("octo/a")], page=page)

    with caplog.at_level("INFO"):
        result = service.sync(NOW)

    database.append_block.assert_not_called()
    database.create_report_page.assert_not_called()
    assert result.action == SyncResult.SKIPPED
    assert result.page_id == "page-1"
    assert "No new starred repositories" in caplog.text


def test_skips_when_nothing_was_starred_today():
    yesterday = make_repo("octo/old", NOW - timedelta(days=1))
    service, _, database = make_service([yesterday])

    result = service.sync(NOW)

    database.create_report_page.assert_not_called()
    database.append_block.assert_not_called()
    assert result.action == SyncResult.SKIPPED
    assert result.page_id is None


def test_fetch_errors_propagate_before_any_notion_call():
    service, github_client, database = make_service([])
    github_client.get_starred_repositories.side_effect = requests.ConnectionError("down")

    with pytest.raises(requests.ConnectionError):
        service.sync(NOW)

    database.resolve_report_page.assert_not_called()
