"""Shared fakes for release report tests."""

from datetime import date, datetime, timezone

import httpx
import pytest

from release_report.models.commit_payload import CommitAuthor, CommitRecord
from release_report.models.date_window import DateWindow
from release_report.models.settings import ReportSettings


class FakeGitHub:
    """
    Serves canned GitHub responses, one per page, through httpx.MockTransport.

    responses: list of (status, body); a body of None sends a non-JSON page.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.clients = []

    def handle(self, request):
        self.requests.append(request)
        status, body = self.responses.pop(0)
        if body is None:
            return httpx.Response(status, content=b"<html>Bad gateway</html>")
        return httpx.Response(status, json=body)

    def client(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handle))
        self.clients.append(client)
        return client


def make_raw_commit(
    sha,
    message,
    when="2025-01-02T10:00:00Z",
    parents=1,
    login="octocat",
    name="Mona Lisa",
):
    return {
        "sha": sha,
        "commit": {
            "message": message,
            "author": {"name": name, "email": "mona@example.com", "date": when},
            "committer": {"name": "GitHub", "email": "noreply@github.com", "date": when},
        },
        "author": {"login": login} if login else None,
        "parents": [{"sha": f"parent-{i}"} for i in range(parents)],
    }


def make_record(sha, message, when=datetime(2025, 1, 2, 10, 0, tzinfo=timezone.utc)):
    return CommitRecord(
        sha=sha,
        date=when,
        author=CommitAuthor(login="octocat", name="Mona Lisa"),
        message=message,
        summary_line=message.split("\n")[0].strip(),
    )


@pytest.fixture
def january_window() -> DateWindow:
    return DateWindow(start=date(2025, 1, 1), end=date(2025, 1, 7))


@pytest.fixture
def settings() -> ReportSettings:
    return ReportSettings(
        github_repo="octo-org/octo-repo",
        github_token="gh-test-token",
        openai_api_key="sk-test",
        openai_model="openai/gpt-4o-mini",
    )
