import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .errors import SecondaryRateLimitError, UpstreamError
from ..models.commit_payload import CommitAuthor, CommitRecord
from ..models.date_window import DateWindow
from ..models.settings import GITHUB_API_URL


PER_PAGE = 100
# Per-request socket timeout; the overall deadline is owned by the caller.
REQUEST_TIMEOUT_SECONDS = 30

logger = logging.getLogger("release-report.github")


def _build_headers(token: str) -> Dict[str, str]:
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "User-Agent": "release-report",
    }


def _error_message(response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return default


def _raise_for_status(response) -> None:
    """
    Translate a non-success GitHub response into a pipeline error.
    """
    status = response.status_code
    if status in (403, 429):
        message = _error_message(response, "GitHub API rate limit or permission error.")
        if "secondary rate limit" in message.lower():
            raise SecondaryRateLimitError(message)
        raise UpstreamError("github", status, message)

    if not 200 <= status < 300:
        message = _error_message(
            response, f"GitHub API request failed with status {status}."
        )
        raise UpstreamError("github", status, message)


def is_merge_commit(raw: Dict[str, Any], summary_line: str) -> bool:
    """
    Approximate merge detection: more than one parent, or a title that
    starts with "merge". Squash merges and fast-forwards are not caught.
    """
    parents = raw.get("parents")
    if isinstance(parents, list) and len(parents) > 1:
        return True
    return summary_line.lower().startswith("merge")


def normalize_commit(raw: Dict[str, Any]) -> CommitRecord:
    """
    Build a CommitRecord from one raw GitHub commit payload.
    """
    commit = raw.get("commit") or {}
    commit_author = commit.get("author") or {}
    committer = commit.get("committer") or {}
    account = raw.get("author") or {}

    message = commit.get("message") or ""
    summary_line = message.split("\n")[0].strip()

    date = (
        commit_author.get("date")
        or committer.get("date")
        or datetime.now(timezone.utc)
    )

    return CommitRecord(
        sha=raw.get("sha") or "",
        date=date,
        author=CommitAuthor(
            login=account.get("login"),
            name=commit_author.get("name") or committer.get("name"),
        ),
        message=message,
        summary_line=summary_line,
        is_merge=is_merge_commit(raw, summary_line),
    )


def build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)


async def _get_page(
    client: httpx.AsyncClient,
    url: str,
    headers: Dict[str, str],
    params: Dict[str, Any],
) -> httpx.Response:
    try:
        return await client.get(url, headers=headers, params=params)
    except httpx.RequestError as error:
        raise UpstreamError(
            "github", 502, f"GitHub API request failed: {error.__class__.__name__}."
        ) from error


async def _collect_commits(
    client: httpx.AsyncClient,
    repo: str,
    token: str,
    window: DateWindow,
    api_url: str,
) -> List[CommitRecord]:
    since, until = window.to_utc_range()
    url = f"{api_url.rstrip('/')}/repos/{repo}/commits"
    headers = _build_headers(token)

    commits: List[CommitRecord] = []
    merges_dropped = 0
    page = 1
    while True:
        params = {
            "since": since,
            "until": until,
            "per_page": PER_PAGE,
            "page": page,
        }
        response = await _get_page(client, url, headers, params)
        _raise_for_status(response)

        try:
            page_commits = response.json()
        except ValueError as error:
            raise UpstreamError(
                "github", response.status_code, "GitHub API returned an unexpected payload."
            ) from error
        if not isinstance(page_commits, list):
            raise UpstreamError(
                "github", response.status_code, "GitHub API returned an unexpected payload."
            )

        logger.info("Fetched page %d of %s commits (%d records)", page, repo, len(page_commits))

        for raw in page_commits:
            record = normalize_commit(raw)
            if record.is_merge:
                merges_dropped += 1
                continue
            if not record.sha:
                logger.warning("Skipping commit without sha on page %d", page)
                continue
            commits.append(record)

        if len(page_commits) < PER_PAGE:
            break
        page += 1

    logger.info(
        "Collected %d commits for %s between %s and %s (%d merges dropped)",
        len(commits), repo, since, until, merges_dropped,
    )
    return commits


async def fetch_commits(
    repo: str,
    token: str,
    window: DateWindow,
    *,
    client: Optional[httpx.AsyncClient] = None,
    api_url: str = GITHUB_API_URL,
) -> List[CommitRecord]:
    """
    Fetch every non-merge commit of `repo` inside `window`.

    - Pages through /repos/{repo}/commits 100 at a time, one page after the
      other, until a short page comes back.
    - Merge commits are dropped here and never returned.
    - No retries. Cancelling the awaiting task aborts the page request in
      flight and propagates as asyncio.CancelledError.
    - A client passed in by the caller is left open; otherwise one is built
      and closed here.
    """
    if client is not None:
        return await _collect_commits(client, repo, token, window, api_url)

    async with build_client() as owned_client:
        return await _collect_commits(owned_client, repo, token, window, api_url)
