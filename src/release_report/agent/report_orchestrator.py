import asyncio
import logging
import re
from datetime import date, datetime, timezone
from typing import Optional

from . import github_commits, summary_composer
from .errors import (
    ConfigurationError,
    DateWindowError,
    ReportError,
    ReportTimeoutError,
    UpstreamError,
    WindowTooLargeError,
)
from ..models.date_window import DateWindow
from ..models.report_payload import Report, ReportMeta
from ..models.settings import ReportSettings


DATE_ONLY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

logger = logging.getLogger("release-report.orchestrator")


def parse_date_window(
    raw_start: Optional[str],
    raw_end: Optional[str],
    max_days: int = 30,
) -> DateWindow:
    """
    Validate two YYYY-MM-DD strings into a DateWindow.

    Raises DateWindowError (400) for bad input and WindowTooLargeError (413)
    when the inclusive span is longer than `max_days`.
    """
    if not raw_start or not raw_end:
        raise DateWindowError("Both start and end dates are required.")

    if not DATE_ONLY_RE.fullmatch(raw_start) or not DATE_ONLY_RE.fullmatch(raw_end):
        raise DateWindowError("Dates must be formatted as YYYY-MM-DD.")

    try:
        start = date.fromisoformat(raw_start)
        end = date.fromisoformat(raw_end)
    except ValueError as error:
        raise DateWindowError("Start and end dates must be valid.") from error

    if start > end:
        raise DateWindowError("Start date cannot be after end date.")

    window = DateWindow(start=start, end=end)
    if window.day_span > max_days:
        raise WindowTooLargeError(f"Date span cannot exceed {max_days} days.")
    return window


async def _run_pipeline(window: DateWindow, settings: ReportSettings) -> Report:
    repo = settings.github_repo
    model = settings.model_name

    commits = await github_commits.fetch_commits(
        repo,
        settings.github_token,
        window,
        api_url=settings.github_api_url,
    )
    summary = await summary_composer.compose_summary(
        repo,
        window,
        commits,
        api_key=settings.openai_api_key,
        model=model,
    )

    return Report(
        repo=repo,
        start=window.start,
        end=window.end,
        commits=commits,
        summary=summary,
        meta=ReportMeta(
            commit_count=len(commits),
            model=model or "unknown",
            generated_at=datetime.now(timezone.utc),
            source="live",
        ),
    )


async def generate_report(
    raw_start: Optional[str],
    raw_end: Optional[str],
    settings: ReportSettings,
) -> Report:
    """
    Build a deploy report for the configured repository.

    High-level orchestration:
    - Validates the window before any network call.
    - Fetches commits, then summarizes them, under one shared deadline.
    - Every failure leaves as a ReportError carrying one status code.
    """
    window = parse_date_window(raw_start, raw_end, settings.max_window_days)

    if not settings.github_repo:
        raise ConfigurationError("GITHUB_REPO is not configured.")
    if not settings.github_token:
        raise ConfigurationError("GITHUB_TOKEN is not configured.")

    logger.info(
        "Generating report for %s from %s to %s",
        settings.github_repo, window.start, window.end,
    )
    try:
        return await asyncio.wait_for(
            _run_pipeline(window, settings),
            timeout=settings.timeout_seconds,
        )
    except asyncio.TimeoutError as error:
        logger.warning("Report generation exceeded %ss", settings.timeout_seconds)
        raise ReportTimeoutError(
            f"Processing exceeded the {settings.timeout_seconds:g}s timeout."
        ) from error
    except ReportError as error:
        logger.warning("Report generation failed (%s): %s", error.status_code, error.message)
        raise
    except Exception as error:
        logger.exception("Unexpected error while generating deploy report")
        raise UpstreamError(
            "report", 502, "Unexpected error while generating deploy report."
        ) from error
