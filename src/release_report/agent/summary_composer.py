import html
import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from textwrap import dedent
from typing import Dict, List, Optional, Tuple

from agents import Agent, OpenAIResponsesModel, RunConfig, Runner
from agents.model_settings import ModelSettings
from openai import AsyncOpenAI

from .errors import ConfigurationError, ReportError, UpstreamError
from ..models.commit_payload import CommitRecord
from ..models.date_window import DateWindow
from ..models.report_payload import ReportSummary


logger = logging.getLogger("release-report.summary")


def empty_range_summary(window: DateWindow) -> ReportSummary:
    return ReportSummary(
        html=(
            f"<section><p>No commits found between {window.start.isoformat()} "
            f"and {window.end.isoformat()}.</p></section>"
        )
    )


def utc_day(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date().isoformat()


def split_commit_message(message: str) -> Tuple[str, str]:
    """
    Return (title, description) for a commit message.
    """
    title, _, rest = message.partition("\n")
    return title.strip() or "Untitled commit", rest.strip()


def build_commit_text(commits: List[CommitRecord]) -> str:
    blocks = []
    for commit in commits:
        title, description = split_commit_message(commit.message)
        detail = description or "No additional description provided."
        blocks.append(f"{utc_day(commit.date)} - {title}\nDescription: {detail}")
    return "\n".join(blocks)


def build_user_prompt(window: DateWindow, commits: List[CommitRecord]) -> str:
    return "\n".join(
        [
            f"Date range: {window.start.isoformat()} to {window.end.isoformat()}.",
            "Commits (chronological):",
            build_commit_text(commits),
        ]
    )


def build_summary_instructions(repo: str) -> str:
    return dedent(
        f"""
        You are an internal release reporter for the GitHub repository {repo}.

        For each commit you receive, render an <article> with:
        - An <h3> showing the commit title.
        - A paragraph or short list right below it that explains what shipped,
          using both the title and the description text (do not repeat the
          full description verbatim).

        You may group related commits under shared sections if it reads better,
        but keep the per-commit headings intact.

        Rules:
        - Highlight impact and avoid assumptions.
        - Never invent work that is not grounded in the provided commits.
        - Respond with semantic HTML only (section, article, h2-h4, p, ul, li).
        - No inline styles, scripts, or markdown.
        """
    ).strip()


def _long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def build_fallback_summary(window: DateWindow, commits: List[CommitRecord]) -> ReportSummary:
    """
    Deterministic report used when the model returns nothing.

    Commits are grouped by UTC calendar day (ascending); every summary line
    is HTML-escaped.
    """
    grouped: Dict[str, List[CommitRecord]] = defaultdict(list)
    for commit in commits:
        grouped[utc_day(commit.date)].append(commit)

    sections = []
    for day in sorted(grouped):
        items = []
        for commit in grouped[day]:
            summary = commit.summary_line or commit.message.split("\n")[0] or commit.sha
            items.append(f"<li><strong>{html.escape(summary)}</strong></li>")
        sections.append(f"<article><h3>{day}</h3><ul>{''.join(items)}</ul></article>")

    body = "".join(sections) or "<p>No non-merge commits were available.</p>"
    span = (
        f"Activity covering {html.escape(_long_date(window.start))} "
        f"to {html.escape(_long_date(window.end))}."
    )
    return ReportSummary(html=f"<section><p>{span}</p>{body}</section>")


def create_summary_agent(repo: str, model: str, client: AsyncOpenAI) -> Agent:
    """
    Agent bound to the caller's OpenAI client, so no process-global key is
    needed and the caller controls the client's lifetime.
    """
    return Agent(
        name="release-report-summarizer",
        instructions=build_summary_instructions(repo),
        model=OpenAIResponsesModel(
            model=model,
            openai_client=client,
        ),
        model_settings=ModelSettings(temperature=0.2),
    )


def _provider_status(error: Exception) -> int:
    for attribute in ("status_code", "status"):
        status = getattr(error, attribute, None)
        if isinstance(status, int):
            return status
    return 502


async def compose_summary(
    repo: str,
    window: DateWindow,
    commits: List[CommitRecord],
    *,
    api_key: Optional[str],
    model: Optional[str],
) -> ReportSummary:
    """
    Turn a commit batch into an HTML report fragment.

    - Empty batch: fixed sentence, no model call.
    - Empty model output: build_fallback_summary().
    - Plain-text model output: escaped and wrapped in a paragraph.
    """
    if not commits:
        return empty_range_summary(window)

    if not api_key:
        raise ConfigurationError("OPENAI_API_KEY is not configured.")
    if not model:
        raise ConfigurationError("OpenAI model is not configured.")

    prompt = build_user_prompt(window, commits)

    logger.info("Summarizing %d commits for %s with %s", len(commits), repo, model)
    try:
        async with AsyncOpenAI(api_key=api_key) as client:
            agent = create_summary_agent(repo, model, client)
            result = await Runner.run(
                agent,
                prompt,
                run_config=RunConfig(tracing_disabled=True),
            )
    except ReportError:
        raise
    except Exception as error:
        status = _provider_status(error)
        logger.warning("Summary model call failed (status=%s): %s", status, error)
        raise UpstreamError(
            "openai",
            status,
            str(error) or "OpenAI text completion failed.",
        ) from error

    raw = str(result.final_output or "").strip()
    if not raw:
        logger.info("Model returned an empty summary; using fallback renderer")
        return build_fallback_summary(window, commits)

    if raw.startswith("<"):
        return ReportSummary(html=raw)
    return ReportSummary(html=f"<section><p>{html.escape(raw)}</p></section>")
