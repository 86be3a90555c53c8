from datetime import date, datetime
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict

from .commit_payload import CommitRecord


class ReportSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    html: str


class ReportMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    commit_count: int
    model: str
    generated_at: datetime
    source: Literal["live"] = "live"


class Report(BaseModel):
    """
    Response body for a deploy report.

    Built once per request by the orchestrator and discarded after it is
    returned; to_response() gives the JSON shape clients consume.
    """
    model_config = ConfigDict(frozen=True)

    repo: str
    start: date
    end: date
    commits: List[CommitRecord]
    summary: ReportSummary
    meta: ReportMeta

    def to_response(self) -> Dict[str, Any]:
        return {
            "repo": self.repo,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "commits": [commit.model_dump(mode="json") for commit in self.commits],
            "summary_html": self.summary.html,
            "meta": self.meta.model_dump(mode="json"),
        }
