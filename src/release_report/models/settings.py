import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from ..agent.errors import ConfigurationError


GITHUB_API_URL = "https://api.github.com"


def normalize_model_name(value: Optional[str]) -> Optional[str]:
    """
    Strip a provider prefix from a model identifier.

    "openai/gpt-4o-mini" -> "gpt-4o-mini". Blank input gives None.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return trimmed.split("/")[-1] or trimmed


class ReportSettings(BaseModel):
    """
    Process-wide, read-only configuration for the report pipeline.

    Built explicitly (usually via from_env) and handed to the orchestrator
    on every call, so tests can swap values per call.
    """
    model_config = ConfigDict(frozen=True)

    github_repo: Optional[str] = None    # e.g. "octo-org/octo-repo"
    github_token: Optional[str] = None
    github_api_url: str = GITHUB_API_URL
    openai_api_key: Optional[str] = None
    openai_model: Optional[str] = None   # may carry a provider prefix
    max_window_days: int = 30
    timeout_seconds: float = 120.0

    @property
    def model_name(self) -> Optional[str]:
        return normalize_model_name(self.openai_model)

    @classmethod
    def from_env(cls) -> "ReportSettings":
        """
        Read settings from the environment (call load_dotenv() first if you
        want .env support).

        Raises ConfigurationError when a value cannot be parsed.
        """
        try:
            return cls(
                github_repo=os.getenv("GITHUB_REPO") or None,
                github_token=os.getenv("GITHUB_TOKEN") or None,
                github_api_url=os.getenv("GITHUB_API_URL") or GITHUB_API_URL,
                openai_api_key=os.getenv("OPENAI_API_KEY") or None,
                openai_model=os.getenv("OPENAI_MODEL") or os.getenv("OPENAI_REALTIME_MODEL"),
                max_window_days=os.getenv("REPORT_MAX_WINDOW_DAYS") or 30,
                timeout_seconds=os.getenv("REPORT_TIMEOUT_SECONDS") or 120.0,
            )
        except ValidationError as error:
            fields = ", ".join(str(item["loc"][0]) for item in error.errors() if item.get("loc"))
            raise ConfigurationError(
                f"Report settings are invalid: {fields}."
            ) from error
