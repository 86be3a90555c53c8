from typing import Any, Dict, Optional


class ReportError(Exception):
    """
    Base class for every failure the report pipeline surfaces to clients.

    Each subclass maps to exactly one HTTP-style status code; `message` is
    always human readable and safe to show.
    """
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message}


class DateWindowError(ReportError):
    """Missing or malformed dates, or start after end."""
    status_code = 400


class WindowTooLargeError(DateWindowError):
    """The requested window spans more days than allowed."""
    status_code = 413


class ConfigurationError(ReportError):
    """Operator setup is missing (credentials, repo, model)."""
    status_code = 500


class UpstreamError(ReportError):
    """
    GitHub or the model provider failed.

    - upstream: "github", "openai" or "report" (unexpected local failure)
    - upstream_status: the status the provider reported, kept for logs
    """
    status_code = 502

    def __init__(self, upstream: str, upstream_status: int, message: str):
        super().__init__(message)
        self.upstream = upstream
        self.upstream_status = upstream_status


class SecondaryRateLimitError(UpstreamError):
    """GitHub's secondary rate limit; clients should back off and retry later."""
    status_code = 429

    def __init__(self, message: str):
        super().__init__("github", 429, message)


class ReportTimeoutError(ReportError):
    status_code = 504
