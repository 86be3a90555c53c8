from datetime import date
from typing import Tuple

from pydantic import BaseModel, ConfigDict


class DateWindow(BaseModel):
    """
    Inclusive start/end calendar-date range a report covers.

    - start: first day (inclusive)
    - end: last day (inclusive)
    """
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @property
    def day_span(self) -> int:
        return (self.end - self.start).days + 1

    def to_utc_range(self) -> Tuple[str, str]:
        """
        Return (since, until) ISO instants covering both days entirely.
        """
        return (
            f"{self.start.isoformat()}T00:00:00Z",
            f"{self.end.isoformat()}T23:59:59Z",
        )
