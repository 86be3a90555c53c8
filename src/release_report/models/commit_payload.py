from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CommitAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: Optional[str] = None  # GitHub account, when linked
    name: Optional[str] = None   # name from the commit metadata

    @property
    def display_name(self) -> str:
        return self.login or self.name or "Unknown"


class CommitRecord(BaseModel):
    """
    One normalized, non-merge commit as returned by the commit source.
    """
    model_config = ConfigDict(frozen=True)

    sha: str
    date: datetime
    author: CommitAuthor
    message: str = ""
    summary_line: str = ""
    is_merge: bool = False
