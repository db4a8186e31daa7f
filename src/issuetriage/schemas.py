"""Pydantic models shared across the triage pipeline."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

ISSUE_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "ci",
    "build",
    "chore",
    "revert",
)

RATING_VALUES = ("x", "1", "2", "3", "4", "5")

RatingValue = Literal["x", "1", "2", "3", "4", "5"]
IssueType = Literal[
    "feat", "fix", "docs", "style", "refactor", "perf", "test", "ci", "build", "chore", "revert"
]
RatingField = Literal["ambiguity", "scale", "novelty", "type"]


class RepoReference(BaseModel):
    """Repository owner/name pair parsed from a URL."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class Issue(BaseModel):
    """An open issue as returned by the search API."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    body: Optional[str] = None
    html_url: str
    created_at: datetime
    comments_url: str
    url: str


class IssueComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    body: str = ""


class Rating(BaseModel):
    """Draft rating for the issue currently on screen."""

    model_config = ConfigDict(frozen=True)

    ambiguity: Optional[RatingValue] = None
    scale: Optional[RatingValue] = None
    novelty: Optional[RatingValue] = None
    type: Optional[IssueType] = None

    @property
    def is_complete(self) -> bool:
        return all(
            v is not None for v in (self.ambiguity, self.scale, self.novelty, self.type)
        )


class ScoreEntry(BaseModel):
    """A committed rating for one issue."""

    model_config = ConfigDict(frozen=True)

    issue_number: int
    title: str
    url: str
    ambiguity: RatingValue
    scale: RatingValue
    novelty: RatingValue
    type: IssueType
