"""Session state and the messages that transition it."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from issuetriage.config import DEFAULT_TARGET_COUNT
from issuetriage.schemas import Issue, Rating, RatingField, RepoReference, ScoreEntry
from issuetriage.scoring import count_valid


class Phase(str, Enum):
    INPUT = "input"
    FETCHING = "fetching"
    TRIAGE = "triage"
    COMPLETE = "complete"


class SessionState(BaseModel):
    """Complete state of one triage session.

    Treated as a value: transitions build a new instance with ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    session_id: int = 0
    phase: Phase = Phase.INPUT
    target_count: int = DEFAULT_TARGET_COUNT

    repo: Optional[RepoReference] = None
    issues: tuple[Issue, ...] = ()
    current_index: int = 0
    scores: dict[int, ScoreEntry] = Field(default_factory=dict)
    skipped: tuple[int, ...] = ()

    current_summary: Optional[str] = None
    summary_error: Optional[str] = None
    current_rating: Rating = Field(default_factory=Rating)

    is_checking_pr: bool = False
    is_summarizing: bool = False
    error: Optional[str] = None

    @property
    def current_issue(self) -> Optional[Issue]:
        if self.phase != Phase.TRIAGE or not self.issues:
            return None
        if 0 <= self.current_index < len(self.issues):
            return self.issues[self.current_index]
        return None

    @property
    def valid_count(self) -> int:
        return count_valid(self.scores)

    @property
    def progress(self) -> float:
        """Fraction of the target reached, capped at 1.0."""
        if self.target_count <= 0:
            return 1.0
        return min(self.valid_count / self.target_count, 1.0)


def initial_state(
    session_id: int = 0, target_count: int = DEFAULT_TARGET_COUNT
) -> SessionState:
    return SessionState(session_id=session_id, target_count=target_count)


# === Messages ===


@dataclass(frozen=True)
class FetchRequested:
    repo_url: str
    summarizer_key: str


@dataclass(frozen=True)
class FetchSucceeded:
    session_id: int
    issues: tuple[Issue, ...]


@dataclass(frozen=True)
class FetchFailed:
    session_id: int
    error: str


@dataclass(frozen=True)
class PipelineStarted:
    session_id: int
    issue_number: int


@dataclass(frozen=True)
class PrCheckResolved:
    session_id: int
    issue_number: int
    has_open_pr: bool


@dataclass(frozen=True)
class SummaryResolved:
    session_id: int
    issue_number: int
    summary: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RatingChanged:
    field: RatingField
    value: str


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class FinishEarly:
    pass


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class NewSession:
    pass


Message = (
    FetchRequested
    | FetchSucceeded
    | FetchFailed
    | PipelineStarted
    | PrCheckResolved
    | SummaryResolved
    | RatingChanged
    | Advance
    | FinishEarly
    | Exit
    | NewSession
)
