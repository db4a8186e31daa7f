"""Pure transition function for the triage session.

``reduce(state, message)`` never performs I/O. Results of network calls
arrive as messages tagged with the session id and issue number that started
them, so a late answer for an issue the session has moved past is dropped.
"""

from pydantic import ValidationError

from issuetriage.errors import (
    InvalidRepoUrlError,
    MissingCredentialError,
    NoIssuesFoundError,
)
from issuetriage.integrations.github import parse_repo_url
from issuetriage.schemas import Rating
from issuetriage.scoring import commit_rating, count_valid
from issuetriage.session.state import (
    Advance,
    Exit,
    FetchFailed,
    FetchRequested,
    FetchSucceeded,
    FinishEarly,
    Message,
    NewSession,
    Phase,
    PipelineStarted,
    PrCheckResolved,
    RatingChanged,
    SessionState,
    SummaryResolved,
    initial_state,
)

_RESET_ISSUE_VIEW = {
    "current_rating": Rating(),
    "current_summary": None,
    "summary_error": None,
    "is_checking_pr": False,
    "is_summarizing": False,
}


def _is_current(state: SessionState, session_id: int, issue_number: int) -> bool:
    issue = state.current_issue
    return (
        issue is not None
        and state.session_id == session_id
        and issue.number == issue_number
    )


def _fresh(state: SessionState) -> SessionState:
    """Discard everything and return to Input under a new session id."""
    return initial_state(
        session_id=state.session_id + 1, target_count=state.target_count
    )


def _advance_or_complete(state: SessionState, **update) -> SessionState:
    if state.current_index < len(state.issues) - 1:
        return state.model_copy(
            update={
                **update,
                **_RESET_ISSUE_VIEW,
                "current_index": state.current_index + 1,
            }
        )
    # End of the batch
    return state.model_copy(
        update={**update, **_RESET_ISSUE_VIEW, "phase": Phase.COMPLETE}
    )


def reduce(state: SessionState, message: Message) -> SessionState:
    """Return the state that follows ``state`` after ``message``.

    Messages that do not apply to the current phase leave the state unchanged.
    """
    match message:
        case FetchRequested(repo_url=repo_url, summarizer_key=summarizer_key):
            if state.phase != Phase.INPUT:
                return state
            ref = parse_repo_url(repo_url)
            if ref is None:
                return state.model_copy(
                    update={"error": str(InvalidRepoUrlError(repo_url))}
                )
            if not summarizer_key:
                return state.model_copy(
                    update={"error": str(MissingCredentialError("Gemini API key"))}
                )
            return state.model_copy(
                update={
                    "phase": Phase.FETCHING,
                    "session_id": state.session_id + 1,
                    "repo": ref,
                    "error": None,
                }
            )

        case FetchSucceeded(session_id=session_id, issues=issues):
            if state.phase != Phase.FETCHING or session_id != state.session_id:
                return state
            if not issues:
                return state.model_copy(
                    update={"phase": Phase.INPUT, "error": str(NoIssuesFoundError())}
                )
            return state.model_copy(
                update={
                    **_RESET_ISSUE_VIEW,
                    "phase": Phase.TRIAGE,
                    "issues": tuple(issues),
                    "current_index": 0,
                    "scores": {},
                    "skipped": (),
                    "error": None,
                }
            )

        case FetchFailed(session_id=session_id, error=error):
            if state.phase != Phase.FETCHING or session_id != state.session_id:
                return state
            return state.model_copy(update={"phase": Phase.INPUT, "error": error})

        case PipelineStarted(session_id=session_id, issue_number=issue_number):
            if not _is_current(state, session_id, issue_number):
                return state
            return state.model_copy(
                update={**_RESET_ISSUE_VIEW, "is_checking_pr": True, "error": None}
            )

        case PrCheckResolved(
            session_id=session_id, issue_number=issue_number, has_open_pr=has_open_pr
        ):
            if not _is_current(state, session_id, issue_number):
                return state
            if has_open_pr:
                return _advance_or_complete(
                    state, skipped=(*state.skipped, issue_number)
                )
            return state.model_copy(
                update={"is_checking_pr": False, "is_summarizing": True}
            )

        case SummaryResolved(
            session_id=session_id, issue_number=issue_number, summary=summary, error=error
        ):
            if not _is_current(state, session_id, issue_number):
                return state
            return state.model_copy(
                update={
                    "is_summarizing": False,
                    "current_summary": summary,
                    "summary_error": error,
                }
            )

        case RatingChanged(field=field, value=value):
            if state.phase != Phase.TRIAGE:
                return state
            try:
                rating = Rating.model_validate(
                    {**state.current_rating.model_dump(), field: value}
                )
            except ValidationError:
                return state.model_copy(
                    update={"error": f"Invalid value for {field}: {value!r}"}
                )
            return state.model_copy(update={"current_rating": rating, "error": None})

        case Advance():
            issue = state.current_issue
            if issue is None:
                return state
            if state.is_checking_pr:
                return state.model_copy(
                    update={"error": "Still checking for open pull requests."}
                )
            if not state.current_rating.is_complete:
                return state.model_copy(
                    update={"error": "Rate ambiguity, scale, novelty and type first."}
                )
            scores = commit_rating(state.scores, issue, state.current_rating)
            if count_valid(scores) >= state.target_count:
                return state.model_copy(
                    update={
                        **_RESET_ISSUE_VIEW,
                        "scores": scores,
                        "phase": Phase.COMPLETE,
                        "error": None,
                    }
                )
            return _advance_or_complete(state, scores=scores, error=None)

        case FinishEarly():
            if state.phase != Phase.TRIAGE:
                return state
            # The uncommitted draft is dropped; committed scores stay.
            return state.model_copy(
                update={**_RESET_ISSUE_VIEW, "phase": Phase.COMPLETE, "error": None}
            )

        case Exit():
            if state.phase != Phase.TRIAGE:
                return state
            return _fresh(state)

        case NewSession():
            if state.phase != Phase.COMPLETE:
                return state
            return _fresh(state)

    return state
