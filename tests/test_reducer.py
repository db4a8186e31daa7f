"""Tests for session state transitions."""

import pytest

from issuetriage.schemas import Rating
from issuetriage.session.reducer import reduce
from issuetriage.session.state import (
    Advance,
    Exit,
    FetchFailed,
    FetchRequested,
    FetchSucceeded,
    FinishEarly,
    NewSession,
    Phase,
    PipelineStarted,
    PrCheckResolved,
    RatingChanged,
    SummaryResolved,
    initial_state,
)

URL = "https://github.com/acme/widget"
SCORED = Rating(ambiguity="3", scale="3", novelty="3", type="fix")
UNSCORED = Rating(ambiguity="x", scale="3", novelty="3", type="fix")


@pytest.fixture
def triage_state(make_issue):
    """A session in Triage with issues #1-#3."""

    def _make(count=3, target_count=15):
        state = initial_state(target_count=target_count)
        state = reduce(state, FetchRequested(URL, "key"))
        issues = tuple(make_issue(n) for n in range(1, count + 1))
        return reduce(state, FetchSucceeded(state.session_id, issues))

    return _make


def _rate(state, rating):
    for field in ("ambiguity", "scale", "novelty", "type"):
        state = reduce(state, RatingChanged(field, getattr(rating, field)))
    return state


def _rate_and_advance(state, rating=SCORED):
    return reduce(_rate(state, rating), Advance())


class TestFetch:
    def test_invalid_url_stays_in_input(self):
        state = reduce(initial_state(), FetchRequested("not-a-url", "key"))

        assert state.phase == Phase.INPUT
        assert "Invalid GitHub URL" in state.error

    def test_missing_summarizer_key(self):
        state = reduce(initial_state(), FetchRequested(URL, ""))

        assert state.phase == Phase.INPUT
        assert "Gemini API key" in state.error

    def test_valid_request_enters_fetching(self):
        start = initial_state()
        state = reduce(start, FetchRequested(URL + "/", "key"))

        assert state.phase == Phase.FETCHING
        assert state.repo.full_name == "acme/widget"
        assert state.session_id == start.session_id + 1

    def test_success_enters_triage(self, triage_state):
        state = triage_state()

        assert state.phase == Phase.TRIAGE
        assert state.current_index == 0
        assert state.current_issue.number == 1

    def test_empty_list_stays_in_input(self):
        state = reduce(initial_state(), FetchRequested(URL, "key"))
        state = reduce(state, FetchSucceeded(state.session_id, ()))

        assert state.phase == Phase.INPUT
        assert "No open issues" in state.error

    def test_failure_returns_to_input(self):
        state = reduce(initial_state(), FetchRequested(URL, "key"))
        state = reduce(state, FetchFailed(state.session_id, "Repository not found."))

        assert state.phase == Phase.INPUT
        assert state.error == "Repository not found."

    def test_stale_fetch_result_ignored(self, make_issue):
        state = reduce(initial_state(), FetchRequested(URL, "key"))
        after = reduce(state, FetchSucceeded(state.session_id - 1, (make_issue(1),)))

        assert after == state


class TestPipelineMessages:
    def test_started_resets_view(self, triage_state):
        state = triage_state()
        state = reduce(state, RatingChanged("ambiguity", "2"))
        state = reduce(state, PipelineStarted(state.session_id, 1))

        assert state.is_checking_pr
        assert state.current_rating == Rating()
        assert state.current_summary is None

    def test_no_open_pr_starts_summarizing(self, triage_state):
        state = triage_state()
        state = reduce(state, PipelineStarted(state.session_id, 1))
        state = reduce(state, PrCheckResolved(state.session_id, 1, False))

        assert not state.is_checking_pr
        assert state.is_summarizing
        assert state.current_index == 0

    def test_open_pr_skips_without_score(self, triage_state):
        state = triage_state()
        state = _rate_and_advance(state)
        state = reduce(state, PipelineStarted(state.session_id, 2))
        state = reduce(state, PrCheckResolved(state.session_id, 2, True))

        assert state.current_issue.number == 3
        assert list(state.scores) == [1]
        assert state.skipped == (2,)

    def test_open_pr_on_last_issue_completes(self, triage_state):
        state = triage_state(count=1)
        state = reduce(state, PrCheckResolved(state.session_id, 1, True))

        assert state.phase == Phase.COMPLETE
        assert state.scores == {}

    def test_summary_resolved(self, triage_state):
        state = triage_state()
        state = reduce(state, SummaryResolved(state.session_id, 1, summary="Short."))

        assert state.current_summary == "Short."
        assert not state.is_summarizing

    def test_summary_error_is_degraded_not_blocking(self, triage_state):
        state = triage_state()
        state = reduce(
            state, SummaryResolved(state.session_id, 1, error="Failed to generate summary.")
        )
        state = _rate_and_advance(state)

        assert state.summary_error is None
        assert state.current_issue.number == 2
        assert 1 in state.scores

    def test_late_result_for_previous_issue_ignored(self, triage_state):
        state = triage_state()
        state = _rate_and_advance(state)

        after = reduce(state, SummaryResolved(state.session_id, 1, summary="stale"))
        after = reduce(after, PrCheckResolved(state.session_id, 1, True))

        assert after == state

    def test_result_from_discarded_session_ignored(self, triage_state):
        state = triage_state()
        old_session = state.session_id
        state = reduce(state, Exit())
        state = reduce(state, FetchRequested(URL, "key"))

        after = reduce(state, PrCheckResolved(old_session, 1, True))

        assert after == state


class TestRating:
    def test_invalid_value_rejected(self, triage_state):
        state = reduce(triage_state(), RatingChanged("scale", "9"))

        assert state.current_rating.scale is None
        assert "scale" in state.error

    def test_invalid_type_rejected(self, triage_state):
        state = reduce(triage_state(), RatingChanged("type", "bug"))
        assert state.current_rating.type is None

    def test_advance_requires_complete_rating(self, triage_state):
        state = triage_state()
        state = reduce(state, RatingChanged("ambiguity", "1"))
        state = reduce(state, Advance())

        assert state.current_index == 0
        assert state.scores == {}
        assert state.error

    def test_advance_blocked_while_checking_pr(self, triage_state):
        state = triage_state()
        state = reduce(state, PipelineStarted(state.session_id, 1))
        state = _rate(state, SCORED)
        state = reduce(state, Advance())

        assert state.current_index == 0
        assert state.scores == {}

    def test_advance_commits_and_moves_on(self, triage_state):
        state = _rate_and_advance(triage_state())

        assert state.current_index == 1
        assert state.scores[1].ambiguity == "3"
        assert state.current_rating == Rating()

    def test_x_rating_is_recorded_but_not_counted(self, triage_state):
        state = _rate_and_advance(triage_state(), UNSCORED)

        assert 1 in state.scores
        assert state.valid_count == 0


class TestCompletion:
    def test_target_reached_completes_with_issues_left(self, triage_state):
        state = triage_state(count=5, target_count=2)
        state = _rate_and_advance(state)
        state = _rate_and_advance(state)

        assert state.phase == Phase.COMPLETE
        assert state.valid_count == 2
        assert state.current_index == 1

    def test_unscored_entries_do_not_reach_target(self, triage_state):
        state = triage_state(count=5, target_count=2)
        state = _rate_and_advance(state, UNSCORED)
        state = _rate_and_advance(state)

        assert state.phase == Phase.TRIAGE
        assert state.current_issue.number == 3

    def test_end_of_batch_completes(self, triage_state):
        state = triage_state(count=2)
        state = _rate_and_advance(state, UNSCORED)
        state = _rate_and_advance(state)

        assert state.phase == Phase.COMPLETE
        assert list(state.scores) == [1, 2]

    def test_finish_early_keeps_committed_scores(self, triage_state):
        state = _rate_and_advance(triage_state())
        state = _rate(state, SCORED)
        state = reduce(state, FinishEarly())

        assert state.phase == Phase.COMPLETE
        assert list(state.scores) == [1]
        assert state.current_rating == Rating()

    def test_exit_discards_session(self, triage_state):
        state = _rate_and_advance(triage_state())
        state = reduce(state, Exit())

        assert state.phase == Phase.INPUT
        assert state.issues == ()
        assert state.scores == {}
        assert state.current_index == 0

    def test_exit_only_from_triage(self):
        state = initial_state()
        assert reduce(state, Exit()) == state

    def test_new_session_from_complete(self, triage_state):
        state = reduce(_rate_and_advance(triage_state()), FinishEarly())
        state = reduce(state, NewSession())

        assert state.phase == Phase.INPUT
        assert state.scores == {}
        assert state.target_count == 15

    def test_progress(self, triage_state):
        state = triage_state(count=5, target_count=4)
        state = _rate_and_advance(state)

        assert state.progress == 0.25
