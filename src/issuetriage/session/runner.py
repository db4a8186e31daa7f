"""Async driver that runs network work and feeds results to the reducer."""

from collections.abc import Callable
from typing import Optional

from issuetriage.config import TriageConfig, load_config
from issuetriage.errors import TriageError
from issuetriage.graph.workflow import create_issue_pipeline, get_thread_id
from issuetriage.integrations.gemini import GeminiSummarizer
from issuetriage.integrations.github import GitHubIssueSource
from issuetriage.observability import log_node_event
from issuetriage.retry import RetryPolicy
from issuetriage.schemas import RatingField, RepoReference
from issuetriage.session.reducer import reduce
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

SourceFactory = Callable[[RepoReference, Optional[str]], GitHubIssueSource]
SummarizerFactory = Callable[[str], GeminiSummarizer]


class TriageSession:
    """Owns the current SessionState and runs one issue pipeline at a time."""

    def __init__(
        self,
        config: Optional[TriageConfig] = None,
        source_factory: Optional[SourceFactory] = None,
        summarizer_factory: Optional[SummarizerFactory] = None,
    ):
        self.config = config or load_config()
        self._source_factory = source_factory or self._default_source
        self._summarizer_factory = summarizer_factory or self._default_summarizer
        self.state = initial_state(target_count=self.config.session.target_count)
        self._pipeline = None
        self._processed: Optional[tuple[int, int]] = None

    def _default_source(
        self, ref: RepoReference, token: Optional[str]
    ) -> GitHubIssueSource:
        return GitHubIssueSource(
            ref, token=token, batch_size=self.config.session.batch_size
        )

    def _default_summarizer(self, api_key: str) -> GeminiSummarizer:
        return GeminiSummarizer(
            api_key,
            model=self.config.models.summarize,
            retry_policy=RetryPolicy(delays=self.config.retry.delays, name="summarize"),
        )

    def dispatch(self, message: Message) -> SessionState:
        self.state = reduce(self.state, message)
        return self.state

    # ------------------------------------------------------------------ #
    # Fetch                                                               #
    # ------------------------------------------------------------------ #

    async def fetch(
        self, repo_url: str, github_token: Optional[str], gemini_key: str
    ) -> SessionState:
        """Fetch the batch and enter Triage, or stay in Input with an error."""
        state = self.dispatch(FetchRequested(repo_url, gemini_key))
        if state.phase != Phase.FETCHING:
            return state

        session_id = state.session_id
        source = self._source_factory(state.repo, github_token or None)
        try:
            issues = await source.fetch_issues()
        except TriageError as e:
            return self.dispatch(FetchFailed(session_id, str(e)))
        except Exception as e:
            log_node_event("fetch", "Unexpected fetch failure", "error", error=e)
            return self.dispatch(FetchFailed(session_id, f"GitHub API Error: {e}"))

        self._pipeline = create_issue_pipeline(
            source, self._summarizer_factory(gemini_key)
        )
        self._processed = None
        log_node_event(
            "fetch", "Fetched issues", "success", repo=state.repo.full_name, count=len(issues)
        )
        return self.dispatch(FetchSucceeded(session_id, tuple(issues)))

    # ------------------------------------------------------------------ #
    # Per-issue pipeline                                                  #
    # ------------------------------------------------------------------ #

    async def _run_pipeline(self) -> None:
        issue = self.state.current_issue
        session_id = self.state.session_id
        self.dispatch(PipelineStarted(session_id, issue.number))

        config = {"configurable": {"thread_id": get_thread_id(session_id, issue.number)}}
        summary_update: dict = {}
        async for chunk in self._pipeline.astream(
            {"session_id": session_id, "issue": issue},
            config=config,
            stream_mode="updates",
        ):
            for node, update in chunk.items():
                if node == "check_pr":
                    self.dispatch(
                        PrCheckResolved(session_id, issue.number, update["has_open_pr"])
                    )
                elif node == "summarize":
                    summary_update = update

        if summary_update:
            self.dispatch(
                SummaryResolved(
                    session_id,
                    issue.number,
                    summary=summary_update.get("summary"),
                    error=summary_update.get("summary_error"),
                )
            )

    async def process_current_issue(self) -> SessionState:
        """Run the pipeline for the current issue until one is ready to rate.

        Skipped issues advance the index, which starts the pipeline again for
        the next issue. Returns once an issue awaits rating or the session is
        no longer in Triage.
        """
        while self.state.phase == Phase.TRIAGE and self._pipeline is not None:
            key = (self.state.session_id, self.state.current_index)
            if key == self._processed:
                break
            self._processed = key
            await self._run_pipeline()
        return self.state

    # ------------------------------------------------------------------ #
    # Operator actions                                                    #
    # ------------------------------------------------------------------ #

    def rate(self, field: RatingField, value: str) -> SessionState:
        return self.dispatch(RatingChanged(field, value))

    async def advance(self) -> SessionState:
        """Commit the draft rating and move on (or finish)."""
        self.dispatch(Advance())
        return await self.process_current_issue()

    def finish_early(self) -> SessionState:
        return self.dispatch(FinishEarly())

    def exit(self) -> SessionState:
        """Discard the whole session. Callers confirm with the operator first."""
        state = self.dispatch(Exit())
        if state.phase == Phase.INPUT:
            self._pipeline = None
            self._processed = None
        return state

    def new_session(self) -> SessionState:
        state = self.dispatch(NewSession())
        if state.phase == Phase.INPUT:
            self._pipeline = None
            self._processed = None
        return state
