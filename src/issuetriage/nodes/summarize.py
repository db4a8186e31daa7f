"""Summarize nodes - gather the discussion thread and summarize it."""

from collections.abc import Awaitable, Callable

from issuetriage.errors import SummaryUnavailableError
from issuetriage.graph.state import PipelineState
from issuetriage.integrations.gemini import GeminiSummarizer, build_issue_text
from issuetriage.integrations.github import GitHubIssueSource
from issuetriage.observability import log_node_event, traced_node

SUMMARY_ERROR_MESSAGE = (
    "Failed to generate summary. You may need to read the raw issue."
)


def make_fetch_comments_node(
    source: GitHubIssueSource,
) -> Callable[[PipelineState], Awaitable[dict]]:
    """Build the node that loads comments, degrading to none on failure."""

    @traced_node("fetch_comments")
    async def fetch_comments_node(state: PipelineState) -> dict:
        issue = state["issue"]
        try:
            comments = await source.fetch_comments(issue)
        except Exception as e:
            log_node_event(
                "fetch_comments",
                "Could not fetch comments, summarizing without them",
                "warning",
                issue_number=issue.number,
                error=e,
            )
            comments = []
        return {"comments": comments}

    return fetch_comments_node


def make_summarize_node(
    summarizer: GeminiSummarizer,
) -> Callable[[PipelineState], Awaitable[dict]]:
    """Build the node that asks Gemini for a one-paragraph summary."""

    @traced_node("summarize", run_type="llm")
    async def summarize_node(state: PipelineState) -> dict:
        issue = state["issue"]
        text = build_issue_text(issue, state.get("comments", []))
        try:
            summary = await summarizer.summarize(text)
        except SummaryUnavailableError as e:
            log_node_event(
                "summarize",
                "Summary unavailable",
                "error",
                issue_number=issue.number,
                error=e.__cause__ or e,
            )
            return {"summary": None, "summary_error": SUMMARY_ERROR_MESSAGE}
        return {"summary": summary, "summary_error": None}

    return summarize_node
