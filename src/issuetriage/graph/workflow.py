"""LangGraph workflow definition for the per-issue pipeline."""

from langgraph.graph import END, StateGraph

from issuetriage.graph.routing import route_after_pr_check
from issuetriage.graph.state import PipelineState
from issuetriage.integrations.gemini import GeminiSummarizer
from issuetriage.integrations.github import GitHubIssueSource
from issuetriage.nodes.check_pr import make_check_pr_node
from issuetriage.nodes.summarize import make_fetch_comments_node, make_summarize_node


def _build_issue_pipeline(
    source: GitHubIssueSource, summarizer: GeminiSummarizer
) -> StateGraph:
    """Build the pipeline: check_pr → (skip | fetch_comments → summarize)."""
    workflow = StateGraph(PipelineState)

    workflow.add_node("check_pr", make_check_pr_node(source))
    workflow.add_node("fetch_comments", make_fetch_comments_node(source))
    workflow.add_node("summarize", make_summarize_node(summarizer))

    workflow.set_entry_point("check_pr")

    # PR check must finish before summarization starts
    workflow.add_conditional_edges(
        "check_pr",
        route_after_pr_check,
        {
            "skip": END,
            "summarize": "fetch_comments",
        },
    )
    workflow.add_edge("fetch_comments", "summarize")
    workflow.add_edge("summarize", END)

    return workflow


def create_issue_pipeline(source: GitHubIssueSource, summarizer: GeminiSummarizer):
    """Create the compiled per-issue pipeline.

    Args:
        source: Issue source used for the PR check and comments.
        summarizer: Summarization client.

    Returns:
        Compiled workflow graph.
    """
    return _build_issue_pipeline(source, summarizer).compile()


def get_thread_id(session_id: int, issue_number: int) -> str:
    """Generate the thread ID that tags one pipeline run in traces.

    Returns:
        Thread ID in format "session_id:issue_number".
    """
    return f"{session_id}:{issue_number}"
