"""PipelineState schema for the per-issue LangGraph workflow."""

from typing import Optional, TypedDict

from issuetriage.schemas import Issue, IssueComment


class PipelineState(TypedDict, total=False):
    """State for one run of the per-issue pipeline."""

    # === Input ===
    session_id: int
    issue: Issue

    # === PR-liveness check ===
    has_open_pr: bool
    pr_check_error: Optional[str]  # Set when the check failed open

    # === Summarization ===
    comments: list[IssueComment]
    summary: Optional[str]
    summary_error: Optional[str]
