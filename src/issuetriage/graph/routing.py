"""Conditional routing functions for the per-issue pipeline."""

from issuetriage.graph.state import PipelineState


def route_after_pr_check(state: PipelineState) -> str:
    """Skip issues that an open pull request already references."""
    if state.get("has_open_pr"):
        return "skip"
    return "summarize"
