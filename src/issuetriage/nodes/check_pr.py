"""PR-liveness node - skips issues already in flight."""

from collections.abc import Awaitable, Callable

from issuetriage.graph.state import PipelineState
from issuetriage.integrations.github import GitHubIssueSource
from issuetriage.observability import log_node_event, traced_node


def make_check_pr_node(
    source: GitHubIssueSource,
) -> Callable[[PipelineState], Awaitable[dict]]:
    """Build the node that checks the issue timeline for open PRs."""

    @traced_node("check_pr")
    async def check_pr_node(state: PipelineState) -> dict:
        issue = state["issue"]
        result = await source.check_open_pull_request(issue)

        if result.error:
            log_node_event(
                "check_pr",
                "PR check failed, treating issue as not blocked",
                "warning",
                issue_number=issue.number,
                error=result.error,
            )
        elif result.value:
            log_node_event(
                "check_pr",
                "Skipping issue due to existing open PR",
                issue_number=issue.number,
            )

        return {"has_open_pr": result.value, "pr_check_error": result.error}

    return check_pr_node
