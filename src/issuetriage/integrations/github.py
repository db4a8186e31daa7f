"""GitHub API integration."""

import asyncio
from dataclasses import dataclass
from typing import Any, NoReturn, Optional

from github import Auth, Github, GithubException

from issuetriage.config import DEFAULT_BATCH_SIZE
from issuetriage.errors import (
    GitHubAPIError,
    NoIssuesFoundError,
    RateLimitError,
    RepoNotFoundError,
    ValidationFailedError,
)
from issuetriage.schemas import Issue, IssueComment, RepoReference


def parse_repo_url(url: str) -> Optional[RepoReference]:
    """Parse owner and repo from a repository URL.

    Only the last two path segments are used, so
    ``https://github.com/acme/widget/`` and ``acme/widget`` both work.
    The repository is not checked for existence here.

    Returns:
        RepoReference, or None if fewer than two segments remain.
    """
    clean_url = url.strip()
    if clean_url.endswith("/"):
        clean_url = clean_url[:-1]

    parts = clean_url.split("/")
    if len(parts) < 2:
        return None

    owner, repo = parts[-2], parts[-1]
    if not owner or not repo:
        return None
    return RepoReference(owner=owner, repo=repo)


def build_search_query(ref: RepoReference) -> str:
    """Search query for open issues with no formally linked PR."""
    return f"repo:{ref.full_name} is:issue is:open -linked:pr"


def _raise_for_status(error: GithubException) -> NoReturn:
    match error.status:
        case 403:
            raise RateLimitError() from error
        case 404:
            raise RepoNotFoundError() from error
        case 422:
            raise ValidationFailedError() from error
        case _:
            raise GitHubAPIError(error.status) from error


def _to_issue(raw: Any) -> Issue:
    return Issue(
        number=raw.number,
        title=raw.title,
        body=raw.body,
        html_url=raw.html_url,
        created_at=raw.created_at,
        comments_url=raw.comments_url,
        url=raw.url,
    )


def _is_open_pr_reference(event: Any) -> bool:
    """True for a cross-reference whose source is a still-open pull request."""
    if event.event != "cross-referenced":
        return False
    source = event.source
    if source is None or source.issue is None:
        return False
    return source.issue.pull_request is not None and source.issue.state == "open"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a fail-safe check. ``error`` is set when ``value`` is the default."""

    value: bool
    error: Optional[str] = None


class GitHubIssueSource:
    """Read-only access to one repository's issues.

    All PyGithub calls are blocking, so each public coroutine runs its work
    in a worker thread.
    """

    def __init__(
        self,
        ref: RepoReference,
        token: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        client: Optional[Github] = None,
        base_url: Optional[str] = None,
    ):
        self.ref = ref
        self.batch_size = batch_size
        if client is None:
            auth = Auth.Token(token) if token else None
            options = {"base_url": base_url} if base_url else {}
            # A failed request fails the step at once; no waiting out rate limits.
            client = Github(auth=auth, per_page=batch_size, retry=None, **options)
        self._gh = client
        self._handles: dict[int, Any] = {}

    # ------------------------------------------------------------------ #
    # Issue search                                                        #
    # ------------------------------------------------------------------ #

    def _search(self) -> list[Issue]:
        try:
            results = self._gh.search_issues(
                build_search_query(self.ref), sort="created", order="asc"
            )
            # First page only: a session never paginates past one batch.
            page = results.get_page(0)
        except GithubException as e:
            _raise_for_status(e)

        issues = []
        for raw in page[: self.batch_size]:
            self._handles[raw.number] = raw
            issues.append(_to_issue(raw))

        if not issues:
            raise NoIssuesFoundError()
        return issues

    async def fetch_issues(self) -> list[Issue]:
        """Fetch up to one batch of open issues, oldest first.

        Raises:
            RateLimitError: On HTTP 403.
            RepoNotFoundError: On HTTP 404.
            ValidationFailedError: On HTTP 422.
            GitHubAPIError: On any other error status.
            NoIssuesFoundError: If the search returns nothing.
        """
        return await asyncio.to_thread(self._search)

    # ------------------------------------------------------------------ #
    # Per-issue lookups                                                   #
    # ------------------------------------------------------------------ #

    def _handle(self, issue: Issue) -> Any:
        if issue.number not in self._handles:
            repository = self._gh.get_repo(self.ref.full_name)
            self._handles[issue.number] = repository.get_issue(issue.number)
        return self._handles[issue.number]

    def _check_open_pr(self, issue: Issue) -> CheckResult:
        try:
            timeline = self._handle(issue).get_timeline()
            return CheckResult(value=any(_is_open_pr_reference(e) for e in timeline))
        except Exception as e:
            return CheckResult(value=False, error=str(e) or type(e).__name__)

    async def check_open_pull_request(self, issue: Issue) -> CheckResult:
        """Look for a cross-reference from an open PR in the issue timeline.

        Never raises. Any failure yields ``CheckResult(False, error)`` so a
        flaky lookup cannot stall the session.
        """
        return await asyncio.to_thread(self._check_open_pr, issue)

    def _comments(self, issue: Issue) -> list[IssueComment]:
        return [
            IssueComment(login=c.user.login if c.user else "ghost", body=c.body or "")
            for c in self._handle(issue).get_comments()
        ]

    async def fetch_comments(self, issue: Issue) -> list[IssueComment]:
        """Fetch the issue's comments.

        Raises:
            GithubException: On API failure. Callers degrade to no comments.
        """
        return await asyncio.to_thread(self._comments, issue)
