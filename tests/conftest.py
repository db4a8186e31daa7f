"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from issuetriage.errors import SummaryUnavailableError
from issuetriage.integrations.github import CheckResult
from issuetriage.schemas import Issue, IssueComment


def _load_env_file():
    """Load .env file from project root if it exists."""
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.exists():
        return

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip("'\"")
                if key not in os.environ:
                    os.environ[key] = value


_load_env_file()
# Never send test runs to LangSmith
os.environ["LANGCHAIN_TRACING_V2"] = "false"


def build_issue(number: int, title: str = "", body: str | None = "Body") -> Issue:
    api = f"https://api.github.com/repos/acme/widget/issues/{number}"
    return Issue(
        number=number,
        title=title or f"Issue {number}",
        body=body,
        html_url=f"https://github.com/acme/widget/issues/{number}",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        comments_url=f"{api}/comments",
        url=api,
    )


@pytest.fixture
def make_issue():
    return build_issue


class FakeIssueSource:
    """In-memory stand-in for GitHubIssueSource."""

    def __init__(
        self,
        issues=(),
        open_pr=(),
        comments=None,
        fetch_error=None,
        comments_error=None,
        pr_check_error=None,
    ):
        self.issues = list(issues)
        self.open_pr = set(open_pr)
        self.comments = comments or {}
        self.fetch_error = fetch_error
        self.comments_error = comments_error
        self.pr_check_error = pr_check_error
        self.calls = []

    async def fetch_issues(self):
        self.calls.append(("fetch_issues",))
        if self.fetch_error:
            raise self.fetch_error
        return self.issues

    async def check_open_pull_request(self, issue):
        self.calls.append(("check_pr", issue.number))
        if self.pr_check_error:
            return CheckResult(value=False, error=self.pr_check_error)
        return CheckResult(value=issue.number in self.open_pr)

    async def fetch_comments(self, issue):
        self.calls.append(("comments", issue.number))
        if self.comments_error:
            raise self.comments_error
        return self.comments.get(issue.number, [])


class FakeSummarizer:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.texts = []

    async def summarize(self, text):
        self.texts.append(text)
        for number in self.fail_for:
            if f"Title: Issue {number}\n" in text:
                raise SummaryUnavailableError(4)
        return f"Summary {len(self.texts)}"


@pytest.fixture
def fake_source():
    return FakeIssueSource


@pytest.fixture
def fake_summarizer():
    return FakeSummarizer


@pytest.fixture
def comment():
    return lambda login, body: IssueComment(login=login, body=body)
