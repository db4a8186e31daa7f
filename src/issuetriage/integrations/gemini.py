"""Gemini summarization client."""

from collections.abc import Sequence
from typing import Any, Optional

from google import genai

from issuetriage.config import DEFAULT_SUMMARIZE_MODEL
from issuetriage.errors import SummaryUnavailableError
from issuetriage.retry import RetryExhaustedError, RetryPolicy, Sleep
from issuetriage.schemas import Issue, IssueComment

SUMMARY_PROMPT = (
    "Summarize the following GitHub issue thread (Title, Body, and Comments) "
    "into a single, dense paragraph that captures the core problem, proposed "
    "solutions, and current status. Do not use bullet points. \n\n"
)

FALLBACK_SUMMARY = "Could not generate summary."


def build_issue_text(issue: Issue, comments: Sequence[IssueComment]) -> str:
    """Render title, body and comments as the text blob to summarize."""
    text = (
        f"Title: {issue.title}\n\n"
        f"Body:\n{issue.body or 'No description provided.'}\n\n"
    )
    if comments:
        text += "Comments:\n"
        for comment in comments:
            text += f"- User {comment.login}: {comment.body}\n"
    return text


def _extract_text(response: Any) -> Optional[str]:
    """Read candidates[0].content.parts[0].text, or None if any link is missing."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) if content is not None else None
    if not parts:
        return None
    return getattr(parts[0], "text", None)


class GeminiSummarizer:
    """Summarizes issue threads with one generateContent call per attempt."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_SUMMARIZE_MODEL,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[genai.Client] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy(name="summarize")
        self._client = client or genai.Client(api_key=api_key)
        self._sleep = sleep

    async def _generate(self, text: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=SUMMARY_PROMPT + text,
        )
        return _extract_text(response) or FALLBACK_SUMMARY

    async def summarize(self, text: str) -> str:
        """Return a one-paragraph summary of ``text``.

        Raises:
            SummaryUnavailableError: If every attempt in the retry schedule failed.
        """
        try:
            return await self.retry_policy.run(
                lambda: self._generate(text), sleep=self._sleep
            )
        except RetryExhaustedError as e:
            raise SummaryUnavailableError(e.attempts) from e.last_error
