"""Error taxonomy for triage sessions.

Nothing here is fatal to the process. Every error resolves either to a
retryable input state or to a degraded but continuing pipeline.
"""


class TriageError(Exception):
    """Base class for all triage errors."""


# === User input ===


class UserInputError(TriageError):
    """Blocks the action until the operator edits their input."""


class InvalidRepoUrlError(UserInputError):
    def __init__(self, url: str = ""):
        self.url = url
        super().__init__(
            "Invalid GitHub URL. Please use format: https://github.com/owner/repo"
        )


class MissingCredentialError(UserInputError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is required.")


class ValidationFailedError(UserInputError):
    def __init__(self):
        super().__init__("Validation Failed. Please check the URL.")


class NoIssuesFoundError(UserInputError):
    def __init__(self):
        super().__init__(
            "No open issues (without linked PRs) found in this repository."
        )


# === API failures ===


class TransientAPIError(TriageError):
    """Recoverable by retrying the whole fetch."""


class RateLimitError(TransientAPIError):
    def __init__(self):
        super().__init__("GitHub API Rate Limit exceeded. Please provide a Token.")


class GitHubAPIError(TransientAPIError):
    def __init__(self, status: int | None):
        self.status = status
        super().__init__(f"GitHub API Error: {status}")


class RepoNotFoundError(TriageError):
    def __init__(self):
        super().__init__("Repository not found.")


# === Degraded features ===


class DegradedFeatureError(TriageError):
    """A feature fell back to its safe default; the session proceeds."""


class SummaryUnavailableError(DegradedFeatureError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Summary generation failed after {attempts} attempts")
