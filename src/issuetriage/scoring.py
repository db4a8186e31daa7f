"""Score validation and commit helpers."""

from collections.abc import Mapping

from issuetriage.schemas import Issue, Rating, ScoreEntry

SCORED_VALUES = frozenset({"1", "2", "3", "4", "5"})


def is_valid_score(entry: ScoreEntry | Rating) -> bool:
    """Return True if the entry counts toward the session target.

    Ambiguity, scale and novelty must each be 1-5. An "x" in any of them
    excludes the entry. Type never matters.
    """
    return (
        entry.ambiguity in SCORED_VALUES
        and entry.scale in SCORED_VALUES
        and entry.novelty in SCORED_VALUES
    )


def count_valid(scores: Mapping[int, ScoreEntry]) -> int:
    return sum(1 for entry in scores.values() if is_valid_score(entry))


def commit_rating(
    scores: Mapping[int, ScoreEntry], issue: Issue, rating: Rating
) -> dict[int, ScoreEntry]:
    """Return a new score mapping with the rating committed for the issue.

    A second commit for the same issue number replaces the first.

    Raises:
        ValueError: If the rating is not complete.
    """
    if not rating.is_complete:
        raise ValueError("All four rating fields must be set before committing")

    entry = ScoreEntry(
        issue_number=issue.number,
        title=issue.title,
        url=issue.html_url,
        ambiguity=rating.ambiguity,
        scale=rating.scale,
        novelty=rating.novelty,
        type=rating.type,
    )
    return {**scores, issue.number: entry}
