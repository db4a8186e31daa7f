"""CSV report export."""

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Optional

from issuetriage.schemas import ScoreEntry
from issuetriage.scoring import is_valid_score

CSV_HEADERS = [
    "Issue Number",
    "Title",
    "URL",
    "Type",
    "Ambiguity",
    "Scale",
    "Novelty",
    "Is Scored (Not X)",
]


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def build_csv(scores: Mapping[int, ScoreEntry]) -> str:
    """Render committed scores as CSV, one row per entry in insertion order.

    Only the title is quoted. The last column is "Yes" when the entry counts
    toward the session target.
    """
    lines = [",".join(CSV_HEADERS)]
    for entry in scores.values():
        row = [
            str(entry.issue_number),
            _quote(entry.title),
            entry.url,
            entry.type,
            entry.ambiguity,
            entry.scale,
            entry.novelty,
            "Yes" if is_valid_score(entry) else "No",
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def report_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"triage_report_{today.isoformat()}.csv"


def write_report(
    scores: Mapping[int, ScoreEntry],
    directory: Path,
    today: Optional[date] = None,
) -> Path:
    """Write the CSV report into ``directory`` and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / report_filename(today)
    path.write_text(build_csv(scores), encoding="utf-8")
    return path
