"""CLI entry point using Typer."""

import asyncio
import os
from pathlib import Path
from typing import Optional

import click
import typer

from issuetriage.config import load_config, setup_langsmith
from issuetriage.export import write_report
from issuetriage.schemas import ISSUE_TYPES, RATING_VALUES
from issuetriage.session import Phase, SessionState, TriageSession
from issuetriage.settings import SETTINGS_KEYS, Settings, SettingsStore

app = typer.Typer(
    name="issuetriage",
    help="Human-in-the-loop triage of a repository's open GitHub issues",
)
settings_app = typer.Typer(help="Show or change saved settings")
app.add_typer(settings_app, name="settings")

FINISH = "f"
QUIT = "q"
BODY_PREVIEW_CHARS = 500

RATING_PROMPTS = [
    ("ambiguity", "Ambiguity"),
    ("scale", "Scale"),
    ("novelty", "Novelty"),
]


class SessionAction(Exception):
    """Raised from a rating prompt when the operator picks finish or quit."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(action)


def _prompt_choice(label: str, choices: list[str]) -> str:
    value = typer.prompt(
        f"{label} ({'/'.join(choices)}, {FINISH}=finish, {QUIT}=quit)",
        type=click.Choice([*choices, FINISH, QUIT], case_sensitive=False),
        show_choices=False,
    ).lower()
    if value in (FINISH, QUIT):
        raise SessionAction(value)
    return value


def _body_preview(body: Optional[str]) -> str:
    if not body:
        return "No description."
    return body[:BODY_PREVIEW_CHARS] + ("..." if len(body) > BODY_PREVIEW_CHARS else "")


def _show_issue(state: SessionState) -> None:
    issue = state.current_issue
    typer.echo("\n" + "=" * 60)
    typer.echo(
        f"Issue {state.current_index + 1}/{len(state.issues)}  "
        f"Goal: {state.valid_count}/{state.target_count} "
        f"({state.progress:.0%})"
    )
    typer.echo("=" * 60)
    typer.echo(f"#{issue.number}: {issue.title}")
    typer.echo(f"Opened: {issue.created_at:%Y-%m-%d}  {issue.html_url}")
    typer.echo("\n--- Issue body ---")
    typer.echo(_body_preview(issue.body))
    typer.echo("\n--- Summary ---")
    if state.summary_error:
        typer.secho(state.summary_error, fg=typer.colors.YELLOW)
    else:
        typer.echo(state.current_summary or "")


def _collect_rating(session: TriageSession) -> None:
    """Prompt for all four rating fields, re-asking on invalid input."""
    for field, label in RATING_PROMPTS:
        session.rate(field, _prompt_choice(label, list(RATING_VALUES)))
    session.rate("type", _prompt_choice("Type", list(ISSUE_TYPES)))


def _resolve_settings(
    store: SettingsStore,
    repo_url: Optional[str],
    token: Optional[str],
    gemini_key: Optional[str],
) -> Settings:
    """Merge CLI values over saved settings and save any that changed."""
    saved = store.load()
    changes = {}
    if repo_url is not None and repo_url != saved.repo_url:
        changes["repo_url"] = repo_url
    if token is not None and token != saved.github_token:
        changes["github_token"] = token
    if gemini_key is not None and gemini_key != saved.gemini_key:
        changes["gemini_key"] = gemini_key
    if changes:
        return store.update(**changes)
    return saved


def _prompt_inputs(store: SettingsStore, settings: Settings) -> Settings:
    repo_url = typer.prompt("Repository URL", default=settings.repo_url or None)
    gemini_key = settings.gemini_key or typer.prompt(
        "Gemini API key", hide_input=True
    )
    return _resolve_settings(store, repo_url, None, gemini_key)


def _complete(session: TriageSession, output_dir: Path) -> None:
    state = session.state
    typer.echo("\n--- Session complete ---")
    typer.echo(f"Fully scored: {state.valid_count}/{state.target_count}")
    typer.echo(f"Rated: {len(state.scores)}  Skipped (open PR): {len(state.skipped)}")
    if state.scores:
        path = write_report(state.scores, output_dir)
        typer.echo(f"Report: {path}")
    else:
        typer.echo("No issues were rated, no report written.")


async def _run_session(
    session: TriageSession,
    store: SettingsStore,
    settings: Settings,
    output_dir: Path,
) -> None:
    prompt_first = not (settings.repo_url and settings.gemini_key)
    while True:
        state = session.state

        if state.phase == Phase.INPUT:
            if state.error:
                typer.secho(f"Error: {state.error}", fg=typer.colors.RED)
            if prompt_first or state.error:
                settings = _prompt_inputs(store, settings)
            prompt_first = True

            typer.echo(f"Fetching issues from {settings.repo_url}...")
            state = await session.fetch(
                settings.repo_url, settings.github_token, settings.gemini_key
            )
            if state.phase == Phase.TRIAGE:
                typer.echo(f"Fetched {len(state.issues)} issues.")
                await session.process_current_issue()
            elif not typer.confirm("Try again?", default=True):
                return

        elif state.phase == Phase.TRIAGE:
            _show_issue(state)
            try:
                _collect_rating(session)
            except SessionAction as action:
                if action.action == FINISH:
                    if typer.confirm(
                        "Finish now? The current issue will be skipped; "
                        "scored issues go into the report.",
                        default=True,
                    ):
                        session.finish_early()
                elif typer.confirm(
                    "Exit and discard all progress for this session?", default=False
                ):
                    session.exit()
                continue
            state = await session.advance()
            if state.error:
                typer.secho(state.error, fg=typer.colors.RED)

        else:
            _complete(session, output_dir)
            if not typer.confirm("Start a new session?", default=False):
                return
            session.new_session()


@app.command()
def run(
    repo_url: Optional[str] = typer.Argument(
        None, help="Repository URL, e.g. https://github.com/owner/repo"
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="GitHub token (raises the API rate limit)"
    ),
    gemini_key: Optional[str] = typer.Option(
        None, "--gemini-key", "-k", help="Gemini API key for summaries"
    ),
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", help="Where to write the CSV report"
    ),
    target: Optional[int] = typer.Option(
        None, "--target", help="Fully scored issues needed to finish"
    ),
) -> None:
    """Start an interactive triage session."""
    setup_langsmith()

    config = load_config()
    if target is not None:
        config.session.target_count = target

    store = SettingsStore()
    settings = _resolve_settings(
        store,
        repo_url,
        token or os.environ.get("GITHUB_TOKEN"),
        gemini_key or os.environ.get("GEMINI_API_KEY"),
    )

    session = TriageSession(config)
    try:
        asyncio.run(_run_session(session, store, settings, output_dir))
    except (KeyboardInterrupt, click.Abort):
        typer.echo("\nAborted. Nothing was saved.")
        raise typer.Exit(1)


@settings_app.command("show")
def settings_show() -> None:
    """Print saved settings with secrets masked."""
    store = SettingsStore()
    settings = store.load()
    typer.echo(f"File: {store.path}")
    typer.echo(f"repo_url: {settings.repo_url}")
    typer.echo(f"github_token: {_mask(settings.github_token)}")
    typer.echo(f"gemini_key: {_mask(settings.gemini_key)}")


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help=f"One of: {', '.join(SETTINGS_KEYS)}"),
    value: str = typer.Argument(..., help="New value (empty string clears it)"),
) -> None:
    """Change one saved setting."""
    if key not in SETTINGS_KEYS:
        typer.echo(f"Error: unknown setting {key!r}. Use one of: {', '.join(SETTINGS_KEYS)}")
        raise typer.Exit(1)
    SettingsStore().update(**{key: value})
    typer.echo(f"Saved {key}.")


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    return secret[:4] + "*" * max(len(secret) - 4, 4)


if __name__ == "__main__":
    app()
