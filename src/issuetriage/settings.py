"""Persisted operator settings (repository URL, GitHub token, Gemini key).

Stored as a flat YAML mapping under fixed key names. Loaded at startup and
written back on every change.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

REPO_URL_KEY = "triage_repo_url"
GITHUB_TOKEN_KEY = "triage_gh_token"
GEMINI_KEY_KEY = "triage_gemini_key"

SETTINGS_KEYS = {
    "repo_url": REPO_URL_KEY,
    "github_token": GITHUB_TOKEN_KEY,
    "gemini_key": GEMINI_KEY_KEY,
}

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "issuetriage" / "settings.yml"


def get_settings_path() -> Path:
    """Return the settings file path, honoring ISSUETRIAGE_SETTINGS_PATH."""
    if env_path := os.environ.get("ISSUETRIAGE_SETTINGS_PATH"):
        return Path(env_path)
    return DEFAULT_SETTINGS_PATH


@dataclass
class Settings:
    repo_url: str = ""
    github_token: str = ""
    gemini_key: str = ""


class SettingsStore:
    """Key-value store backed by a YAML file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_settings_path()

    def load(self) -> Settings:
        if not self.path.exists():
            return Settings()
        with open(self.path) as f:
            data = yaml.safe_load(f) or {}
        return Settings(
            repo_url=data.get(REPO_URL_KEY, "") or "",
            github_token=data.get(GITHUB_TOKEN_KEY, "") or "",
            gemini_key=data.get(GEMINI_KEY_KEY, "") or "",
        )

    def save(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            REPO_URL_KEY: settings.repo_url,
            GITHUB_TOKEN_KEY: settings.github_token,
            GEMINI_KEY_KEY: settings.gemini_key,
        }
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)

    def update(self, **changes: str) -> Settings:
        """Apply changes and write them back immediately.

        Raises:
            KeyError: If a field name is not a known setting.
        """
        settings = self.load()
        for name, value in changes.items():
            if name not in SETTINGS_KEYS:
                raise KeyError(name)
            setattr(settings, name, value)
        self.save(settings)
        return settings
