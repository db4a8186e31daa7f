"""Tests for the persisted settings store."""

import pytest
import yaml

from issuetriage.settings import (
    GEMINI_KEY_KEY,
    GITHUB_TOKEN_KEY,
    REPO_URL_KEY,
    Settings,
    SettingsStore,
    get_settings_path,
)


class TestSettingsStore:
    def test_missing_file_gives_empty_settings(self, tmp_path):
        assert SettingsStore(tmp_path / "none.yml").load() == Settings()

    def test_saved_under_fixed_keys(self, tmp_path):
        path = tmp_path / "nested" / "settings.yml"
        store = SettingsStore(path)

        store.save(Settings(repo_url="https://github.com/a/b", github_token="t", gemini_key="g"))

        data = yaml.safe_load(path.read_text())
        assert data == {
            REPO_URL_KEY: "https://github.com/a/b",
            GITHUB_TOKEN_KEY: "t",
            GEMINI_KEY_KEY: "g",
        }
        assert data[REPO_URL_KEY] == store.load().repo_url

    def test_update_writes_immediately(self, tmp_path):
        path = tmp_path / "settings.yml"
        SettingsStore(path).update(gemini_key="abc")
        SettingsStore(path).update(repo_url="acme/widget")

        settings = SettingsStore(path).load()
        assert settings.gemini_key == "abc"
        assert settings.repo_url == "acme/widget"

    def test_update_rejects_unknown_key(self, tmp_path):
        with pytest.raises(KeyError):
            SettingsStore(tmp_path / "s.yml").update(password="x")

    def test_env_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ISSUETRIAGE_SETTINGS_PATH", str(tmp_path / "s.yml"))
        assert get_settings_path() == tmp_path / "s.yml"
        assert SettingsStore().path == tmp_path / "s.yml"
