"""Configuration and LangSmith setup."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


# Default values
DEFAULT_SUMMARIZE_MODEL = "gemini-2.0-flash"
DEFAULT_TARGET_COUNT = 15  # Fully scored issues needed to finish a session
DEFAULT_BATCH_SIZE = 100  # Search API page size, never paginated further
DEFAULT_RETRY_DELAYS = (1.0, 2.0, 4.0)

# Config file path
CONFIG_PATH = ".issuetriage/config.yml"


@dataclass
class ModelsConfig:
    """Model configuration."""

    summarize: str = DEFAULT_SUMMARIZE_MODEL


@dataclass
class SessionConfig:
    """Triage session limits."""

    target_count: int = DEFAULT_TARGET_COUNT
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass
class RetryConfig:
    """Summarizer retry schedule, in seconds."""

    delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS


@dataclass
class TriageConfig:
    """Main configuration class."""

    version: str = "1.0"
    models: ModelsConfig = field(default_factory=ModelsConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)


def load_config(repo_path: Optional[Path] = None) -> TriageConfig:
    """Load issuetriage configuration.

    Priority (highest to lowest):
    1. Environment variables (ISSUETRIAGE_MODEL_SUMMARIZE, etc.)
    2. Config file (.issuetriage/config.yml)
    3. Package defaults

    Args:
        repo_path: Directory holding the config file. Defaults to current directory.

    Returns:
        TriageConfig instance
    """
    config = TriageConfig()

    if repo_path is None:
        repo_path = Path.cwd()

    config_file = repo_path / CONFIG_PATH
    if config_file.exists():
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}

        config.version = str(data.get("version", config.version))

        if "models" in data:
            config.models.summarize = data["models"].get(
                "summarize", DEFAULT_SUMMARIZE_MODEL
            )

        if "session" in data:
            session = data["session"]
            config.session.target_count = session.get(
                "target_count", DEFAULT_TARGET_COUNT
            )
            config.session.batch_size = min(
                session.get("batch_size", DEFAULT_BATCH_SIZE), DEFAULT_BATCH_SIZE
            )

        if "retry" in data and data["retry"].get("delays") is not None:
            config.retry.delays = tuple(float(d) for d in data["retry"]["delays"])

    # Override with environment variables
    if env_model := os.environ.get("ISSUETRIAGE_MODEL_SUMMARIZE"):
        config.models.summarize = env_model
    if env_target := os.environ.get("ISSUETRIAGE_TARGET_COUNT"):
        config.session.target_count = int(env_target)

    return config


def setup_langsmith() -> bool:
    """Configure LangSmith tracing if API key is available.

    Returns:
        True if LangSmith is enabled, False otherwise.
    """
    if not os.environ.get("LANGCHAIN_API_KEY"):
        # Disable tracing if no API key
        os.environ["LANGCHAIN_TRACING_V2"] = "false"
        return False

    os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
    os.environ.setdefault("LANGCHAIN_PROJECT", "issuetriage")
    return True
