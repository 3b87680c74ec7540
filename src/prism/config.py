"""Configuration settings for Prism.

Settings can be overridden from a YAML file. Lookup order:
- explicit path passed to Settings.load()
- PRISM_CONFIG environment variable
- ~/.prism/config.yaml

Only known keys are accepted; anything else is a configuration error.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

DEFAULT_DATA_DIR = Path.home() / ".prism"
DEMO_DOCUMENT = Path(__file__).parent / "data" / "jingyesi.json"

_INTEGER_KEYS = ("total_readers", "score_precision", "api_port", "max_sessions")


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        full_message = f"[{key}] {message}" if key else message
        super().__init__(full_message)


@dataclass
class Settings:
    """Application settings."""

    # Storage
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    db_path: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "prism.db")
    storage_key_prefix: str = "prism"

    # Document source (path or http(s) URL)
    document: str = field(default_factory=lambda: str(DEMO_DOCUMENT))
    fetch_timeout: float = 10.0

    # Sharing
    share_param: str = "v"

    # Popularity denominator for reader preference ratios
    total_readers: int = 1000

    # Decimal places for scores in ranked output
    score_precision: int = 3

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    max_sessions: int = 256

    def storage_key(self, doc_id: str) -> str:
        """Key under which a document's picks are persisted."""
        return f"{self.storage_key_prefix}:{doc_id}:picks"

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Settings":
        """Load settings, applying overrides from a YAML file if present."""
        if path is None:
            env_path = os.environ.get("PRISM_CONFIG")
            path = Path(env_path) if env_path else DEFAULT_DATA_DIR / "config.yaml"
            if not path.exists():
                return cls()
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Expected a mapping at top level of {path}")

        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build settings from a mapping of overrides."""
        known = {f.name: f for f in fields(cls)}
        kwargs: dict = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigError("Unknown configuration key", key=key)
            if key in ("data_dir", "db_path"):
                value = Path(value).expanduser()
            elif key in _INTEGER_KEYS:
                if not isinstance(value, int) or isinstance(value, bool):
                    raise ConfigError("Expected an integer", key=key)
            elif key == "fetch_timeout":
                value = float(value)
            kwargs[key] = value

        # db_path follows data_dir unless set explicitly
        if "data_dir" in kwargs and "db_path" not in kwargs:
            kwargs["db_path"] = kwargs["data_dir"] / "prism.db"

        settings = cls(**kwargs)
        for key in ("total_readers", "max_sessions"):
            if getattr(settings, key) <= 0:
                raise ConfigError("Must be positive", key=key)
        if settings.score_precision < 0:
            raise ConfigError("Must not be negative", key="score_precision")
        return settings
