"""Configuration management for cornfab.

Loads configuration from ~/.config/cornfab/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import logging
import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "cornfab"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# cornfab configuration

[general]
# Backend selected at startup. Leave empty to use the first available one.
# One of: "chatterbox", "qwen3", "openai", "elevenlabs", "fal"
backend = ""

# Output audio format: "wav" or "mp3"
format = "wav"

# Record every successful generation in the history log
auto_save = true

# Seconds to wait for a backend before giving up
timeout = 60.0

# Where history, audio and voice files are kept
data_dir = "~/.cornfab"

[chatterbox]
base_url = "http://localhost:4123"

[qwen3]
base_url = "http://localhost:7811"

[openai]
base_url = "https://api.openai.com"

[fal]
base_url = "https://fal.run"

# API keys are read from environment variables, not this file:
#   OPENAI_API_KEY      - OpenAI TTS
#   ELEVENLABS_API_KEY  - ElevenLabs
#   FAL_KEY             - fal.ai
"""

# Backend -> (base URL env var, fallback base URL)
BASE_URL_ENV = {
    "chatterbox": ("TTS_API_BASE", "http://localhost:4123"),
    "qwen3": ("QWEN3_API_BASE", "http://localhost:7811"),
    "openai": ("OPENAI_API_BASE", "https://api.openai.com"),
    "fal": ("FAL_API_BASE", "https://fal.run"),
}

# Backend -> API key env var
API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "elevenlabs": "ELEVENLABS_API_KEY",
    "fal": "FAL_KEY",
}


@dataclass(frozen=True)
class GeneralConfig:
    """Application-wide settings."""

    backend: str
    format: str
    auto_save: bool
    timeout: float
    data_dir: Path


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings for one backend."""

    base_url: str | None = None
    api_key: str | None = None


@dataclass(frozen=True)
class CornfabConfig:
    """Top-level cornfab configuration."""

    general: GeneralConfig
    backends: dict[str, BackendConfig] = field(default_factory=dict)

    def backend(self, name: str) -> BackendConfig:
        """Connection settings for a backend (empty settings if unknown)."""
        return self.backends.get(name, BackendConfig())


_cached_config: CornfabConfig | None = None


def generate_config() -> Path:
    """Generate default config file at ~/.config/cornfab/config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(DEFAULT_CONFIG)
    return CONFIG_PATH


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def read_backend_configs(data: dict) -> dict[str, BackendConfig]:
    """Build per-backend settings from config file sections and environment.

    Base URLs come from the environment first, then the config file, then
    the built-in default. API keys only ever come from the environment.
    """
    backends: dict[str, BackendConfig] = {}
    for name in ("chatterbox", "qwen3", "openai", "elevenlabs", "fal"):
        section = data.get(name, {})
        base_url = None
        if name in BASE_URL_ENV:
            env_var, fallback = BASE_URL_ENV[name]
            base_url = os.getenv(env_var) or section.get("base_url") or fallback
            base_url = base_url.rstrip("/")
        api_key = os.getenv(API_KEY_ENV[name], "") if name in API_KEY_ENV else None
        backends[name] = BackendConfig(base_url=base_url, api_key=api_key or None)
    return backends


def load_config() -> CornfabConfig:
    """Load configuration from config file with env var overrides.

    On first run, writes the default config file and continues with it.

    Returns:
        Loaded and validated CornfabConfig.

    Raises:
        SystemExit: If the config file is invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if not CONFIG_PATH.exists():
        path = generate_config()
        logger.info(f"No config found. Generated {path}")

    with open(CONFIG_PATH, "rb") as f:
        data = tomllib.load(f)

    general = data.get("general", {})

    # Validate required fields
    missing = []
    if "format" not in general:
        missing.append("general.format")
    if "auto_save" not in general:
        missing.append("general.auto_save")

    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(f"Edit {CONFIG_PATH} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    # Env vars override config file values
    auto_save_env = os.getenv("CORNFAB_AUTO_SAVE")
    timeout_str = os.getenv("CORNFAB_TIMEOUT", str(general.get("timeout", 60.0)))
    data_dir = os.getenv("CORNFAB_HOME", general.get("data_dir", "~/.cornfab"))

    _cached_config = CornfabConfig(
        general=GeneralConfig(
            backend=os.getenv("CORNFAB_BACKEND", general.get("backend", "")),
            format=os.getenv("CORNFAB_FORMAT", general["format"]),
            auto_save=_parse_bool(auto_save_env)
            if auto_save_env is not None
            else bool(general["auto_save"]),
            timeout=float(timeout_str),
            data_dir=Path(data_dir).expanduser(),
        ),
        backends=read_backend_configs(data),
    )

    return _cached_config


def reset_config() -> None:
    """Forget the cached configuration so the next load re-reads everything."""
    global _cached_config
    _cached_config = None
