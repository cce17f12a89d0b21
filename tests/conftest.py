"""Pytest configuration and fixtures for cornfab tests."""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

ISOLATED_ENV_VARS = (
    "OPENAI_API_KEY",
    "ELEVENLABS_API_KEY",
    "FAL_KEY",
    "TTS_API_BASE",
    "QWEN3_API_BASE",
    "OPENAI_API_BASE",
    "FAL_API_BASE",
    "CORNFAB_BACKEND",
    "CORNFAB_FORMAT",
    "CORNFAB_AUTO_SAVE",
    "CORNFAB_TIMEOUT",
    "CORNFAB_HOME",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch) -> Generator[Path]:
    """Point config and data directories at a per-test temp dir.

    Yields the data directory used as CORNFAB_HOME.
    """
    import cornfab.config as config
    from cornfab.backends import BackendRegistry

    config_dir = tmp_path / "config"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_dir / "config.toml")

    for name in ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    data_dir = tmp_path / "data"
    monkeypatch.setenv("CORNFAB_HOME", str(data_dir))

    config.reset_config()
    backends = dict(BackendRegistry._backends)
    BackendRegistry.reset()

    yield data_dir

    BackendRegistry._backends.clear()
    BackendRegistry._backends.update(backends)
    BackendRegistry.reset()
    config.reset_config()


@pytest.fixture
def voices_dir(isolated_config: Path) -> Path:
    """Empty custom voices directory."""
    path = isolated_config / "voices"
    path.mkdir(parents=True, exist_ok=True)
    return path
