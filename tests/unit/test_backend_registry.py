"""Unit tests for backend registry and option lookups."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from cornfab.backends import (
    PLACEHOLDER_VOICE,
    BackendRegistry,
    configure_backend,
    detect_available_backends,
    models_for,
    param_specs_for,
    voices_for,
)
from cornfab.backends.chatterbox import ChatterboxBackend
from cornfab.backends.openai import OpenAIBackend
import cornfab.config as config
from cornfab.config import load_config, reset_config
from cornfab.tts.errors import TTSAPIError


class TestBackendRegistry:
    """Test BackendRegistry functionality."""

    def test_builtin_backends_registered_in_order(self) -> None:
        """Test that all backends are registered in their display order."""
        assert BackendRegistry.names() == [
            "chatterbox",
            "qwen3",
            "openai",
            "elevenlabs",
            "fal",
        ]

    def test_get_unknown_backend_raises_key_error(self) -> None:
        """Test that unknown names raise KeyError listing what is available."""
        with pytest.raises(KeyError, match="Backend 'nope' not found"):
            BackendRegistry.get("nope")

    def test_get_with_empty_registry(self) -> None:
        """Test the error message when nothing is registered."""
        BackendRegistry._backends.clear()

        with pytest.raises(KeyError, match="Available backends: none"):
            BackendRegistry.get("openai")

    def test_get_instance_is_cached(self) -> None:
        """Test that get_instance returns the same instance until reset."""
        first = BackendRegistry.get_instance("chatterbox")

        assert isinstance(first, ChatterboxBackend)
        assert BackendRegistry.get_instance("chatterbox") is first

        configure_backend("chatterbox")
        assert BackendRegistry.get_instance("chatterbox") is not first

    def test_register_replaces_cached_instance(self) -> None:
        """Test that re-registering a name drops its cached instance."""
        first = BackendRegistry.get_instance("chatterbox")

        BackendRegistry.register("chatterbox", ChatterboxBackend)

        assert BackendRegistry.get_instance("chatterbox") is not first

    def test_configure_backend_picks_up_new_base_url(self, monkeypatch) -> None:
        """Test that switching to a backend re-reads its settings."""
        assert BackendRegistry.get_instance("chatterbox").base_url == (
            "http://localhost:4123"
        )

        monkeypatch.setenv("TTS_API_BASE", "http://gpu-box:4123")
        reset_config()
        configure_backend("chatterbox")

        assert BackendRegistry.get_instance("chatterbox").base_url == (
            "http://gpu-box:4123"
        )


class TestModelsFor:
    """Test model choices per backend."""

    def test_model_less_backend_has_empty_choices(self) -> None:
        """Test that Chatterbox offers no model selector."""
        choices = models_for("chatterbox")

        assert not choices
        assert choices.default is None

    def test_unknown_backend_has_empty_choices(self) -> None:
        """Test that unknown backends degrade to empty choices."""
        assert not models_for("nope")

    def test_openai_models(self) -> None:
        """Test the OpenAI model list and default."""
        choices = models_for("openai")

        assert choices.ids == ["tts-1", "tts-1-hd", "gpt-4o-mini-tts"]
        assert choices.default == "tts-1"

    def test_default_is_always_a_member(self) -> None:
        """Test every backend with models has its default among the choices."""
        for name in BackendRegistry.names():
            choices = models_for(name)
            if choices:
                assert choices.default in choices.ids


class TestVoicesFor:
    """Test voice choices per backend."""

    @pytest.mark.asyncio
    async def test_static_voices_with_default(self, voices_dir: Path) -> None:
        """Test that OpenAI lists its six voices with nova as default."""
        choices = await voices_for("openai", voices_dir)

        assert choices.ids == ["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
        assert choices.default == "nova"

    @pytest.mark.asyncio
    async def test_unknown_backend_gets_placeholder(self) -> None:
        """Test that unknown backends get the single placeholder voice."""
        choices = await voices_for("nope")

        assert choices.choices == [PLACEHOLDER_VOICE]
        assert choices.default == "default"

    @pytest.mark.asyncio
    async def test_live_catalog_used(self, voices_dir: Path) -> None:
        """Test that live backends list the voices their server reports."""
        voices = [
            {"id": "Emily.wav", "name": "Emily", "backend": "chatterbox"},
            {"id": "Ryan.wav", "name": "Ryan", "backend": "chatterbox"},
        ]
        with patch.object(
            ChatterboxBackend, "list_voices", AsyncMock(return_value=voices)
        ):
            choices = await voices_for("chatterbox", voices_dir)

        assert choices.choices == [("Emily", "Emily.wav"), ("Ryan", "Ryan.wav")]
        assert choices.default == "Emily.wav"

    @pytest.mark.asyncio
    async def test_live_catalog_failure_degrades_to_placeholder(
        self, voices_dir: Path
    ) -> None:
        """Test that an unreachable server yields the placeholder, not an error."""
        with patch.object(
            ChatterboxBackend,
            "list_voices",
            AsyncMock(side_effect=TTSAPIError("Could not reach Chatterbox")),
        ):
            choices = await voices_for("chatterbox", voices_dir)

        assert choices.choices == [PLACEHOLDER_VOICE]
        assert choices.default == "default"

    @pytest.mark.asyncio
    async def test_custom_voices_appended_for_clone_backends(
        self, voices_dir: Path
    ) -> None:
        """Test that custom voice files are listed after the built-in voices."""
        (voices_dir / "narrator.wav").write_bytes(b"RIFF")
        (voices_dir / "alice.mp3").write_bytes(b"ID3")

        with patch.object(ChatterboxBackend, "list_voices", AsyncMock(return_value=[])):
            choices = await voices_for("chatterbox", voices_dir)

        assert choices.choices == [
            PLACEHOLDER_VOICE,
            ("alice (custom)", "custom:alice"),
            ("narrator (custom)", "custom:narrator"),
        ]
        assert choices.default == "default"

    @pytest.mark.asyncio
    async def test_custom_voices_not_listed_without_clone_support(
        self, voices_dir: Path
    ) -> None:
        """Test that backends that can't clone don't list custom voices."""
        (voices_dir / "narrator.wav").write_bytes(b"RIFF")

        choices = await voices_for("openai", voices_dir)

        assert "custom:narrator" not in choices.ids

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "contents",
        ["[general\nthis is = = not toml", '[general]\nbackend = "openai"\n'],
    )
    async def test_unreadable_config_degrades_to_placeholder(
        self, contents: str
    ) -> None:
        """Test that a broken config file still yields the placeholder voice."""
        config.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        config.CONFIG_PATH.write_text(contents)

        choices = await voices_for("chatterbox")

        assert choices.choices == [PLACEHOLDER_VOICE]
        assert choices.default == "default"


class TestParamSpecsFor:
    """Test parameter schema lookups."""

    def test_chatterbox_params(self) -> None:
        """Test Chatterbox exposes speed, exaggeration and cfg_weight."""
        names = [spec.name for spec in param_specs_for("chatterbox")]

        assert names == ["speed", "exaggeration", "cfg_weight"]

    def test_fal_and_unknown_have_no_params(self) -> None:
        """Test that fal.ai and unknown backends have no parameters."""
        assert param_specs_for("fal") == ()
        assert param_specs_for("nope") == ()


class TestDetectAvailableBackends:
    """Test which backends are offered."""

    def test_only_local_backends_without_keys(self) -> None:
        """Test that without API keys only local backends are listed."""
        available = detect_available_backends()

        assert available == [
            ("Chatterbox (local)", "chatterbox"),
            ("Qwen3-TTS (local)", "qwen3"),
        ]

    def test_api_backends_listed_when_key_set(self, monkeypatch) -> None:
        """Test that setting an API key lists that backend."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("FAL_KEY", "fal-test")

        names = [name for _, name in detect_available_backends()]

        assert names == ["chatterbox", "qwen3", "openai", "fal"]

    def test_configured_backend_comes_first(self, monkeypatch) -> None:
        """Test that general.backend moves the preferred backend to the front."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("CORNFAB_BACKEND", "openai")

        available = detect_available_backends(load_config())

        assert available[0] == ("OpenAI TTS", "openai")
        assert len(available) == 3

    def test_unavailable_preferred_backend_ignored(self, monkeypatch) -> None:
        """Test that a preferred backend without a key isn't listed."""
        monkeypatch.setenv("CORNFAB_BACKEND", "elevenlabs")

        names = [name for _, name in detect_available_backends()]

        assert names == ["chatterbox", "qwen3"]

    @pytest.mark.parametrize(
        "contents",
        ["[general\nthis is = = not toml", '[general]\nbackend = "openai"\n'],
    )
    def test_unreadable_config_lists_local_backends(
        self, monkeypatch, contents: str
    ) -> None:
        """Test that a broken config file falls back to the local backends."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        config.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        config.CONFIG_PATH.write_text(contents)

        available = detect_available_backends()

        assert available == [
            ("Chatterbox (local)", "chatterbox"),
            ("Qwen3-TTS (local)", "qwen3"),
        ]

    def test_openai_instance_requires_key(self) -> None:
        """Test that OpenAI can't be instantiated without OPENAI_API_KEY."""
        from cornfab.tts.errors import TTSAuthError

        with pytest.raises(TTSAuthError, match="OpenAI API key not found"):
            OpenAIBackend()
