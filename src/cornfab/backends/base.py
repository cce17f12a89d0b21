"""Abstract base class for text-to-speech backends.

This module defines the interface that all TTS backends must implement,
together with the static metadata the registry serves to the UI: models,
voices, credentials and the generation parameters each backend accepts.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from ..config import BackendConfig, load_config
from ..tts.errors import TTSAPIError
from ..tts.models import ParamSpec

SEED_PARAM = "seed"


class TTSBackend(ABC):
    """Abstract base class for text-to-speech backends.

    Subclasses describe themselves through class attributes and implement
    synthesize() and list_voices(). Backends that can clone a voice from a
    reference file or design one from a description override the matching
    methods and set supports_clone / supports_design.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "backend": str   # Name of the backend (e.g., "openai", "qwen3")
        }
    """

    name: ClassVar[str]
    label: ClassVar[str]

    # Local backends are always listed; reachability is checked on use
    local: ClassVar[bool] = False
    api_key_env: ClassVar[str | None] = None

    models: ClassVar[tuple[tuple[str, str], ...]] = ()
    default_model: ClassVar[str | None] = None

    voices: ClassVar[tuple[tuple[str, str], ...]] = ()
    default_voice: ClassVar[str | None] = None
    live_voices: ClassVar[bool] = False

    params: ClassVar[tuple[ParamSpec, ...]] = ()

    supports_clone: ClassVar[bool] = False
    supports_design: ClassVar[bool] = False

    def __init__(
        self, config: BackendConfig | None = None, timeout: float | None = None
    ) -> None:
        """Initialize backend connection settings.

        Args:
            config: Base URL / API key settings. Read from the cornfab
                    config (and environment) if not provided.
            timeout: Seconds to wait for the backend. Defaults to
                    general.timeout from the config.
        """
        if config is None or timeout is None:
            loaded = load_config()
            config = config or loaded.backend(self.name)
            timeout = timeout if timeout is not None else loaded.general.timeout
        self._config = config
        self._timeout = timeout

    @property
    def base_url(self) -> str | None:
        return self._config.base_url

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        voice: str,
        model: str | None = None,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID or name to use for synthesis
            model: Model ID, ignored by backends without models
            format: Requested audio format ("wav" or "mp3")
            params: Non-default generation parameters keyed by ParamSpec name

        Returns:
            Audio data as bytes

        Raises:
            TTSAPIError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this backend.

        Raises:
            TTSAPIError: If voice listing fails
        """
        pass

    async def synthesize_from_reference(
        self,
        text: str,
        reference: Path,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Clone the voice in a reference audio file and speak text with it."""
        raise TTSAPIError(f"{self.label} does not support voice cloning")

    async def synthesize_from_description(
        self,
        text: str,
        description: str,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Generate a voice from a natural-language description and speak text."""
        raise TTSAPIError(f"{self.label} does not support voice design")

    @classmethod
    def is_available(cls, config: BackendConfig) -> bool:
        """Whether the backend can be offered with the given settings."""
        if cls.local:
            return True
        return bool(config.api_key)

    @classmethod
    def wire_params(cls, params: dict[str, Any] | None) -> dict[str, Any]:
        """Rename parameters to the field names this backend's API expects.

        Unknown names are dropped; seed passes through unchanged.
        """
        if not params:
            return {}
        by_name = {spec.name: spec for spec in cls.params}
        wired: dict[str, Any] = {}
        for name, value in params.items():
            if name == SEED_PARAM:
                wired[SEED_PARAM] = value
            elif name in by_name:
                wired[by_name[name].request_field] = value
        return wired
