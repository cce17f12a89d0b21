"""Synthesis client routing calls to the registered TTS backends."""

import logging
from pathlib import Path
from typing import Any

from ..backends import BackendRegistry
from .errors import TTSAPIError

logger = logging.getLogger(__name__)


class SpeechClient:
    """Client for text-to-speech synthesis across backends.

    Provides one method per kind of synthesis call. Each call goes to the
    backend's cached instance and returns raw audio bytes.
    """

    async def synthesize(
        self,
        text: str,
        voice: str,
        backend: str,
        model: str | None = None,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Speak text with a built-in voice.

        Raises:
            TTSAPIError: If the backend call fails or returns no audio
            TTSAuthError: If the backend rejects the credentials
            KeyError: If backend not found
        """
        instance = BackendRegistry.get_instance(backend)
        logger.debug(f"Synthesizing with {backend} voice={voice} model={model}")
        audio = await instance.synthesize(
            text, voice, model=model, format=format, params=params
        )
        return _require_audio(audio)

    async def synthesize_from_description(
        self,
        text: str,
        description: str,
        backend: str,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Speak text with a voice generated from a description."""
        instance = BackendRegistry.get_instance(backend)
        logger.debug(f"Designing voice with {backend}: {description!r}")
        audio = await instance.synthesize_from_description(
            text, description, format=format, params=params
        )
        return _require_audio(audio)

    async def synthesize_from_reference(
        self,
        text: str,
        reference: Path,
        backend: str,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Speak text with a voice cloned from a reference audio file."""
        instance = BackendRegistry.get_instance(backend)
        logger.debug(f"Cloning voice with {backend} from {reference}")
        audio = await instance.synthesize_from_reference(
            text, reference, format=format, params=params
        )
        return _require_audio(audio)

    async def list_voices(self, backend: str) -> list[str]:
        """Voice ids offered by a backend.

        Raises:
            TTSAPIError: If the backend call fails
        """
        instance = BackendRegistry.get_instance(backend)
        voices = await instance.list_voices()
        return [voice["id"] for voice in voices]


def _require_audio(audio: bytes | None) -> bytes:
    if not audio:
        raise TTSAPIError("No audio data received from backend")
    return audio
