"""fal.ai text-to-speech backend."""

import logging
from typing import Any, ClassVar

import httpx

from ..config import BackendConfig
from ..tts.errors import TTSAPIError, TTSAuthError
from .base import TTSBackend

logger = logging.getLogger(__name__)


class FalBackend(TTSBackend):
    """Hosted models on fal.ai, called through its synchronous REST endpoint.

    The endpoint answers with JSON pointing at the generated audio, which is
    downloaded with a second request. Audio comes back in whatever format
    the model produces. Requires FAL_KEY.
    """

    name = "fal"
    label = "fal.ai"
    api_key_env = "FAL_KEY"

    models = (
        ("F5-TTS", "fal-ai/f5-tts"),
        ("Dia TTS", "fal-ai/dia-tts"),
        ("Orpheus TTS", "fal-ai/orpheus-tts"),
    )
    default_model = "fal-ai/f5-tts"

    voices = (("Default", "default"),)
    default_voice = "default"

    # Model -> request field carrying the text
    text_fields: ClassVar[dict[str, str]] = {"fal-ai/f5-tts": "gen_text"}

    def __init__(
        self,
        config: BackendConfig | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize fal.ai backend.

        Raises:
            TTSAuthError: If no API key is configured.
        """
        super().__init__(config, timeout)
        if not self._config.api_key:
            raise TTSAuthError("fal.ai API key not found. Set FAL_KEY environment variable.")
        self._transport = transport

    async def synthesize(
        self,
        text: str,
        voice: str,
        model: str | None = None,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        model = model or self.default_model
        payload: dict[str, Any] = {self.text_fields.get(model, "text"): text}
        if voice and voice != "default":
            payload["voice"] = voice
        payload.update(self.wire_params(params))

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/{model}",
                    json=payload,
                    headers={"Authorization": f"Key {self._config.api_key}"},
                )
                if response.status_code in (401, 403):
                    raise TTSAuthError(f"Authentication failed: {response.text[:200]}")
                if response.status_code >= 400:
                    raise TTSAPIError(
                        f"API call failed: {response.status_code} {response.text[:200]}",
                        response.status_code,
                    )

                audio_url = _audio_url(response.json())
                if not audio_url:
                    raise TTSAPIError("No audio URL in fal.ai response")

                logger.debug(f"Downloading fal.ai audio from {audio_url}")
                audio = await client.get(audio_url)
                audio.raise_for_status()
        except (httpx.HTTPError, ValueError) as e:
            raise TTSAPIError(f"fal.ai request failed: {e}", None, e) from e

        return audio.content

    async def list_voices(self) -> list[dict]:
        return [
            {"id": voice_id, "name": label, "backend": self.name}
            for label, voice_id in self.voices
        ]


def _audio_url(data: Any) -> str | None:
    """Pull the audio URL out of a fal.ai result."""
    if not isinstance(data, dict):
        return None
    for key in ("audio", "audio_url"):
        value = data.get(key)
        if isinstance(value, dict) and value.get("url"):
            return value["url"]
        if isinstance(value, str) and value:
            return value
    return None
