"""ElevenLabs text-to-speech backend implementation."""

import asyncio
import io
import wave
from typing import Any

from elevenlabs.client import ElevenLabs

from ..config import BackendConfig
from ..tts.errors import TTSAPIError, TTSAuthError
from ..tts.models import ParamSpec
from .base import TTSBackend

PCM_SAMPLE_RATE = 24000

# cornfab format -> ElevenLabs output_format
OUTPUT_FORMATS = {
    "mp3": "mp3_44100_128",
    "wav": f"pcm_{PCM_SAMPLE_RATE}",
}


def pcm_to_wav(pcm: bytes, sample_rate: int = PCM_SAMPLE_RATE) -> bytes:
    """Wrap 16-bit mono PCM samples in a WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buf.getvalue()


class ElevenLabsBackend(TTSBackend):
    """ElevenLabs TTS backend implementation.

    Synthesizes speech through the ElevenLabs API using the premade voice
    catalog. Requires ELEVENLABS_API_KEY.
    """

    name = "elevenlabs"
    label = "ElevenLabs"
    api_key_env = "ELEVENLABS_API_KEY"

    models = (
        ("Multilingual v2", "eleven_multilingual_v2"),
        ("Turbo v2.5", "eleven_turbo_v2_5"),
        ("English v1", "eleven_monolingual_v1"),
    )
    default_model = "eleven_multilingual_v2"

    voices = (
        ("Rachel", "21m00Tcm4TlvDq8ikWAM"),
        ("Domi", "AZnzlk1XvdvUeBnXmlld"),
        ("Bella", "EXAVITQu4vr4xnSDxMaL"),
        ("Antoni", "ErXwobaYiN019PkySvjV"),
        ("Elli", "MF3mGyEYCl7XYWbV9V6O"),
        ("Josh", "TxGEqnHWrfWFTfGW9XjX"),
        ("Arnold", "VR6AewLTigWG4xSOukaG"),
        ("Adam", "pNInz6obpgDQGcFmaJgB"),
        ("Sam", "yoZ06aMxZJJ28mfd3POQ"),
    )
    default_voice = "21m00Tcm4TlvDq8ikWAM"

    params = (
        ParamSpec("speed", 1.0, minimum=0.7, maximum=1.2, step=0.05),
        ParamSpec("stability", 0.5, minimum=0.0, maximum=1.0, step=0.05),
        ParamSpec(
            "similarity",
            0.75,
            wire_name="similarity_boost",
            minimum=0.0,
            maximum=1.0,
            step=0.05,
        ),
    )

    def __init__(self, config: BackendConfig | None = None, *args, **kwargs) -> None:
        """Initialize ElevenLabs backend.

        Raises:
            TTSAuthError: If API key is not configured or the client fails.
        """
        super().__init__(config, *args, **kwargs)
        if not self._config.api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable."
            )

        try:
            self._client = ElevenLabs(api_key=self._config.api_key, timeout=self._timeout)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

    async def synthesize(
        self,
        text: str,
        voice: str,
        model: str | None = None,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """Convert text to speech audio bytes.

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        wired = self.wire_params(params)
        seed = wired.pop("seed", None)

        request: dict[str, Any] = {
            "text": text.strip(),
            "voice_id": voice or self.default_voice,
            "model_id": model or self.default_model,
            "output_format": OUTPUT_FORMATS.get(format, OUTPUT_FORMATS["mp3"]),
        }
        if wired:
            request["voice_settings"] = wired
        if seed is not None:
            request["seed"] = seed

        # Run synchronous ElevenLabs client in thread to avoid blocking event loop
        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(**request)
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            if "unauthorized" in str(e).lower() or "401" in str(e):
                raise TTSAuthError(f"Authentication failed: {e}") from e
            elif "429" in str(e):
                raise TTSAPIError(f"Rate limit exceeded: {e}", 429) from e
            else:
                raise TTSAPIError(f"API call failed: {e}") from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        if format == "wav":
            return pcm_to_wav(audio_bytes)
        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Return the premade voice catalog."""
        return [
            {"id": voice_id, "name": label, "backend": self.name}
            for label, voice_id in self.voices
        ]
