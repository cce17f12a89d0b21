"""OpenAI text-to-speech backend."""

from ..config import BackendConfig
from ..tts.errors import TTSAuthError
from ..tts.models import ParamSpec
from .openai_compatible import OpenAICompatibleBackend


class OpenAIBackend(OpenAICompatibleBackend):
    """OpenAI hosted speech API. Requires OPENAI_API_KEY."""

    name = "openai"
    label = "OpenAI TTS"
    api_key_env = "OPENAI_API_KEY"

    models = (
        ("tts-1", "tts-1"),
        ("tts-1-hd", "tts-1-hd"),
        ("gpt-4o-mini-tts", "gpt-4o-mini-tts"),
    )
    default_model = "tts-1"

    voices = (
        ("Alloy", "alloy"),
        ("Echo", "echo"),
        ("Fable", "fable"),
        ("Onyx", "onyx"),
        ("Nova", "nova"),
        ("Shimmer", "shimmer"),
    )
    default_voice = "nova"

    params = (ParamSpec("speed", 1.0, minimum=0.25, maximum=4.0, step=0.1),)

    def __init__(self, config: BackendConfig | None = None, *args, **kwargs) -> None:
        """Initialize OpenAI backend.

        Raises:
            TTSAuthError: If no API key is configured.
        """
        super().__init__(config, *args, **kwargs)
        if not self._config.api_key:
            raise TTSAuthError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment variable."
            )
