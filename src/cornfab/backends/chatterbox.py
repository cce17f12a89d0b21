"""Chatterbox text-to-speech backend (local container)."""

from ..tts.models import ParamSpec
from .openai_compatible import OpenAICompatibleBackend


class ChatterboxBackend(OpenAICompatibleBackend):
    """Chatterbox TTS API server running on the local network.

    Has no model selection. Voices come from the server's catalog, and any
    reference file in the voices directory can be cloned through the
    upload endpoint. Reachability is only checked when generating.
    """

    name = "chatterbox"
    label = "Chatterbox (local)"
    local = True
    live_voices = True
    supports_clone = True

    voices_path = "/voices"
    clone_path = "/v1/audio/speech/upload"

    params = (
        ParamSpec("speed", 1.0, minimum=0.5, maximum=2.0, step=0.1),
        ParamSpec("exaggeration", 0.5, minimum=0.0, maximum=1.0, step=0.05),
        ParamSpec("cfg_weight", 0.5, minimum=0.0, maximum=1.0, step=0.05),
    )
