"""Qwen3-TTS backend (local GPU container)."""

from ..tts.models import ParamSpec
from .openai_compatible import OpenAICompatibleBackend


class Qwen3Backend(OpenAICompatibleBackend):
    """qwen3-tts-api server running on the local network.

    Serves three model variants: CustomVoice (built-in speakers), Base
    (voice cloning from a reference file) and VoiceDesign (voices generated
    from a natural-language description).
    """

    name = "qwen3"
    label = "Qwen3-TTS (local)"
    local = True
    live_voices = True
    supports_clone = True
    supports_design = True

    models = (
        ("CustomVoice 1.7B", "Qwen3-TTS-12Hz-1.7B-CustomVoice"),
        ("Base 1.7B (cloning)", "Qwen3-TTS-12Hz-1.7B-Base"),
        ("VoiceDesign 1.7B", "Qwen3-TTS-12Hz-1.7B-VoiceDesign"),
    )
    default_model = "Qwen3-TTS-12Hz-1.7B-CustomVoice"

    voices_path = "/v1/voices"
    clone_path = "/v1/audio/speech/clone"
    design_path = "/v1/audio/speech/design"
    reference_field = "reference_audio"
    description_field = "voice_description"

    params = (
        ParamSpec("language", "Auto"),
        ParamSpec("instructions", "", wire_name="instruct"),
    )
