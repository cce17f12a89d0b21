"""High-level API for cornfab library usage."""

from pathlib import Path
from typing import Any

from .audio.player import AudioPlayer
from .backends import detect_available_backends
from .core import save_to_history
from .session import SessionState
from .tts.dispatcher import GenerationDispatcher, build_call, metadata_for
from .tts.errors import TTSError
from .tts.models import GenerationRequest, GenerationResult


async def generate(
    text: str,
    backend: str | None = None,
    voice: str = "default",
    model: str | None = None,
    format: str = "wav",
    output: str | Path | None = None,
    save: bool = False,
    seed: int | None = None,
    voice_description: str | None = None,
    **params: Any,
) -> bytes:
    """Synthesize speech from text.

    Unlike the interactive dispatcher, failures are raised to the caller.

    Args:
        text: Text to speak
        backend: Backend name (first available backend if None)
        voice: Voice id, or "custom:<name>" for a custom voice
        model: Model id (backend default if None)
        format: Audio format ("wav" or "mp3")
        output: File path to also write the audio to
        save: Record the generation in history
        seed: Optional seed
        voice_description: Design a voice from this description instead
        **params: Backend parameters (speed, stability, language, ...)

    Returns:
        Audio bytes

    Raises:
        ValueError: If text is empty
        TTSError: If no backend is available or synthesis fails
        OSError: If writing the output file or history fails
    """
    if not text or not text.strip():
        raise ValueError("Text cannot be empty")

    if backend is None:
        available = detect_available_backends()
        if not available:
            raise TTSError("No TTS backend available")
        backend = available[0][1]

    request = GenerationRequest(
        text=text,
        backend=backend,
        voice=voice,
        model=model,
        format=format,
        params=params,
        seed=seed,
        voice_description=voice_description,
        design_mode=voice_description is not None,
    )
    call = build_call(request)
    audio = await GenerationDispatcher().send(call)

    if output:
        AudioPlayer.save_to_file(audio, output)

    if save:
        session = SessionState()
        session.complete(GenerationResult(audio=audio, metadata=metadata_for(call)))
        save_to_history(session)

    return audio
