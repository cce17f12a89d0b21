"""Custom voice reference files used for voice cloning.

Custom voices live in <data_dir>/voices/ as <name>.<ext> and are addressed
as "custom:<name>" so they can't be confused with built-in voice ids.
"""

import logging
import re
import shutil
from pathlib import Path

from .tts.errors import VoiceNotFoundError

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom:"
AUDIO_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}


def get_voices_dir() -> Path:
    """Get or create the custom voices directory."""
    from .history import get_data_dir

    return get_data_dir() / "voices"


def is_custom_voice(voice_id: str | None) -> bool:
    """Return True if voice_id refers to a custom voice file."""
    return bool(voice_id) and voice_id.startswith(CUSTOM_PREFIX)


def custom_voice_id(name: str) -> str:
    return f"{CUSTOM_PREFIX}{name}"


def sanitize_voice_name(name: str) -> str:
    """Reduce a user-chosen name to characters safe for a file name.

    Raises:
        ValueError: If nothing usable is left
    """
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip()).strip("_")
    if not cleaned:
        raise ValueError(f"Invalid voice name: {name!r}")
    return cleaned


def list_custom_voices(voices_dir: Path | None = None) -> list[tuple[str, str]]:
    """List custom voices as (label, id) pairs sorted by name.

    Returns an empty list if the directory does not exist.
    """
    voices_dir = voices_dir or get_voices_dir()
    if not voices_dir.is_dir():
        return []

    names = sorted(
        {
            path.stem
            for path in voices_dir.iterdir()
            if path.is_file() and path.suffix.lower() in AUDIO_EXTENSIONS
        }
    )
    return [(f"{name} (custom)", custom_voice_id(name)) for name in names]


def _voice_files(voices_dir: Path, name: str) -> list[Path]:
    """Audio files named <name>.<ext>, sorted by path."""
    if not name or not voices_dir.is_dir():
        return []
    return sorted(
        path
        for path in voices_dir.iterdir()
        if path.is_file()
        and path.stem == name
        and path.suffix.lower() in AUDIO_EXTENSIONS
    )


def resolve_custom_voice(voice_id: str, voices_dir: Path | None = None) -> Path:
    """Find the reference file for a custom voice.

    Matches audio files named <name>.<ext> in the voices directory, the
    same files list_custom_voices offers.

    Args:
        voice_id: Custom voice id ("custom:<name>")
        voices_dir: Directory to search (defaults to <data_dir>/voices)

    Returns:
        Path to the reference audio file

    Raises:
        VoiceNotFoundError: If no file matches
    """
    voices_dir = voices_dir or get_voices_dir()
    name = voice_id[len(CUSTOM_PREFIX) :] if is_custom_voice(voice_id) else voice_id

    if not name:
        raise VoiceNotFoundError(f"Voice file not found: {voice_id!r} has no name")

    matches = _voice_files(voices_dir, name)
    if not matches:
        raise VoiceNotFoundError(f"Voice file not found: {name}")
    return matches[0]


def add_voice(
    source: str | Path, name: str | None = None, voices_dir: Path | None = None
) -> Path:
    """Copy a reference audio file into the voices directory.

    Args:
        source: Audio file to copy
        name: Voice name; derived from the file name if omitted
        voices_dir: Target directory (defaults to <data_dir>/voices)

    Returns:
        Path to the stored voice file

    Raises:
        FileNotFoundError: If source does not exist
        ValueError: If the name is unusable or the file type is unsupported
    """
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"Voice file not found: {source}")

    extension = source.suffix.lower()
    if extension not in AUDIO_EXTENSIONS:
        raise ValueError(f"Unsupported audio file type: {source.suffix or source.name}")

    voices_dir = voices_dir or get_voices_dir()
    voices_dir.mkdir(parents=True, exist_ok=True)

    voice_name = sanitize_voice_name(name or source.stem)
    target = voices_dir / f"{voice_name}{extension}"
    shutil.copyfile(source, target)
    logger.info(f"Added custom voice '{voice_name}' at {target}")
    return target


def save_voice_audio(
    audio_data: bytes,
    name: str,
    format: str = "wav",
    voices_dir: Path | None = None,
) -> Path:
    """Store generated audio as a custom voice reference.

    Raises:
        ValueError: If there is no audio or the name is unusable
    """
    if not audio_data:
        raise ValueError("No audio data provided")

    voices_dir = voices_dir or get_voices_dir()
    voices_dir.mkdir(parents=True, exist_ok=True)

    target = voices_dir / f"{sanitize_voice_name(name)}.{format}"
    target.write_bytes(audio_data)
    logger.info(f"Saved custom voice at {target}")
    return target


def remove_voice(name: str, voices_dir: Path | None = None) -> bool:
    """Delete every audio file belonging to a custom voice.

    Returns:
        True if at least one file was removed
    """
    voices_dir = voices_dir or get_voices_dir()
    if is_custom_voice(name):
        name = name[len(CUSTOM_PREFIX) :]

    removed = False
    for path in _voice_files(voices_dir, name):
        path.unlink()
        removed = True
    return removed
