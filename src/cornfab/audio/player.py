"""pygame-backed playback plus helpers for writing generated audio to disk."""

# ruff: noqa: E402
import os

# Must be set before pygame is imported
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import warnings

warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import io
from datetime import datetime
from pathlib import Path

import pygame

MIME_TYPES = {"mp3": "audio/mpeg", "wav": "audio/wav"}


def audio_mime_type(format: str) -> str:
    """MIME type for an audio format (WAV unless it's mp3)."""
    return MIME_TYPES.get(format, MIME_TYPES["wav"])


def download_filename(format: str, timestamp: datetime | None = None) -> str:
    """Default file name for exported audio, e.g. cornfab_20250114_093012.wav."""
    timestamp = timestamp or datetime.now()
    return f"cornfab_{timestamp.strftime('%Y%m%d_%H%M%S')}.{format}"


class AudioPlayer:
    """Plays generated clips through the pygame mixer.

    Construction opens the mixer, so only create a player when something is
    about to be played; save_to_file works without one.
    """

    def __init__(self) -> None:
        """Open the audio device.

        Raises:
            RuntimeError: If the mixer can't be opened (no audio device, etc.)
        """
        try:
            pygame.mixer.init()
        except pygame.error as e:
            raise RuntimeError(f"Failed to initialize pygame audio mixer: {e}") from e

    def play_bytes(self, audio_data: bytes, format: str = "wav") -> None:
        """Play a clip and block until it finishes.

        Args:
            audio_data: Encoded clip as returned by a backend or read from history
            format: Container of the clip, passed to pygame as a decoder hint

        Raises:
            ValueError: If audio_data is empty
            RuntimeError: If pygame can't decode or play the clip
        """
        if not audio_data:
            raise ValueError("No audio data provided")

        try:
            pygame.mixer.music.load(io.BytesIO(audio_data), f"clip.{format}")
            pygame.mixer.music.play()
            clock = pygame.time.Clock()
            while pygame.mixer.music.get_busy():
                clock.tick(10)
        except pygame.error as e:
            raise RuntimeError(f"Failed to play audio: {e}") from e

    @staticmethod
    def save_to_file(audio_data: bytes, filepath: str | Path) -> Path:
        """Write a clip to disk, creating missing parent directories.

        Returns:
            The path written to

        Raises:
            ValueError: If audio_data is empty
            OSError: If the file can't be written
        """
        if not audio_data:
            raise ValueError("No audio data provided")

        filepath = Path(filepath)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(audio_data)
        except OSError as e:
            raise OSError(f"Failed to save audio to {filepath}: {e}") from e
        return filepath
