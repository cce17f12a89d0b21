"""Audio playback and file output for cornfab."""

from .player import AudioPlayer, audio_mime_type, download_filename

__all__ = ["AudioPlayer", "audio_mime_type", "download_filename"]
