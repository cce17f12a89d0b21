"""Data models for generation history."""

import random
import string
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class HistoryEntry:
    """One persisted record of a past generation.

    Attributes:
        id: Unique identifier, creation timestamp plus a random suffix
        created_at: When this entry was created
        text: Input text that was synthesized
        voice: Voice identifier, voice ID, or path to a reference file
        backend: Backend identifier (e.g., "openai", "chatterbox")
        model: Model identifier, None for backends without models
        audio_file: Path to the persisted audio, None if audio was not kept
        params: Non-default generation parameters, None if all were defaults
    """

    id: str
    created_at: datetime
    text: str
    voice: str
    backend: str
    model: str | None = None
    audio_file: Path | None = None
    params: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "text": self.text,
            "voice": self.voice,
            "backend": self.backend,
            "model": self.model,
            "audio_file": str(self.audio_file) if self.audio_file else None,
            "params": self.params,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        audio_file = data.get("audio_file")
        return cls(
            id=data["id"],
            created_at=datetime.fromisoformat(data["created_at"]),
            text=data["text"],
            voice=data["voice"],
            backend=data["backend"],
            model=data.get("model"),
            audio_file=Path(audio_file) if audio_file else None,
            params=data.get("params") or None,
        )


def generate_entry_id(timestamp: datetime) -> str:
    """Build an entry id like 20250114093012_k3x9qa."""
    suffix = "".join(random.choices(ID_ALPHABET, k=6))
    return f"{timestamp.strftime('%Y%m%d%H%M%S')}_{suffix}"


def create_history_entry(
    text: str,
    voice: str,
    backend: str,
    model: str | None = None,
    audio_file: Path | None = None,
    params: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Create a new history entry stamped with the current time."""
    timestamp = datetime.now()
    return HistoryEntry(
        id=generate_entry_id(timestamp),
        created_at=timestamp,
        text=text,
        voice=voice,
        backend=backend,
        model=model or None,
        audio_file=audio_file,
        params=dict(params) if params else None,
    )


def format_timestamp(timestamp: datetime) -> str:
    """Format timestamp for display, e.g. "Jan 14, 09:30"."""
    return timestamp.strftime("%b %d, %H:%M")


def truncate_text(text: str, max_length: int = 50) -> str:
    """Truncate text for preview, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
