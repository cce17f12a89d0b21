"""JSON history storage implementation."""

import json
import logging
import os
from pathlib import Path

from .models import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryStore:
    """File-based storage for generation history.

    Stores the list of history entries in a single JSON file while audio
    files are stored separately in the audio/ subdirectory. Persistence is
    whole-state: callers load, modify the returned list, and save it back.
    """

    def __init__(self, data_dir: Path):
        """Initialize history storage in given directory.

        Args:
            data_dir: Directory containing history.json and audio/
        """
        self.data_dir = data_dir

        # Create data and audio directories if they don't exist
        data_dir.mkdir(parents=True, exist_ok=True)
        self.audio_dir = data_dir / "audio"
        self.audio_dir.mkdir(exist_ok=True)

        self.history_path = data_dir / "history.json"

    def load(self) -> list[HistoryEntry]:
        """Load history from disk, newest first.

        Returns:
            List of history entries; empty if nothing was saved yet or the
            history file cannot be read
        """
        if not self.history_path.exists():
            return []

        try:
            data = json.loads(self.history_path.read_text(encoding="utf-8"))
            return [HistoryEntry.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable history at {self.history_path}: {e}")
            return []

    def save(self, entries: list[HistoryEntry]) -> None:
        """Replace the persisted history with the given entries.

        Args:
            entries: Complete history list, newest first

        Raises:
            OSError: If the history file cannot be written
        """
        payload = json.dumps([entry.to_dict() for entry in entries], indent=2)
        tmp_path = self.history_path.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.history_path)
        logger.debug(f"Saved {len(entries)} history entries to {self.history_path}")

    def append(
        self, entries: list[HistoryEntry], entry: HistoryEntry
    ) -> list[HistoryEntry]:
        """Return a new history list with entry at the front."""
        return [entry, *entries]

    def get(self, entries: list[HistoryEntry], entry_id: str) -> HistoryEntry | None:
        """Find an entry by id."""
        for entry in entries:
            if entry.id == entry_id:
                return entry
        return None

    def delete(
        self, entries: list[HistoryEntry], entry_id: str
    ) -> list[HistoryEntry]:
        """Remove an entry and its audio file.

        Args:
            entries: Current history list
            entry_id: Id of the entry to delete

        Returns:
            History list without the entry; unchanged if id is not found
        """
        entry = self.get(entries, entry_id)
        if entry is None:
            return list(entries)

        self._delete_audio(entry)
        return [e for e in entries if e.id != entry_id]

    def clear(self, entries: list[HistoryEntry]) -> list[HistoryEntry]:
        """Remove every entry and its audio file."""
        for entry in entries:
            self._delete_audio(entry)
        return []

    def save_audio(self, audio_data: bytes, entry_id: str, format: str = "wav") -> Path:
        """Write audio bytes for a history entry.

        Args:
            audio_data: Raw audio bytes
            entry_id: History entry id, used as the file name
            format: Audio format, used as the file extension

        Returns:
            Path to the written audio file
        """
        path = self.audio_dir / f"{entry_id}.{format}"
        path.write_bytes(audio_data)
        return path

    def _delete_audio(self, entry: HistoryEntry) -> None:
        if entry.audio_file is None:
            return
        if entry.audio_file.exists():
            entry.audio_file.unlink()
            logger.debug(f"Deleted audio file {entry.audio_file}")
