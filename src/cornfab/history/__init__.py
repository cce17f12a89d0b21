"""Generation history for cornfab."""

from pathlib import Path

from .models import HistoryEntry, create_history_entry, format_timestamp, truncate_text
from .storage import HistoryStore

__all__ = [
    "HistoryEntry",
    "HistoryStore",
    "create_history_entry",
    "format_timestamp",
    "get_data_dir",
    "truncate_text",
]


def get_data_dir() -> Path:
    """Get or create the cornfab data directory.

    Uses general.data_dir from the config (~/.cornfab by default) and
    creates its audio/ and voices/ subdirectories if they don't exist.

    Returns:
        Path to the data directory
    """
    from ..config import load_config

    data_dir = load_config().general.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    (data_dir / "audio").mkdir(exist_ok=True)
    (data_dir / "voices").mkdir(exist_ok=True)

    return data_dir
