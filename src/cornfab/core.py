"""Core functionality for cornfab - orchestrates generation and history."""

import dataclasses
import logging

from .backends import voices_for
from .config import load_config
from .history import HistoryEntry, HistoryStore, create_history_entry, get_data_dir
from .session import SessionState
from .tts.dispatcher import GenerationDispatcher
from .tts.models import GenerationMetadata, GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)


def get_history_store() -> HistoryStore:
    """History store in the configured data directory."""
    return HistoryStore(get_data_dir())


async def list_available_voices(backend: str) -> None:
    """List all selectable voices for a backend.

    Prints voices in "Name: voice_id" format to stdout, marking the default.
    """
    voices = await voices_for(backend)
    for label, voice_id in voices.choices:
        marker = " (default)" if voice_id == voices.default else ""
        print(f"{label}: {voice_id}{marker}")


async def generate_speech(
    session: SessionState,
    request: GenerationRequest,
    store: HistoryStore | None = None,
    auto_save: bool | None = None,
    keep_audio: bool = True,
    dispatcher: GenerationDispatcher | None = None,
) -> GenerationResult | None:
    """Generate speech and record it in history when auto-save is on.

    Args:
        session: Session receiving the audio and status
        request: Current selections
        store: History store (the configured one if omitted)
        auto_save: Record the generation in history; general.auto_save if None
        keep_audio: Persist the audio alongside the history entry
        dispatcher: Dispatcher to use (a default one if omitted)

    Returns:
        The generation result, None if it was rejected or failed

    Raises:
        OSError: If the history cannot be written
    """
    dispatcher = dispatcher or GenerationDispatcher()
    result = await dispatcher.dispatch(session, request)
    if result is None:
        return None

    if auto_save is None:
        auto_save = load_config().general.auto_save
    if auto_save:
        save_to_history(session, store, keep_audio=keep_audio)

    return result


def save_to_history(
    session: SessionState,
    store: HistoryStore | None = None,
    keep_audio: bool = True,
) -> HistoryEntry:
    """Record the session's last generation as a new history entry.

    Args:
        session: Session holding the last generation
        store: History store (the configured one if omitted)
        keep_audio: Persist the audio bytes alongside the entry

    Returns:
        The new entry

    Raises:
        ValueError: If nothing has been generated in this session
        OSError: If the history or audio cannot be written
    """
    if session.metadata is None or not session.audio:
        raise ValueError("Nothing to save. Generate speech first.")

    store = store or get_history_store()
    metadata = session.metadata

    entry = create_history_entry(
        text=metadata.text,
        voice=metadata.voice,
        backend=metadata.backend,
        model=metadata.model,
        params=metadata.params or None,
    )
    if keep_audio:
        audio_file = store.save_audio(session.audio, entry.id, metadata.format)
        entry = dataclasses.replace(entry, audio_file=audio_file)

    entries = store.append(store.load(), entry)
    store.save(entries)

    session.selected_entry = entry.id
    logger.debug(f"Saved history entry {entry.id}")
    return entry


def load_history_entry(
    session: SessionState, entry_id: str, store: HistoryStore | None = None
) -> HistoryEntry | None:
    """Select a history entry and load its audio into the session for replay.

    Returns:
        The entry, or None if no entry has that id
    """
    store = store or get_history_store()
    entry = store.get(store.load(), entry_id)
    if entry is None:
        session.status = f"History entry not found: {entry_id}"
        return None

    session.selected_entry = entry.id
    session.audio = None
    format = "wav"
    if entry.audio_file is not None and entry.audio_file.exists():
        session.audio = entry.audio_file.read_bytes()
        format = entry.audio_file.suffix.lstrip(".") or format
        session.status = f"Loaded {len(session.audio)} bytes of audio from history."
    else:
        session.status = "No audio saved for this entry."

    session.audio_format = format
    session.metadata = GenerationMetadata(
        text=entry.text,
        voice=entry.voice,
        backend=entry.backend,
        model=entry.model,
        format=format,
        params=dict(entry.params or {}),
    )
    return entry


def delete_history_entry(
    entry_id: str, store: HistoryStore | None = None
) -> list[HistoryEntry]:
    """Delete one entry (and its audio) from the persisted history."""
    store = store or get_history_store()
    entries = store.delete(store.load(), entry_id)
    store.save(entries)
    return entries


def clear_history(store: HistoryStore | None = None) -> None:
    """Delete every history entry and its audio."""
    store = store or get_history_store()
    store.save(store.clear(store.load()))
