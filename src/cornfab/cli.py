"""Typer CLI definition for cornfab."""

import asyncio
import logging
import sys
from pathlib import Path

import typer

from .audio.player import AudioPlayer, download_filename
from .backends import (
    BackendRegistry,
    configure_backend,
    detect_available_backends,
    models_for,
    param_specs_for,
    voices_for,
)
from .config import load_config
from .core import (
    clear_history,
    delete_history_entry,
    generate_speech,
    get_history_store,
    list_available_voices,
    load_history_entry,
)
from .history import format_timestamp, truncate_text
from .session import SessionState
from .tts.models import GenerationRequest
from .voices import add_voice, list_custom_voices, remove_voice, save_voice_audio

app = typer.Typer(help="Generate speech from text with local and hosted TTS backends")
history_app = typer.Typer(help="Browse, replay and delete past generations")
voice_app = typer.Typer(help="Manage custom voices used for cloning")
app.add_typer(history_app, name="history")
app.add_typer(voice_app, name="voice")


def configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def fail(message: str, error: Exception | None = None, debug: bool = False) -> None:
    """Print an error and exit with status 1."""
    if debug and error is not None:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def read_text_input(text: str | None, file: Path | None, debug: bool = False) -> str:
    """Get text from argument, file, or stdin (in priority order).

    Returns an empty string when nothing was given; the dispatcher reports it.
    """
    if text is not None:
        return text
    if file:
        try:
            return file.read_text()
        except FileNotFoundError as e:
            fail(f"File not found: {file}", e, debug)
        except PermissionError as e:
            fail(f"Permission denied reading file: {file}", e, debug)
        except UnicodeDecodeError as e:
            fail(f"Unable to decode file as text: {file}", e, debug)
    if not sys.stdin.isatty():
        return sys.stdin.read().strip()
    return ""


def resolve_backend(backend: str | None) -> str:
    """Backend from the flag, else the first available one."""
    if backend:
        return backend
    available = detect_available_backends()
    if not available:
        fail("No TTS backend available")
    return available[0][1]


def play_audio(audio: bytes, format: str, debug: bool = False) -> None:
    try:
        AudioPlayer().play_bytes(audio, format)
    except RuntimeError as e:
        fail(f"Failed to play audio: {e}", e, debug)


@app.command()
def generate(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    backend: str | None = typer.Option(
        None, "-b", "--backend", help="TTS backend (first available if omitted)"
    ),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice ID, or custom:<name> for a custom voice"
    ),
    model: str | None = typer.Option(
        None, "-m", "--model", help="Model ID (backend default if omitted)"
    ),
    format: str | None = typer.Option(
        None, "--format", help="Output format: wav or mp3 (from config if omitted)"
    ),
    speed: float | None = typer.Option(None, "--speed", help="Speaking speed"),
    exaggeration: float | None = typer.Option(
        None, "--exaggeration", help="Emotion exaggeration (Chatterbox)"
    ),
    cfg_weight: float | None = typer.Option(
        None, "--cfg-weight", help="CFG weight (Chatterbox)"
    ),
    stability: float | None = typer.Option(
        None, "--stability", help="Voice stability (ElevenLabs)"
    ),
    similarity: float | None = typer.Option(
        None, "--similarity", help="Similarity boost (ElevenLabs)"
    ),
    language: str | None = typer.Option(None, "--language", help="Language (Qwen3)"),
    instructions: str | None = typer.Option(
        None, "--instructions", help="Speaking style instructions (Qwen3)"
    ),
    design: str | None = typer.Option(
        None, "--design", help="Describe a voice to generate instead of picking one"
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for reproducible output"),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Also save the audio to this file"
    ),
    play: bool = typer.Option(True, "--play/--no-play", help="Play the audio"),
    save: bool = typer.Option(False, "--save", help="Record in history"),
    no_save: bool = typer.Option(
        False, "--no-save", help="Don't record in history (overrides config)"
    ),
    keep_audio: bool = typer.Option(
        True, "--keep-audio/--no-keep-audio", help="Keep audio with the history entry"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Convert text to speech."""
    configure_logging(debug)

    input_text = read_text_input(text, file, debug)
    config = load_config()
    backend_name = resolve_backend(backend)
    configure_backend(backend_name)

    if voice is None and input_text.strip():
        voice = asyncio.run(voices_for(backend_name)).default or "default"
    voice = voice or "default"

    request = GenerationRequest(
        text=input_text,
        backend=backend_name,
        voice=voice,
        model=model,
        format=format or config.general.format,
        params={
            "speed": speed,
            "exaggeration": exaggeration,
            "cfg_weight": cfg_weight,
            "stability": stability,
            "similarity": similarity,
            "language": language,
            "instructions": instructions,
        },
        seed=seed,
        voice_description=design,
        design_mode=design is not None,
    )

    # Neither flag: fall back to general.auto_save
    auto_save = True if save else (False if no_save else None)

    session = SessionState()
    try:
        result = asyncio.run(
            generate_speech(
                session, request, auto_save=auto_save, keep_audio=keep_audio
            )
        )
    except OSError as e:
        fail(f"Failed to save history: {e}", e, debug)

    if result is None:
        typer.echo(session.status, err=True)
        raise typer.Exit(1)
    typer.echo(session.status)

    if session.selected_entry:
        typer.echo(f"Saved to history as {session.selected_entry}")

    if output:
        try:
            AudioPlayer.save_to_file(result.audio, output)
        except OSError as e:
            fail(f"Failed to save audio file: {e}", e, debug)
        typer.echo(f"Audio saved to {output}")

    if play:
        play_audio(result.audio, result.metadata.format, debug)


@app.command()
def backends() -> None:
    """List backends usable with the current configuration."""
    available = detect_available_backends()
    for index, (label, name) in enumerate(available):
        marker = " (default)" if index == 0 else ""
        typer.echo(f"{label}: {name}{marker}")

    listed = {name for _, name in available}
    for name in BackendRegistry.names():
        backend_class = BackendRegistry.get(name)
        if name not in listed and backend_class.api_key_env:
            hint = f"unavailable, set {backend_class.api_key_env}"
            typer.echo(f"{backend_class.label}: {name} ({hint})")


@app.command()
def models(backend: str = typer.Argument(..., help="Backend name")) -> None:
    """List the models a backend offers."""
    choices = models_for(backend)
    if not choices:
        typer.echo(f"{backend} has no model selection")
        return
    for label, model_id in choices.choices:
        marker = " (default)" if model_id == choices.default else ""
        typer.echo(f"{label}: {model_id}{marker}")


@app.command()
def voices(backend: str = typer.Argument(..., help="Backend name")) -> None:
    """List the voices a backend offers, including custom voices."""
    asyncio.run(list_available_voices(backend))


@app.command()
def params(backend: str = typer.Argument(..., help="Backend name")) -> None:
    """List the generation parameters a backend accepts."""
    specs = param_specs_for(backend)
    if not specs:
        typer.echo(f"{backend} has no adjustable parameters")
        return
    for spec in specs:
        line = f"{spec.name}: default {spec.default!r}"
        if spec.minimum is not None and spec.maximum is not None:
            line += f", range {spec.minimum}-{spec.maximum}"
        if spec.step is not None:
            line += f", step {spec.step}"
        typer.echo(line)


@history_app.command("list")
def history_list(
    limit: int = typer.Option(20, "-n", "--limit", help="Entries to show"),
) -> None:
    """Show recent generations, newest first."""
    entries = get_history_store().load()
    if not entries:
        typer.echo("No history yet.")
        return
    for entry in entries[:limit]:
        audio = "" if entry.audio_file else " [no audio]"
        typer.echo(
            f"{entry.id}  {format_timestamp(entry.created_at)}  "
            f"{entry.backend}/{entry.voice}  {truncate_text(entry.text)}{audio}"
        )
    if len(entries) > limit:
        typer.echo(f"... and {len(entries) - limit} more")


@history_app.command("play")
def history_play(
    entry_id: str = typer.Argument(..., help="History entry id"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Replay the audio of a past generation."""
    session = SessionState()
    entry = load_history_entry(session, entry_id)
    if entry is None or not session.audio:
        typer.echo(session.status, err=True)
        raise typer.Exit(1)
    typer.echo(session.status)
    play_audio(session.audio, session.audio_format, debug)


@history_app.command("export")
def history_export(
    entry_id: str = typer.Argument(..., help="History entry id"),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Destination (cornfab_<timestamp>.<format> if omitted)"
    ),
) -> None:
    """Save the audio of a past generation to a file."""
    session = SessionState()
    entry = load_history_entry(session, entry_id)
    if entry is None or not session.audio:
        typer.echo(session.status, err=True)
        raise typer.Exit(1)
    target = output or Path(download_filename(session.audio_format))
    AudioPlayer.save_to_file(session.audio, target)
    typer.echo(f"Audio saved to {target}")


@history_app.command("delete")
def history_delete(entry_id: str = typer.Argument(..., help="History entry id")) -> None:
    """Delete a history entry and its audio."""
    before = len(get_history_store().load())
    remaining = delete_history_entry(entry_id)
    if len(remaining) == before:
        typer.echo(f"History entry not found: {entry_id}")
    else:
        typer.echo(f"Deleted {entry_id}")


@history_app.command("clear")
def history_clear(
    yes: bool = typer.Option(False, "-y", "--yes", help="Don't ask for confirmation"),
) -> None:
    """Delete all history entries and their audio."""
    if not yes and not typer.confirm("Delete all history entries and audio?"):
        raise typer.Exit(0)
    clear_history()
    typer.echo("History cleared")


@voice_app.command("list")
def voice_list() -> None:
    """List custom voices."""
    custom = list_custom_voices()
    if not custom:
        typer.echo("No custom voices.")
        return
    for label, voice_id in custom:
        typer.echo(f"{label}: {voice_id}")


@voice_app.command("add")
def voice_add(
    file: Path = typer.Argument(..., help="Reference audio file"),
    name: str | None = typer.Option(
        None, "-n", "--name", help="Voice name (from file name if omitted)"
    ),
) -> None:
    """Add a reference audio file as a custom voice."""
    try:
        path = add_voice(file, name)
    except (FileNotFoundError, ValueError) as e:
        fail(str(e))
    typer.echo(f"Added custom:{path.stem}")


@voice_app.command("save")
def voice_save(
    entry_id: str = typer.Argument(..., help="History entry whose audio to keep"),
    name: str = typer.Argument(..., help="Voice name"),
) -> None:
    """Save the audio of a past generation as a custom voice."""
    session = SessionState()
    entry = load_history_entry(session, entry_id)
    if entry is None or not session.audio:
        fail(session.status)
    try:
        path = save_voice_audio(session.audio, name, session.audio_format)
    except ValueError as e:
        fail(str(e))
    typer.echo(f"Added custom:{path.stem}")


@voice_app.command("remove")
def voice_remove(name: str = typer.Argument(..., help="Voice name")) -> None:
    """Delete a custom voice."""
    if remove_voice(name):
        typer.echo(f"Removed {name}")
    else:
        fail(f"Voice file not found: {name}")
