"""Unit tests for CLI logic functions and commands."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import typer
from typer.testing import CliRunner

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from cornfab.cli import app, read_text_input, resolve_backend
from cornfab.history import HistoryStore
from cornfab.tts.client import SpeechClient
from cornfab.tts.dispatcher import EMPTY_TEXT_MESSAGE

runner = CliRunner()


@pytest.fixture
def synthesize():
    """Replace backend synthesis with a canned clip."""
    mock = AsyncMock(return_value=b"RIFFaudio")
    with patch.object(SpeechClient, "synthesize", mock):
        yield mock


def test_read_text_input_prefers_argument(tmp_path: Path) -> None:
    """Test that the text argument wins over a file."""
    path = tmp_path / "input.txt"
    path.write_text("from file")

    assert read_text_input("Hello world", path) == "Hello world"


def test_read_text_input_from_file(tmp_path: Path) -> None:
    """Test that text is read from a file when no argument is given."""
    path = tmp_path / "input.txt"
    path.write_text("Line 1\nLine 2")

    assert read_text_input(None, path) == "Line 1\nLine 2"


def test_read_text_input_missing_file_exits(tmp_path: Path) -> None:
    """Test that a missing file exits with status 1."""
    with pytest.raises(typer.Exit):
        read_text_input(None, tmp_path / "missing.txt")


def test_resolve_backend_uses_first_available() -> None:
    """Test that the first available backend is used when none is given."""
    assert resolve_backend(None) == "chatterbox"
    assert resolve_backend("qwen3") == "qwen3"


class TestGenerateCommand:
    """Test the generate command end to end with synthesis mocked."""

    def test_generate_prints_status(self, synthesize: AsyncMock) -> None:
        """Test a generation without playback or history."""
        result = runner.invoke(
            app,
            ["generate", "Hello world", "-b", "openai", "--no-play", "--no-save"],
        )

        assert result.exit_code == 0, result.output
        assert "Done. Generated 9 bytes of audio." in result.output
        synthesize.assert_awaited_once_with(
            "Hello world", "nova", "openai", model="tts-1", format="wav", params={}
        )

    def test_generate_passes_changed_params(self, synthesize: AsyncMock) -> None:
        """Test that flags become backend params and a seed."""
        result = runner.invoke(
            app,
            [
                "generate",
                "Hello",
                "-b",
                "openai",
                "-v",
                "onyx",
                "--speed",
                "1.3",
                "--seed",
                "42",
                "--no-play",
                "--no-save",
            ],
        )

        assert result.exit_code == 0, result.output
        args = synthesize.await_args
        assert args.args[1] == "onyx"
        assert args.kwargs["params"] == {"speed": 1.3, "seed": 42}

    def test_generate_empty_text_fails(self, synthesize: AsyncMock) -> None:
        """Test that empty text exits 1 without a backend call."""
        result = runner.invoke(app, ["generate", "  ", "-b", "openai", "--no-play"])

        assert result.exit_code == 1
        assert EMPTY_TEXT_MESSAGE in result.output
        synthesize.assert_not_awaited()

    def test_generate_empty_text_skips_voice_lookup(
        self, synthesize: AsyncMock
    ) -> None:
        """Test that empty text never asks a local server for its voices."""
        with patch("cornfab.cli.voices_for", new_callable=AsyncMock) as lookup:
            result = runner.invoke(
                app, ["generate", "  ", "-b", "chatterbox", "--no-play"]
            )

        assert result.exit_code == 1
        assert EMPTY_TEXT_MESSAGE in result.output
        lookup.assert_not_awaited()
        synthesize.assert_not_awaited()

    def test_generate_save_records_history(
        self, synthesize: AsyncMock, isolated_config: Path
    ) -> None:
        """Test that --save adds a history entry."""
        result = runner.invoke(
            app, ["generate", "Hello", "-b", "openai", "--no-play", "--save"]
        )

        assert result.exit_code == 0, result.output
        assert "Saved to history as" in result.output
        assert len(HistoryStore(isolated_config).load()) == 1

    def test_generate_writes_output_file(
        self, synthesize: AsyncMock, tmp_path: Path
    ) -> None:
        """Test that -o writes the audio to a file."""
        output = tmp_path / "out" / "hello.wav"

        result = runner.invoke(
            app,
            ["generate", "Hello", "-b", "openai", "-o", str(output), "--no-play", "--no-save"],
        )

        assert result.exit_code == 0, result.output
        assert output.read_bytes() == b"RIFFaudio"

    def test_generate_backend_error_fails(self, synthesize: AsyncMock) -> None:
        """Test that a backend failure exits 1 with the error status."""
        from cornfab.tts.errors import TTSAPIError

        synthesize.side_effect = TTSAPIError("Server error: 503 overloaded", 503)

        result = runner.invoke(
            app, ["generate", "Hello", "-b", "openai", "--no-play", "--no-save"]
        )

        assert result.exit_code == 1
        assert "Error: Server error: 503 overloaded" in result.output


class TestListingCommands:
    """Test backends, models, voices and params commands."""

    def test_backends(self, monkeypatch) -> None:
        """Test that available backends are listed with the default marked."""
        monkeypatch.setenv("ELEVENLABS_API_KEY", "el-test")

        result = runner.invoke(app, ["backends"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Chatterbox (local): chatterbox (default)"
        assert "ElevenLabs: elevenlabs" in lines
        assert "OpenAI TTS: openai (unavailable, set OPENAI_API_KEY)" in lines

    def test_models_without_selection(self) -> None:
        """Test a backend without models."""
        result = runner.invoke(app, ["models", "chatterbox"])

        assert "chatterbox has no model selection" in result.output

    def test_models(self) -> None:
        """Test model listing with default marker."""
        result = runner.invoke(app, ["models", "openai"])

        assert "tts-1: tts-1 (default)" in result.output

    def test_voices(self) -> None:
        """Test voice listing."""
        result = runner.invoke(app, ["voices", "openai"])

        assert "Nova: nova (default)" in result.output

    def test_params(self) -> None:
        """Test parameter listing with ranges."""
        result = runner.invoke(app, ["params", "chatterbox"])

        assert "exaggeration: default 0.5, range 0.0-1.0" in result.output
        no_params = runner.invoke(app, ["params", "fal"])
        assert "fal has no adjustable parameters" in no_params.output


class TestHistoryCommands:
    """Test history subcommands."""

    def test_empty_history(self) -> None:
        """Test listing with no history."""
        result = runner.invoke(app, ["history", "list"])

        assert "No history yet." in result.output

    def test_list_export_delete(
        self, synthesize: AsyncMock, isolated_config: Path, tmp_path: Path
    ) -> None:
        """Test the full history flow from the command line."""
        runner.invoke(app, ["generate", "Hello world", "-b", "openai", "--no-play", "--save"])
        entry_id = HistoryStore(isolated_config).load()[0].id

        listing = runner.invoke(app, ["history", "list"])
        assert entry_id in listing.output
        assert "openai/nova" in listing.output

        target = tmp_path / "export.wav"
        exported = runner.invoke(app, ["history", "export", entry_id, "-o", str(target)])
        assert exported.exit_code == 0, exported.output
        assert target.read_bytes() == b"RIFFaudio"

        deleted = runner.invoke(app, ["history", "delete", entry_id])
        assert f"Deleted {entry_id}" in deleted.output
        again = runner.invoke(app, ["history", "delete", entry_id])
        assert f"History entry not found: {entry_id}" in again.output

    def test_clear_requires_confirmation(self, synthesize: AsyncMock, isolated_config: Path) -> None:
        """Test that clear asks first unless --yes is given."""
        runner.invoke(app, ["generate", "Hello", "-b", "openai", "--no-play", "--save"])

        declined = runner.invoke(app, ["history", "clear"], input="n\n")
        assert len(HistoryStore(isolated_config).load()) == 1
        assert declined.exit_code == 0

        cleared = runner.invoke(app, ["history", "clear", "--yes"])
        assert "History cleared" in cleared.output
        assert HistoryStore(isolated_config).load() == []

    def test_play_unknown_entry(self) -> None:
        """Test that playing an unknown entry exits 1."""
        result = runner.invoke(app, ["history", "play", "missing"])

        assert result.exit_code == 1
        assert "History entry not found: missing" in result.output


class TestVoiceCommands:
    """Test custom voice subcommands."""

    def test_add_list_remove(self, tmp_path: Path) -> None:
        """Test adding, listing and removing a custom voice."""
        source = tmp_path / "clip.wav"
        source.write_bytes(b"RIFF")

        added = runner.invoke(app, ["voice", "add", str(source), "--name", "narrator"])
        assert "Added custom:narrator" in added.output

        listed = runner.invoke(app, ["voice", "list"])
        assert "narrator (custom): custom:narrator" in listed.output

        removed = runner.invoke(app, ["voice", "remove", "narrator"])
        assert "Removed narrator" in removed.output

        missing = runner.invoke(app, ["voice", "remove", "narrator"])
        assert missing.exit_code == 1

    def test_add_unsupported_file(self, tmp_path: Path) -> None:
        """Test that a non-audio file is rejected."""
        source = tmp_path / "notes.txt"
        source.write_text("hi")

        result = runner.invoke(app, ["voice", "add", str(source)])

        assert result.exit_code == 1
        assert "Unsupported audio file type" in result.output

    def test_save_from_history(self, synthesize: AsyncMock, isolated_config: Path) -> None:
        """Test saving a history entry's audio as a custom voice."""
        runner.invoke(app, ["generate", "Hello", "-b", "openai", "--no-play", "--save"])
        entry_id = HistoryStore(isolated_config).load()[0].id

        result = runner.invoke(app, ["voice", "save", entry_id, "my narrator"])

        assert "Added custom:my_narrator" in result.output
        assert (isolated_config / "voices" / "my_narrator.wav").read_bytes() == b"RIFFaudio"
