"""Per-session state shared by the dispatcher and the front-end."""

from dataclasses import dataclass

from .tts.models import GenerationMetadata, GenerationResult

READY_STATUS = "Ready. Enter text and click Generate."
GENERATING_STATUS = "Generating speech..."


@dataclass
class SessionState:
    """What one user session currently holds.

    Attributes:
        audio: Audio bytes of the last generation or loaded history entry
        audio_format: Format of audio ("wav" or "mp3")
        metadata: Metadata of the last successful generation
        selected_entry: Id of the history entry currently loaded, if any
        status: Transient status message for the user
        generating: True while a synthesis call is outstanding
    """

    audio: bytes | None = None
    audio_format: str = "wav"
    metadata: GenerationMetadata | None = None
    selected_entry: str | None = None
    status: str = READY_STATUS
    generating: bool = False

    def begin_generation(self, format: str) -> None:
        """Clear the previous result and mark a generation as in flight."""
        self.audio = None
        self.metadata = None
        self.selected_entry = None
        self.audio_format = format
        self.generating = True
        self.status = GENERATING_STATUS

    def complete(self, result: GenerationResult) -> None:
        self.audio = result.audio
        self.metadata = result.metadata
        self.audio_format = result.metadata.format
        self.generating = False
        self.status = f"Done. Generated {len(result.audio)} bytes of audio."

    def fail(self, message: str) -> None:
        self.generating = False
        self.status = message
