"""TTS data models with validation."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ParamSpec:
    """A generation parameter that applies to a backend.

    Args:
        name: Parameter name as exposed to users (e.g. "similarity")
        default: Value the backend uses when the parameter is omitted
        wire_name: Field name in the outbound request (defaults to name)
        minimum: Lowest accepted value for numeric parameters
        maximum: Highest accepted value for numeric parameters
        step: Slider step for numeric parameters
    """

    name: str
    default: Any
    wire_name: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    step: float | None = None

    def __post_init__(self) -> None:
        """Validate parameter definition."""
        if not self.name or not self.name.strip():
            raise ValueError("name cannot be empty")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ValueError("minimum must not exceed maximum")

    @property
    def request_field(self) -> str:
        """Request field name for this parameter."""
        return self.wire_name or self.name

    def is_set(self, value: Any) -> bool:
        """Return True if value was supplied and differs from the default."""
        if value is None:
            return False
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return False
        return value != self.default


@dataclass
class Choices:
    """Selectable options for a UI selector.

    Args:
        choices: Ordered (label, id) pairs
        default: Id selected by default, None when there are no choices
    """

    choices: list[tuple[str, str]] = field(default_factory=list)
    default: str | None = None

    def __post_init__(self) -> None:
        """Validate that the default is one of the choices."""
        if self.default is not None and self.default not in self.ids:
            raise ValueError(f"default '{self.default}' is not one of the choices")
        if self.default is None and self.choices:
            raise ValueError("default is required when choices are present")

    @property
    def ids(self) -> list[str]:
        return [choice_id for _, choice_id in self.choices]

    def __bool__(self) -> bool:
        return bool(self.choices)


@dataclass
class GenerationRequest:
    """Current selections to turn into one synthesis call.

    Args:
        text: Text to synthesize
        backend: Backend identifier
        voice: Voice identifier (built-in id or custom:<name>)
        model: Optional model identifier
        format: Output audio format ("wav" or "mp3")
        params: Raw parameter values keyed by ParamSpec name
        seed: Optional seed; attached whenever numeric
        voice_description: Natural-language voice description for voice design
        design_mode: Whether voice design is active
    """

    text: str
    backend: str
    voice: str = "default"
    model: str | None = None
    format: str = "wav"
    params: dict[str, Any] = field(default_factory=dict)
    seed: Any = None
    voice_description: str | None = None
    design_mode: bool = False


@dataclass(frozen=True)
class SynthesisCall:
    """One outbound synthesis call, fully resolved.

    kind is one of "standard", "clone" or "design".
    """

    kind: str
    text: str
    backend: str
    voice: str
    model: str | None
    format: str
    params: dict[str, Any]
    reference: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class GenerationMetadata:
    """What was generated and with which non-default parameters."""

    text: str
    voice: str
    backend: str
    model: str | None
    format: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationResult:
    """Audio bytes plus the metadata describing them."""

    audio: bytes
    metadata: GenerationMetadata
