"""Generation dispatcher for cornfab.

Turns the current selections into exactly one synthesis call, sends it
through the SpeechClient and hands the normalized result to the session
for playback and history.
"""

import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..backends import BackendRegistry
from ..voices import is_custom_voice, resolve_custom_voice
from .client import SpeechClient
from .errors import TTSError
from .models import (
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    ParamSpec,
    SynthesisCall,
)

if TYPE_CHECKING:
    from ..session import SessionState

logger = logging.getLogger(__name__)

EMPTY_TEXT_MESSAGE = "Please enter some text to convert to speech."
BUSY_MESSAGE = "A generation is already in progress."
DESIGN_VOICE = "design"


def coerce_seed(value: Any) -> int | None:
    """Return value as an int seed, or None if it isn't numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def collect_params(
    specs: tuple[ParamSpec, ...], values: dict[str, Any], seed: Any = None
) -> dict[str, Any]:
    """Keep only the parameters a backend accepts that differ from its defaults.

    Args:
        specs: The backend's parameter schema
        values: Raw values from the UI keyed by parameter name
        seed: Optional seed, kept whenever it is numeric

    Returns:
        Parameter values keyed by name; inapplicable names are dropped
    """
    params: dict[str, Any] = {}
    for spec in specs:
        value = values.get(spec.name)
        if spec.is_set(value):
            params[spec.name] = value.strip() if isinstance(value, str) else value

    seed_value = coerce_seed(seed)
    if seed_value is not None:
        params["seed"] = seed_value
    return params


def build_call(
    request: GenerationRequest, voices_dir: Path | None = None
) -> SynthesisCall:
    """Resolve a request into the one synthesis call to make.

    Precedence: voice design (when active with a description), then a
    custom voice cloned from its reference file, then a standard call with
    the voice id passed through.

    Raises:
        TTSError: If the backend is unknown
        VoiceNotFoundError: If a custom voice has no reference file
    """
    try:
        backend_class = BackendRegistry.get(request.backend)
    except KeyError as e:
        raise TTSError(e.args[0]) from e

    params = collect_params(backend_class.params, request.params, request.seed)

    description = (request.voice_description or "").strip()
    if request.design_mode and backend_class.supports_design and description:
        return SynthesisCall(
            kind="design",
            text=request.text,
            backend=request.backend,
            voice=DESIGN_VOICE,
            model=None,
            format=request.format,
            params=params,
            description=description,
        )

    if is_custom_voice(request.voice) and backend_class.supports_clone:
        reference = resolve_custom_voice(request.voice, voices_dir)
        return SynthesisCall(
            kind="clone",
            text=request.text,
            backend=request.backend,
            voice=str(reference),
            model=None,
            format=request.format,
            params=params,
            reference=str(reference),
        )

    # Clone and design endpoints pick their own model
    model = None
    if backend_class.models:
        model = request.model or backend_class.default_model

    return SynthesisCall(
        kind="standard",
        text=request.text,
        backend=request.backend,
        voice=request.voice,
        model=model,
        format=request.format,
        params=params,
    )


def metadata_for(call: SynthesisCall) -> GenerationMetadata:
    params = dict(call.params)
    if call.description:
        params["voice_description"] = call.description
    return GenerationMetadata(
        text=call.text,
        voice=call.voice,
        backend=call.backend,
        model=call.model,
        format=call.format,
        params=params,
    )


class GenerationDispatcher:
    """Sends one synthesis call per generate action.

    Any failure while building or sending the call ends the attempt and is
    reported through the session status; nothing is retried.

    Example:
        dispatcher = GenerationDispatcher()
        session = SessionState()

        result = await dispatcher.dispatch(
            session,
            GenerationRequest(text="Hello world", backend="openai", voice="nova"),
        )
        # session.status == "Done. Generated 48000 bytes of audio."
    """

    def __init__(
        self, client: SpeechClient | None = None, voices_dir: Path | None = None
    ) -> None:
        """Initialize dispatcher.

        Args:
            client: Synthesis client (a default SpeechClient if omitted)
            voices_dir: Where custom voice files live (<data_dir>/voices if omitted)
        """
        self.client = client or SpeechClient()
        self.voices_dir = voices_dir

    async def dispatch(
        self, session: "SessionState", request: GenerationRequest
    ) -> GenerationResult | None:
        """Generate speech for the request.

        Args:
            session: Session receiving the audio, metadata and status
            request: Current selections

        Returns:
            The result, or None if the request was rejected or failed
        """
        if session.generating:
            session.status = BUSY_MESSAGE
            return None

        if not request.text or not request.text.strip():
            session.status = EMPTY_TEXT_MESSAGE
            return None

        session.begin_generation(request.format)

        try:
            call = build_call(request, self.voices_dir)
            audio = await self.send(call)
        except Exception as e:
            logger.error(f"Generation with {request.backend} failed: {e}")
            session.fail(f"Error: {e}")
            return None

        result = GenerationResult(audio=audio, metadata=metadata_for(call))
        session.complete(result)
        logger.info(
            f"Generated {len(audio)} bytes with {call.backend} ({call.kind} call)"
        )
        return result

    async def send(self, call: SynthesisCall) -> bytes:
        """Make the synthesis call and return its audio."""
        if call.kind == "design":
            return await self.client.synthesize_from_description(
                call.text,
                call.description or "",
                call.backend,
                format=call.format,
                params=call.params,
            )
        if call.kind == "clone":
            return await self.client.synthesize_from_reference(
                call.text,
                Path(call.reference or ""),
                call.backend,
                format=call.format,
                params=call.params,
            )
        return await self.client.synthesize(
            call.text,
            call.voice,
            call.backend,
            model=call.model,
            format=call.format,
            params=call.params,
        )
