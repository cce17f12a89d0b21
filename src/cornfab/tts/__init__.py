"""TTS (Text-to-Speech) package for cornfab.

This package holds the synthesis client, the generation dispatcher and
the data models and errors they share.
"""

from .errors import TTSAPIError, TTSAuthError, TTSError, VoiceNotFoundError
from .models import (
    Choices,
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    ParamSpec,
    SynthesisCall,
)

__all__ = [
    "Choices",
    "GenerationMetadata",
    "GenerationRequest",
    "GenerationResult",
    "ParamSpec",
    "SynthesisCall",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "VoiceNotFoundError",
]
