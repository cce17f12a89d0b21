"""Backend abstraction for text-to-speech services.

This module provides a registry pattern for managing TTS backends and the
lookups the UI needs to render a backend's options: which models, voices
and generation parameters it accepts, and which backends are usable with
the current configuration. Lookups never raise; they degrade to an option
set that can always be rendered.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .base import TTSBackend

from ..config import CornfabConfig, load_config
from ..tts.models import Choices, ParamSpec
from ..voices import list_custom_voices
from .chatterbox import ChatterboxBackend
from .elevenlabs import ElevenLabsBackend
from .fal import FalBackend
from .openai import OpenAIBackend
from .qwen3 import Qwen3Backend

logger = logging.getLogger(__name__)

__all__ = [
    "BackendRegistry",
    "PLACEHOLDER_VOICE",
    "configure_backend",
    "detect_available_backends",
    "models_for",
    "param_specs_for",
    "voices_for",
]

PLACEHOLDER_VOICE = ("Default", "default")


class BackendRegistry:
    """Registry for managing TTS backends.

    This class maintains a registry of available TTS backends in
    registration order, allowing registration and retrieval by name.
    """

    _backends: ClassVar[dict[str, type["TTSBackend"]]] = {}
    _instances: ClassVar[dict[str, "TTSBackend"]] = {}

    @classmethod
    def register(cls, name: str, backend_class: type["TTSBackend"]) -> None:
        """Register a TTS backend.

        Args:
            name: Name to register the backend under
            backend_class: Backend class that implements TTSBackend
        """
        cls._backends[name] = backend_class
        cls._instances.pop(name, None)

    @classmethod
    def get(cls, name: str) -> type["TTSBackend"]:
        """Get a backend class by name.

        Raises:
            KeyError: If backend name not found
        """
        if name not in cls._backends:
            available = ", ".join(cls._backends.keys()) if cls._backends else "none"
            raise KeyError(f"Backend '{name}' not found. Available backends: {available}")
        return cls._backends[name]

    @classmethod
    def get_instance(cls, name: str) -> "TTSBackend":
        """Get a cached backend instance by name.

        Creates the instance on first call, returns cached instance after.
        The instance holds the base URL and API key read at creation time.

        Raises:
            KeyError: If backend name not found
            TTSAuthError: If the backend needs an API key that is not set
        """
        if name not in cls._instances:
            backend_class = cls.get(name)
            cls._instances[name] = backend_class()
        return cls._instances[name]

    @classmethod
    def reset(cls, name: str | None = None) -> None:
        """Drop cached instances so settings are re-read on next use."""
        if name is None:
            cls._instances.clear()
        else:
            cls._instances.pop(name, None)

    @classmethod
    def names(cls) -> list[str]:
        return list(cls._backends.keys())


def configure_backend(name: str) -> None:
    """Apply the current configuration to a backend after switching to it.

    Base URL and API key are read from the config and environment the next
    time the backend is used.
    """
    BackendRegistry.reset(name)
    logger.debug(f"Backend '{name}' will be reconfigured on next use")


def models_for(backend: str) -> Choices:
    """Selectable models for a backend.

    Backends without a model concept (and unknown backends) return empty
    choices and no default; callers should not render a model selector.
    """
    try:
        backend_class = BackendRegistry.get(backend)
    except KeyError:
        return Choices()

    if not backend_class.models:
        return Choices()
    choices = list(backend_class.models)
    default = backend_class.default_model
    if default not in [model_id for _, model_id in choices]:
        default = choices[0][1]
    return Choices(choices, default)


async def voices_for(backend: str, voices_dir: Path | None = None) -> Choices:
    """Selectable voices for a backend.

    Backends with a live catalog are asked for their voices; if that fails
    or returns nothing, a single "default" placeholder is offered instead.
    Backends that can clone voices also list the custom voice files found
    in the voices directory as "<name> (custom)" with id "custom:<name>".
    Never raises.
    """
    try:
        backend_class = BackendRegistry.get(backend)
    except KeyError:
        return Choices([PLACEHOLDER_VOICE], PLACEHOLDER_VOICE[1])

    choices: list[tuple[str, str]] = []
    default = backend_class.default_voice

    if backend_class.live_voices:
        try:
            instance = BackendRegistry.get_instance(backend)
            voices = await instance.list_voices()
            choices = [(voice["name"], voice["id"]) for voice in voices]
        except (Exception, SystemExit) as e:
            logger.debug(f"Voice lookup for {backend} failed, using placeholder: {e}")
            choices = []
    else:
        choices = list(backend_class.voices)

    if not choices:
        choices = [PLACEHOLDER_VOICE]
    if default not in [voice_id for _, voice_id in choices]:
        default = choices[0][1]

    if backend_class.supports_clone:
        try:
            choices.extend(list_custom_voices(voices_dir))
        except (Exception, SystemExit) as e:
            logger.warning(f"Could not list custom voices: {e}")

    return Choices(choices, default)


def param_specs_for(backend: str) -> tuple[ParamSpec, ...]:
    """Generation parameters a backend accepts (empty for unknown backends)."""
    try:
        return BackendRegistry.get(backend).params
    except KeyError:
        return ()


def detect_available_backends(
    config: CornfabConfig | None = None,
) -> list[tuple[str, str]]:
    """List usable backends as (label, id) pairs.

    Local backends are always listed since reachability is checked when
    generating. API backends are listed only when their key is set. The
    configured general.backend, if listed, comes first; otherwise
    registration order is kept. If the config file can't be loaded, only
    the local backends are listed.
    """
    if config is None:
        try:
            config = load_config()
        except (Exception, SystemExit) as e:
            logger.warning(f"Could not load config, listing local backends only: {e}")
            return [
                (backend_class.label, name)
                for name, backend_class in BackendRegistry._backends.items()
                if backend_class.local
            ]

    available = [
        (backend_class.label, name)
        for name, backend_class in BackendRegistry._backends.items()
        if backend_class.is_available(config.backend(name))
    ]

    preferred = config.general.backend
    for index, (_, name) in enumerate(available):
        if name == preferred:
            available.insert(0, available.pop(index))
            break
    return available


# Register backends
BackendRegistry.register("chatterbox", ChatterboxBackend)
BackendRegistry.register("qwen3", Qwen3Backend)
BackendRegistry.register("openai", OpenAIBackend)
BackendRegistry.register("elevenlabs", ElevenLabsBackend)
BackendRegistry.register("fal", FalBackend)
