"""cornfab - text-to-speech front-end for local and hosted voice backends."""

__version__ = "0.1.0"
__all__ = ["generate"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "generate":
        from .api import generate

        return generate
    raise AttributeError(f"module 'cornfab' has no attribute {name!r}")
