"""Shared HTTP transport for backends exposing an OpenAI-style speech API."""

import logging
from pathlib import Path
from typing import Any, ClassVar

import httpx

from ..config import BackendConfig
from ..tts.errors import TTSAPIError, TTSAuthError
from .base import TTSBackend

logger = logging.getLogger(__name__)


class OpenAICompatibleBackend(TTSBackend):
    """Backend speaking the /v1/audio/speech protocol over HTTP.

    Endpoint paths are class attributes so each server can declare its own
    request shape; parameter field names come from the ParamSpec wire names.
    """

    speech_path: ClassVar[str] = "/v1/audio/speech"
    clone_path: ClassVar[str | None] = None
    design_path: ClassVar[str | None] = None
    voices_path: ClassVar[str | None] = None

    # Form field holding the reference audio for clone requests
    reference_field: ClassVar[str] = "voice_file"
    # JSON field holding the description for design requests
    description_field: ClassVar[str] = "voice_description"

    def __init__(
        self,
        config: BackendConfig | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config, timeout)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if self._config.api_key:
            return {"Authorization": f"Bearer {self._config.api_key}"}
        return {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url or "",
            headers=self._headers(),
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and map failures to TTS errors."""
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TTSAPIError(
                f"{self.label} did not respond within {self._timeout:g}s", None, e
            ) from e
        except httpx.RequestError as e:
            raise TTSAPIError(
                f"Could not reach {self.label} at {self.base_url}: {e}", None, e
            ) from e

        if response.status_code in (401, 403):
            raise TTSAuthError(
                f"Authentication failed: {response.status_code} {_detail(response)}"
            )
        if response.status_code == 429:
            raise TTSAPIError(f"Rate limit exceeded: {_detail(response)}", 429)
        if response.status_code >= 500:
            raise TTSAPIError(
                f"Server error: {response.status_code} {_detail(response)}",
                response.status_code,
            )
        if response.status_code >= 400:
            raise TTSAPIError(
                f"API call failed: {response.status_code} {_detail(response)}",
                response.status_code,
            )
        return response

    def _speech_payload(
        self,
        text: str,
        voice: str | None,
        model: str | None,
        format: str,
        params: dict[str, Any] | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"input": text, "response_format": format}
        if voice:
            payload["voice"] = voice
        if model:
            payload["model"] = model
        payload.update(self.wire_params(params))
        return payload

    async def synthesize(
        self,
        text: str,
        voice: str,
        model: str | None = None,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        payload = self._speech_payload(text, voice, model, format, params)
        logger.debug(f"POST {self.base_url}{self.speech_path} {payload}")
        response = await self._request("POST", self.speech_path, json=payload)
        return response.content

    async def synthesize_from_reference(
        self,
        text: str,
        reference: Path,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        if not self.supports_clone or not self.clone_path:
            return await super().synthesize_from_reference(text, reference, format, params)

        data = {
            key: str(value)
            for key, value in self._speech_payload(
                text, None, None, format, params
            ).items()
        }
        logger.debug(f"POST {self.base_url}{self.clone_path} reference={reference}")
        with open(reference, "rb") as f:
            files = {self.reference_field: (reference.name, f.read())}
        response = await self._request("POST", self.clone_path, data=data, files=files)
        return response.content

    async def synthesize_from_description(
        self,
        text: str,
        description: str,
        format: str = "wav",
        params: dict[str, Any] | None = None,
    ) -> bytes:
        if not self.supports_design or not self.design_path:
            return await super().synthesize_from_description(
                text, description, format, params
            )

        payload = self._speech_payload(text, None, None, format, params)
        payload[self.description_field] = description
        logger.debug(f"POST {self.base_url}{self.design_path} {payload}")
        response = await self._request("POST", self.design_path, json=payload)
        return response.content

    async def list_voices(self) -> list[dict]:
        """Fetch the voice catalog from the server.

        Accepts a plain list of names, a list of objects with name/id, or
        either of those wrapped in {"voices": [...]} / {"data": [...]}.
        """
        if not self.voices_path:
            return [
                {"id": voice_id, "name": label, "backend": self.name}
                for label, voice_id in self.voices
            ]

        response = await self._request("GET", self.voices_path)
        try:
            data = response.json()
        except ValueError as e:
            raise TTSAPIError(f"Invalid voice list from {self.label}: {e}") from e

        if isinstance(data, dict):
            data = data.get("voices", data.get("data", []))

        voices = []
        for item in data or []:
            if isinstance(item, str):
                voices.append({"id": item, "name": item, "backend": self.name})
            elif isinstance(item, dict):
                voice_id = item.get("id") or item.get("voice_id") or item.get("name")
                if voice_id:
                    voices.append(
                        {
                            "id": str(voice_id),
                            "name": str(item.get("name") or voice_id),
                            "backend": self.name,
                        }
                    )
        return voices


def _detail(response: httpx.Response) -> str:
    """Best-effort error detail from a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("error") or data
        if isinstance(detail, dict):
            detail = detail.get("message", detail)
        return str(detail)
    return str(data)
