"""Gemini generateContent wrapper with async support."""

from __future__ import annotations

import logging
import re

import httpx

from latex_tailor.config import DEFAULT_BASE_URL
from latex_tailor.errors import EmptyResponse, MissingCredential, RemoteFailure

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:latex)?\n?")


def strip_code_fences(text: str) -> str:
    """Remove ```latex / ``` markers anywhere in the text, then trim."""
    return _FENCE_RE.sub("", text).strip()


def _extract_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return "Unknown error"


def _extract_candidate_text(body: dict) -> str | None:
    try:
        return body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class GenerationClient:
    """Async client for the remote text-generation service.

    One POST per call, no retries. Use as an async context manager, or pass
    an existing ``httpx.AsyncClient`` (the caller then owns its lifecycle).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout)
        self.request_count = 0

    async def __aenter__(self) -> GenerationClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _endpoint(self, model_id: str) -> str:
        return f"{self.base_url}/models/{model_id}:generateContent"

    async def _call_api(
        self,
        prompt: str,
        system_prompt: str,
        model_id: str,
        api_key: str,
    ) -> dict:
        if not api_key:
            raise MissingCredential()

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
        }
        url = self._endpoint(model_id)
        logger.debug("Generation call: %s", url)
        self.request_count += 1
        try:
            response = await self.client.post(
                url,
                params={"key": api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )
        except httpx.RequestError as e:
            logger.error("Generation request error: %s", e)
            raise RemoteFailure(None, str(e) or type(e).__name__) from e

        if not response.is_success:
            message = _extract_error_message(response)
            logger.error("Generation call failed: status=%d message=%s", response.status_code, message)
            raise RemoteFailure(response.status_code, message)

        try:
            body = response.json()
        except ValueError as e:
            raise EmptyResponse("Generation service returned a non-JSON body.") from e
        return body

    async def generate_raw(
        self,
        prompt: str,
        system_prompt: str,
        model_id: str,
        api_key: str,
    ) -> str:
        """Send a prompt and return the first candidate's text unmodified."""
        body = await self._call_api(prompt, system_prompt, model_id, api_key)
        text = _extract_candidate_text(body)
        if not text:
            raise EmptyResponse()
        logger.debug("Generation response: %d chars", len(text))
        return text

    async def generate(
        self,
        prompt: str,
        system_prompt: str,
        model_id: str,
        api_key: str,
    ) -> str:
        """Send a prompt and return the sanitized LaTeX text."""
        text = await self.generate_raw(prompt, system_prompt, model_id, api_key)
        return strip_code_fences(text)
