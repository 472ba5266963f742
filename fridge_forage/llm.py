"""Gemini client for the generative text service."""

import logging
from typing import Any, Protocol

import httpx

from .config import GEMINI_API_URL, LLM_TIMEOUT, get_api_key, get_model

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Exception raised when the text service is unreachable or answers badly."""

    pass


class TextGenerator(Protocol):
    """Anything that turns a prompt into free-form text."""

    def generate(self, prompt: str) -> str: ...


class GeminiClient:
    """Client for Gemini's generateContent endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = GEMINI_API_URL,
        timeout: float = LLM_TIMEOUT,
    ):
        api_key = api_key or get_api_key()
        if not api_key:
            raise LLMError(
                "No Gemini API key configured. Set GEMINI_API_KEY or run: fridge ai set-key"
            )
        self.model = model or get_model()
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": api_key,
            },
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the concatenated text of the first candidate.

        Raises:
            LLMError: On network errors, HTTP errors or an unexpected payload
        """
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        logger.debug("Sending %d-character prompt to %s", len(prompt), self.model)
        try:
            response = self.client.post(self.endpoint, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"Text service returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise LLMError(f"Text service request failed: {e}") from e
        except ValueError as e:
            raise LLMError(f"Text service returned invalid JSON: {e}") from e

        text = self._extract_text(data)
        logger.debug("Received %d characters from %s", len(text), self.model)
        return text

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text") or "" for part in parts).strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise LLMError("Text service returned no candidates") from e

    def close(self) -> None:
        self.client.close()
