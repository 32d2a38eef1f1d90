"""Client wrapper around the Google Gemini Generative Language API."""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

import config
from errors import UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Lightweight text-generation client for the Gemini REST endpoint."""

    RETRY_STATUS_CODES = {408, 409, 429, 500, 502, 503, 504}
    BACKOFF_INITIAL_SECONDS = 1.0
    BACKOFF_MAX_SECONDS = 8.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.api_url = api_url or config.GEMINI_API_URL
        self.timeout = timeout or config.GEMINI_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries or config.GEMINI_MAX_RETRIES)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def generate_text(self, parts: List[str], temperature: float = 0.8) -> str:
        """Send the text parts as one user turn and return the first candidate's text.

        Raises UpstreamError when the service is unconfigured, unreachable,
        times out, or answers with a non-retryable error. Timeouts are not
        retried so callers can fall back quickly.
        """
        if not self.is_configured:
            logger.error("Gemini API not configured - API key missing")
            raise UpstreamError("Text generation service is not configured")

        payload = {
            "contents": [{"role": "user", "parts": [{"text": part} for part in parts]}],
            "generationConfig": {"temperature": temperature},
        }
        data = self._post(payload)
        return self._extract_text(data)

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        backoff = self.BACKOFF_INITIAL_SECONDS
        for attempt in range(1, self.max_retries + 1):
            try:
                response = requests.post(
                    self.api_url,
                    params={"key": self.api_key},
                    json=payload,
                    timeout=self.timeout,
                )
                response.raise_for_status()
            except requests.exceptions.HTTPError as exc:
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code in self.RETRY_STATUS_CODES and attempt < self.max_retries:
                    wait = min(backoff, self.BACKOFF_MAX_SECONDS)
                    logger.warning(
                        "Gemini HTTP %s. Retrying in %.1fs (attempt %s/%s).",
                        status_code, wait, attempt, self.max_retries,
                    )
                    time.sleep(wait)
                    backoff *= 2
                    continue
                logger.error("Gemini HTTP error: %s - %s", status_code, exc)
                raise UpstreamError(f"Text generation service returned HTTP {status_code}") from exc
            except requests.exceptions.Timeout as exc:
                logger.error("Gemini request timed out after %ss", self.timeout)
                raise UpstreamError("Text generation service timed out") from exc
            except requests.exceptions.RequestException as exc:
                logger.error("Gemini request failed: %s", exc)
                raise UpstreamError("Text generation service unreachable") from exc

            try:
                return response.json()
            except ValueError as exc:
                logger.error("Failed to parse Gemini response body as JSON: %s", exc)
                raise UpstreamError("Text generation service returned an unreadable body") from exc

        raise UpstreamError()

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        """Join the text parts of the first candidate that has any."""
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                logger.error("Gemini blocked request. Reason: %s", block_reason)
            else:
                logger.warning("Gemini response missing candidates: %s", str(data)[:500])
            return ""

        for cand in candidates:
            parts = (cand.get("content") or {}).get("parts", [])
            collected = [
                part["text"] for part in parts
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            ]
            text = "".join(collected).strip()
            if text:
                return text
        return ""


def get_gemini_client() -> GeminiClient:
    """FastAPI dependency; overridden in tests."""
    return GeminiClient()
