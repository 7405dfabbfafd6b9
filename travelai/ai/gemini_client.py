from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from travelai.core.config import Settings
from travelai.core.errors import MalformedResponse, UpstreamFailure
from travelai.domain.models import GenerationResult

logger = logging.getLogger(__name__)

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"


class GeminiClient:
    """
    Thin adapter over the Gemini ``generateContent`` REST endpoint.
    Raises UpstreamFailure / MalformedResponse instead of returning partial text.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        base = self.settings.gemini_base_url.rstrip("/")
        return f"{base}/models/{self.settings.gemini_model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        s = self.settings
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": s.gemini_temperature,
                "topK": s.gemini_top_k,
                "topP": s.gemini_top_p,
                "maxOutputTokens": s.gemini_max_output_tokens,
            },
            "safetySettings": [
                {"category": category, "threshold": SAFETY_THRESHOLD} for category in SAFETY_CATEGORIES
            ],
        }

    async def generate(self, prompt: str) -> GenerationResult:
        if not self.settings.gemini_api_key:
            raise UpstreamFailure(None, "Gemini API key is not configured")
        attempts = max(1, self.settings.generation_max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await self._generate_once(prompt)
            except UpstreamFailure as exc:
                if attempt >= attempts or not exc.transient:
                    raise
                delay = self.settings.generation_retry_backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Gemini call failed (attempt %d/%d, status=%s); retrying in %.1fs",
                    attempt,
                    attempts,
                    exc.upstream_status,
                    delay,
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _generate_once(self, prompt: str) -> GenerationResult:
        headers = {"Content-Type": "application/json", "X-goog-api-key": self.settings.gemini_api_key}
        logger.info("Calling Gemini API with %s model", self.settings.gemini_model)
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.gemini_timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(self.endpoint, headers=headers, json=self.build_payload(prompt))
        except httpx.HTTPError as exc:
            logger.warning("Gemini request failed: %s", exc)
            raise UpstreamFailure(None, str(exc) or exc.__class__.__name__) from exc

        if not resp.is_success:
            logger.error("Gemini API error: %s %s", resp.status_code, resp.text)
            raise UpstreamFailure(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponse("Gemini API returned a non-JSON body") from exc

        text = _extract_text(data)
        if not text:
            logger.error("Invalid Gemini response structure: %s", data)
            raise MalformedResponse()

        logger.info("Generated content length: %d", len(text))
        return GenerationResult(text=text, prompt=prompt, generated_at=datetime.now(timezone.utc))


def _extract_text(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    texts = [part.get("text") for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    if not texts:
        return None
    return "".join(texts)
