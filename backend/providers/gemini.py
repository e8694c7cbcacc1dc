import logging
from typing import Any, Dict, Optional

import httpx

from config import (
    GOOGLE_GEMINI_API_KEY, GEMINI_API_URL, AI_PROVIDERS, PROVIDER_REQUEST_TIMEOUT,
    GENERATION_TEMPERATURE, GENERATION_MAX_TOKENS,
)
from errors import ContentRejectedError, ProviderError
from models import RepositorySnapshot
from providers.base import default_retry_policy, post_json, require_credential, require_text
from providers.prompts import build_prompt
from services.retry import RetryPolicy

logger = logging.getLogger(__name__)

_BLOCKING_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"}


class GeminiProvider:
    """Google Gemini via the Generative Language REST API."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: str = GEMINI_API_URL,
        timeout: float = PROVIDER_REQUEST_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = require_credential(
            GOOGLE_GEMINI_API_KEY if api_key is None else api_key, "GOOGLE_GEMINI_API_KEY"
        )
        self.model = model or AI_PROVIDERS[self.name]["model"]
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or default_retry_policy()
        self.transport = transport

    async def generate(self, snapshot: RepositorySnapshot) -> str:
        prompt = build_prompt(snapshot)
        return await self.retry_policy.run(self._call_gemini, prompt, label=f"{self.name}:{self.model}")

    async def _call_gemini(self, prompt: str) -> str:
        url = f"{self.api_url}/{self.model}:generateContent"
        logger.info(f"Calling Gemini API: {url}")
        data = await post_json(
            self.name,
            url,
            body={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": GENERATION_TEMPERATURE,
                    "maxOutputTokens": GENERATION_MAX_TOKENS,
                },
            },
            headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
            transport=self.transport,
        )
        return self._extract_text(data)

    def _extract_text(self, data: Dict[str, Any]) -> str:
        feedback = data.get("promptFeedback") or {}
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise ContentRejectedError(self.name, f"prompt blocked: {feedback['blockReason']}")

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise ProviderError(self.name, "response contained no candidates")

        first = candidates[0]
        finish_reason = first.get("finishReason")
        if isinstance(finish_reason, str) and finish_reason in _BLOCKING_FINISH_REASONS:
            raise ContentRejectedError(self.name, f"response blocked: {finish_reason}")

        content = first.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise ProviderError(self.name, "malformed response: candidate has no content parts")
        text = "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        return require_text(self.name, text)
