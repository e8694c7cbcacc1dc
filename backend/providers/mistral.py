import logging
from typing import Any, Dict, Optional

import httpx

from config import (
    MISTRAL_API_KEY, MISTRAL_API_URL, AI_PROVIDERS, PROVIDER_REQUEST_TIMEOUT,
    GENERATION_TEMPERATURE, GENERATION_MAX_TOKENS,
)
from errors import ContentRejectedError, ProviderError
from models import RepositorySnapshot
from providers.base import default_retry_policy, post_json, require_credential, require_text
from providers.prompts import build_prompt
from services.retry import RetryPolicy

logger = logging.getLogger(__name__)


class MistralProvider:
    """Mistral AI chat-completions endpoint."""

    name = "mistral"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: str = MISTRAL_API_URL,
        timeout: float = PROVIDER_REQUEST_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = require_credential(MISTRAL_API_KEY if api_key is None else api_key, "MISTRAL_API_KEY")
        self.model = model or AI_PROVIDERS[self.name]["model"]
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or default_retry_policy()
        self.transport = transport

    async def generate(self, snapshot: RepositorySnapshot) -> str:
        prompt = build_prompt(snapshot)
        return await self.retry_policy.run(self._call_mistral, prompt, label=f"{self.name}:{self.model}")

    async def _call_mistral(self, prompt: str) -> str:
        logger.info(f"Calling Mistral API with model {self.model}")
        data = await post_json(
            self.name,
            f"{self.api_url}/chat/completions",
            body={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": GENERATION_TEMPERATURE,
                "max_tokens": GENERATION_MAX_TOKENS,
            },
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self.timeout,
            transport=self.transport,
        )
        return self._extract_content(data)

    def _extract_content(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise ProviderError(self.name, "response contained no choices")

        first = choices[0]
        if first.get("finish_reason") == "content_filter":
            raise ContentRejectedError(self.name, "response withheld by content filter")

        message = first.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        # Newer models may return a list of typed chunks instead of a plain string
        if isinstance(content, list):
            content = "".join(
                chunk["text"] for chunk in content
                if isinstance(chunk, dict) and chunk.get("type") == "text" and isinstance(chunk.get("text"), str)
            )
        return require_text(self.name, content)
