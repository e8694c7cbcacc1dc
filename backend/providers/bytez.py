import logging
from typing import Any, Dict, List, Optional

import httpx

from config import (
    BYTEZ_API_KEY, BYTEZ_API_URL, AI_PROVIDERS, PROVIDER_REQUEST_TIMEOUT,
    GENERATION_TEMPERATURE, GENERATION_MAX_TOKENS,
)
from errors import ContentRejectedError, ProviderError
from models import RepositorySnapshot
from providers.base import default_retry_policy, post_json, require_credential, require_text
from providers.prompts import build_prompt
from services.retry import RetryPolicy

logger = logging.getLogger(__name__)

# Chat-capable model indicators
_CHAT_MODEL_KEYWORDS = {"instruct", "chat", "llama", "qwen", "mistral", "gemma", "phi", "deepseek"}

_CONTENT_POLICY_MARKERS = ("content policy", "safety", "moderation")

SYSTEM_PROMPT = "You are a technical documentation writer. Respond with Markdown only."


def _is_chat_model(model_id: str) -> bool:
    """Determine if a model supports the chat messages format."""
    lower = model_id.lower()
    return any(kw in lower for kw in _CHAT_MODEL_KEYWORDS)


class BytezProvider:
    """Open models hosted on the Bytez inference API."""

    name = "bytez"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: str = BYTEZ_API_URL,
        timeout: float = PROVIDER_REQUEST_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = require_credential(BYTEZ_API_KEY if api_key is None else api_key, "BYTEZ_API_KEY")
        self.model_id = model or AI_PROVIDERS[self.name]["model"]
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or default_retry_policy()
        self.transport = transport

    async def generate(self, snapshot: RepositorySnapshot) -> str:
        # Small hosted models have tight context windows; manifests are left out
        prompt = build_prompt(snapshot, include_manifests=False)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        return await self.retry_policy.run(self._call_bytez, messages, label=f"{self.name}:{self.model_id}")

    def _build_body(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        params = {"max_new_tokens": GENERATION_MAX_TOKENS, "temperature": GENERATION_TEMPERATURE}

        if _is_chat_model(self.model_id):
            return {"messages": messages, "params": params}

        # Text-to-text models: concatenate messages into a prompt
        prompt_parts = []
        for msg in messages:
            role = msg.get("role", "user")
            content = msg.get("content", "")
            if role == "system":
                prompt_parts.append(f"Instructions: {content}")
            else:
                prompt_parts.append(content)
        return {"text": "\n\n".join(prompt_parts), "params": params}

    async def _call_bytez(self, messages: List[Dict[str, str]]) -> str:
        url = f"{self.api_url}/{self.model_id}"
        logger.info(f"Calling Bytez API: {url}")
        data = await post_json(
            self.name,
            url,
            body=self._build_body(messages),
            headers={"Authorization": self.api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
            transport=self.transport,
        )

        error = data.get("error")
        if error:
            text = str(error)
            if any(marker in text.lower() for marker in _CONTENT_POLICY_MARKERS):
                raise ContentRejectedError(self.name, text[:200])
            raise ProviderError(self.name, f"API error: {text[:200]}")

        output = data.get("output")
        if isinstance(output, dict):
            return require_text(self.name, output.get("content"))
        return require_text(self.name, output)
