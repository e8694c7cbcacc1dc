import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from errors import ConfigurationError, ContentRejectedError, ProviderError
from models import RepositorySnapshot
from services.retry import RetryPolicy

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentationProvider(Protocol):
    """Anything that can turn a repository snapshot into Markdown documentation."""

    name: str

    async def generate(self, snapshot: RepositorySnapshot) -> str:
        ...


def is_retryable(exc: BaseException) -> bool:
    """Transient provider failures (including empty output) are retried; content refusals are not."""
    return isinstance(exc, ProviderError) and not isinstance(exc, ContentRejectedError)


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(retry_on=is_retryable)


def require_credential(value: Optional[str], env_name: str) -> str:
    if not value or not value.strip():
        raise ConfigurationError(f"{env_name} environment variable is required")
    return value.strip()


def require_text(provider: str, content: Any) -> str:
    """Reject missing, non-string or blank model output."""
    if not isinstance(content, str) or not content.strip():
        raise ProviderError(provider, "returned an empty response")
    return content.strip()


async def post_json(
    provider: str,
    url: str,
    body: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """POST a JSON body and return the decoded JSON object, raising ProviderError on any failure."""
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(url, headers=headers, json=body)
    except httpx.TimeoutException:
        raise ProviderError(provider, f"request timed out after {timeout:g}s")
    except httpx.HTTPError as e:
        raise ProviderError(provider, f"network error: {e}")

    if response.status_code == 429:
        raise ProviderError(provider, "rate limited (HTTP 429)")
    if response.status_code < 200 or response.status_code >= 300:
        raise ProviderError(provider, f"HTTP {response.status_code}: {response.text[:300]}")

    try:
        data = response.json()
    except ValueError:
        raise ProviderError(provider, "returned invalid JSON")
    if not isinstance(data, dict):
        raise ProviderError(provider, f"unexpected response format: {str(data)[:200]}")
    return data
