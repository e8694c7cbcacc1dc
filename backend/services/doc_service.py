"""
Request-level documentation service.

Fetches the repository snapshot, runs the generator under a caller-level
timeout and turns the outcome into the response payload the routes return.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import markdown as md_lib

from config import GENERATION_TIMEOUT
from errors import (
    AggregateFailureError, ConfigurationError, GenerationTimeoutError,
    NoProvidersConfiguredError, ProviderError, RepositoryFetchError,
)
from models import repository_key
from services.doc_generator import DocumentationGenerator, doc_generator
from services.github_service import GitHubService

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    "configuration": "Documentation service is not configured correctly. Contact the administrator.",
    "timeout": "The AI providers are slow or overloaded right now. Please try again in a moment.",
    "rate_limited": "Too many requests. Please wait a minute and try again.",
    "unauthorized": "GitHub rejected the access token. Please sign in again.",
    "not_found": "Repository not found or not accessible with this account.",
    "unknown": "Failed to generate documentation.",
}

RETRYABLE_ERROR_TYPES = {"timeout", "rate_limited"}

# Latest generation status keyed by lowered "owner/name", in memory only
documentation_status: Dict[str, Dict[str, Any]] = {}


def record_status(repository: str, status: str, **fields: Any) -> Dict[str, Any]:
    previous = documentation_status.get(repository_key(repository), {})
    record = {
        "repository": repository,
        "status": status,
        "provider": fields.get("provider"),
        "error": fields.get("error"),
        "last_generated": fields.get("last_generated", previous.get("last_generated")),
        "updated_at": _timestamp(),
    }
    documentation_status[repository_key(repository)] = record
    return record


def get_status(repository: str) -> Optional[Dict[str, Any]]:
    return documentation_status.get(repository_key(repository))


def _classify_message(message: str) -> str:
    text = message.lower()
    if "rate limit" in text or "429" in text:
        return "rate_limited"
    if "timed out" in text or "timeout" in text or "overloaded" in text or "503" in text:
        return "timeout"
    if "401" in text or "unauthorized" in text or "api key" in text:
        return "configuration"
    return "unknown"


def classify_error(exc: BaseException) -> str:
    """Map a failure to the category the client uses to decide whether to retry."""
    if isinstance(exc, (NoProvidersConfiguredError, ConfigurationError)):
        return "configuration"
    if isinstance(exc, (GenerationTimeoutError, asyncio.TimeoutError)):
        return "timeout"
    if isinstance(exc, RepositoryFetchError):
        return {
            401: "unauthorized",
            403: "unauthorized",
            404: "not_found",
            429: "rate_limited",
            504: "timeout",
        }.get(exc.status_code, "unknown")
    if isinstance(exc, AggregateFailureError) and exc.last_error is not None:
        return classify_error(exc.last_error)
    if isinstance(exc, ProviderError):
        return _classify_message(exc.message)
    return _classify_message(str(exc))


def render_html(content: str) -> str:
    return md_lib.markdown(content, extensions=["fenced_code", "tables"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def failure_payload(exc: BaseException) -> Dict[str, Any]:
    error_type = classify_error(exc)
    return {
        "success": False,
        "error": str(exc) or exc.__class__.__name__,
        "error_type": error_type,
        "message": ERROR_MESSAGES[error_type],
        "retryable": error_type in RETRYABLE_ERROR_TYPES,
        "timestamp": _timestamp(),
    }


async def generate_repository_documentation(
    owner: str,
    name: str,
    access_token: str,
    generator: Optional[DocumentationGenerator] = None,
    github_service: Optional[GitHubService] = None,
    timeout: float = GENERATION_TIMEOUT,
    output_format: str = "markdown",
) -> Dict[str, Any]:
    """Generate documentation for ``owner/name``. Never raises; failures become payloads."""
    generator = generator or doc_generator
    github = github_service or GitHubService(access_token)

    async def _run():
        snapshot = await github.fetch_repository_snapshot(owner, name)
        return await generator.generate_documentation(snapshot)

    repository = f"{owner}/{name}"
    logger.info(f"Generating documentation for {repository}...")
    record_status(repository, "generating")
    try:
        result = await asyncio.wait_for(_run(), timeout=timeout)
    except asyncio.TimeoutError:
        error = GenerationTimeoutError(timeout)
        logger.error(f"Failed to generate documentation for {repository}: {error}")
        record_status(repository, "failed", error=str(error))
        return failure_payload(error)
    except Exception as e:
        logger.error(f"Failed to generate documentation for {repository}: {e}")
        record_status(repository, "failed", error=str(e))
        return failure_payload(e)

    payload: Dict[str, Any] = {
        "success": True,
        "content": result.content,
        "provider": result.provider,
        "timestamp": _timestamp(),
    }
    if output_format == "html":
        payload["html"] = render_html(result.content)
    record_status(repository, "completed", provider=result.provider, last_generated=payload["timestamp"])
    logger.info(f"Generated documentation using {result.provider} for {repository} ({len(result.content)} chars)")
    return payload
