"""
Exception taxonomy shared by providers, the generator and the HTTP layer.
"""

from typing import Optional


class DocGenError(Exception):
    """Base class for documentation generation failures."""


class ConfigurationError(DocGenError):
    """A provider's credential is missing. Raised at construction, never retried."""


class ProviderError(DocGenError):
    """A single provider attempt failed (network, HTTP status, malformed or empty output)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ContentRejectedError(ProviderError):
    """The upstream explicitly refused the request on content-policy grounds."""


class NoProvidersConfiguredError(DocGenError):
    def __init__(self):
        super().__init__("No AI providers configured")


class AggregateFailureError(DocGenError):
    """Every configured provider exhausted its attempts."""

    def __init__(self, providers_tried: int, last_error: Optional[BaseException]):
        last = str(last_error) if last_error else "unknown error"
        super().__init__(f"All AI providers failed ({providers_tried} tried). Last error: {last}")
        self.providers_tried = providers_tried
        self.last_error = last_error


class RepositoryFetchError(DocGenError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GenerationTimeoutError(DocGenError):
    def __init__(self, timeout: float):
        super().__init__(f"Documentation generation timed out after {timeout:g}s")
        self.timeout = timeout
