"""
Documentation generator: round-robin provider failover with result caching.

Providers are awaited one at a time, so ``current_index`` and the cache are
only ever mutated from the event loop thread.
"""

import logging
from typing import List, Optional, Sequence

from config import DOCS_CACHE_TTL, MAX_PROVIDER_ATTEMPTS
from errors import AggregateFailureError, NoProvidersConfiguredError, ProviderError
from models import ProviderResult, RepositorySnapshot, repository_key
from providers import DocumentationProvider, build_registry
from services.cache import TTLCache, cache as shared_cache

logger = logging.getLogger(__name__)

CACHE_PREFIX = "docs"


def docs_cache_key(repository: str, provider: str, freshness: str) -> str:
    return f"{CACHE_PREFIX}:{repository_key(repository)}:{provider}:{freshness}"


class DocumentationGenerator:
    """Tries providers in rotation until one produces documentation."""

    def __init__(
        self,
        providers: Sequence[DocumentationProvider],
        cache: Optional[TTLCache] = None,
        max_provider_attempts: int = MAX_PROVIDER_ATTEMPTS,
        cache_ttl: float = DOCS_CACHE_TTL,
    ):
        self.providers = tuple(providers)
        self.cache = shared_cache if cache is None else cache
        self.max_provider_attempts = max_provider_attempts
        self.cache_ttl = cache_ttl
        self.current_index = 0

    def _rotation(self) -> List[DocumentationProvider]:
        n = len(self.providers)
        return [self.providers[(self.current_index + i) % n] for i in range(n)]

    def _cached_result(self, snapshot: RepositorySnapshot) -> Optional[ProviderResult]:
        for provider in self._rotation():
            key = docs_cache_key(snapshot.identity, provider.name, snapshot.freshness_marker)
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        return None

    async def generate_documentation(self, snapshot: RepositorySnapshot) -> ProviderResult:
        if not self.providers:
            raise NoProvidersConfiguredError()

        cached = self._cached_result(snapshot)
        if cached is not None:
            logger.info(f"Cache hit for {snapshot.identity} ({cached.provider})")
            return cached

        max_attempts = len(self.providers) * self.max_provider_attempts
        tried = set()
        last_error: Optional[ProviderError] = None

        for attempt in range(1, max_attempts + 1):
            provider = self.providers[self.current_index]
            tried.add(provider.name)
            logger.info(f"Generating docs for {snapshot.identity} with {provider.name} (attempt {attempt}/{max_attempts})")
            try:
                content = await provider.generate(snapshot)
            except ProviderError as e:
                logger.error(f"{provider.name} failed: {e}")
                last_error = e
                self.current_index = (self.current_index + 1) % len(self.providers)
                continue

            result = ProviderResult(content=content, provider=provider.name)
            self.cache.set(
                docs_cache_key(snapshot.identity, provider.name, snapshot.freshness_marker),
                result,
                self.cache_ttl,
            )
            logger.info(f"Generated documentation using {provider.name} for {snapshot.identity} ({len(content)} chars)")
            return result

        raise AggregateFailureError(len(tried), last_error)

    def get_available_providers(self) -> List[str]:
        return [p.name for p in self.providers]

    def get_current_provider(self) -> Optional[str]:
        if not self.providers:
            return None
        return self.providers[self.current_index].name

    def clear_cache(self, repository_name: str) -> int:
        """Drop cached documentation for a repository across every provider."""
        removed = self.cache.delete_prefix(f"{CACHE_PREFIX}:{repository_key(repository_name)}:")
        logger.info(f"Cleared {removed} cached documentation entries for {repository_name}")
        return removed


# Singleton instance
doc_generator = DocumentationGenerator(build_registry())


def get_doc_generator() -> DocumentationGenerator:
    """FastAPI dependency returning the process-wide generator."""
    return doc_generator
