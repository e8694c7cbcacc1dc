import logging
from typing import Dict, List, Optional

from config import AI_PROVIDERS
from errors import ConfigurationError
from providers.base import DocumentationProvider
from providers.bytez import BytezProvider
from providers.gemini import GeminiProvider
from providers.mistral import MistralProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES = {
    "gemini": GeminiProvider,
    "mistral": MistralProvider,
    "bytez": BytezProvider,
}


def build_registry(credentials: Optional[Dict[str, str]] = None, **provider_kwargs) -> List[DocumentationProvider]:
    """Instantiate every provider whose credential is present, in rotation order.

    ``credentials`` maps provider name to API key; when omitted each provider
    reads its key from the environment.
    """
    providers: List[DocumentationProvider] = []
    for name in AI_PROVIDERS:
        provider_cls = PROVIDER_CLASSES[name]
        api_key = None if credentials is None else credentials.get(name, "")
        try:
            providers.append(provider_cls(api_key=api_key, **provider_kwargs))
        except ConfigurationError as e:
            logger.info(f"Provider '{name}' disabled: {e}")

    logger.info(f"Configured AI providers: {[p.name for p in providers] or 'none'}")
    return providers
