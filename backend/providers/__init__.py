from providers.base import DocumentationProvider
from providers.gemini import GeminiProvider
from providers.mistral import MistralProvider
from providers.bytez import BytezProvider
from providers.registry import build_registry
