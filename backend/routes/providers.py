"""
AI provider routes - which providers are configured and which is next in rotation.
"""

from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import logging

from config import AI_PROVIDERS, GOOGLE_GEMINI_API_KEY, MISTRAL_API_KEY, BYTEZ_API_KEY, LOG_LEVEL
from models import ProvidersResponse
from services.doc_generator import DocumentationGenerator, get_doc_generator

logger = logging.getLogger(__name__)
providers_router = APIRouter(prefix="/api", tags=["AI Providers"])


@providers_router.get("/providers", response_model=ProvidersResponse)
async def list_providers(generator: DocumentationGenerator = Depends(get_doc_generator)):
    """List configured providers in rotation order and the one tried next."""
    return {
        "available": generator.get_available_providers(),
        "current": generator.get_current_provider(),
    }


@providers_router.get("/debug")
async def debug_status(generator: DocumentationGenerator = Depends(get_doc_generator)):
    """Report which credentials are present (never their values) and provider status."""
    available = generator.get_available_providers()
    if available:
        provider_status = f"Available providers: {', '.join(available)}"
    else:
        provider_status = "No AI providers configured"

    return {
        "status": "API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": {
            "GOOGLE_GEMINI_API_KEY": bool(GOOGLE_GEMINI_API_KEY),
            "MISTRAL_API_KEY": bool(MISTRAL_API_KEY),
            "BYTEZ_API_KEY": bool(BYTEZ_API_KEY),
            "LOG_LEVEL": LOG_LEVEL,
        },
        "ai_service": provider_status,
        "providers": {
            name: {
                "name": info["name"],
                "model": info["model"],
                "description": info["description"],
                "configured": name in available,
            }
            for name, info in AI_PROVIDERS.items()
        },
    }
