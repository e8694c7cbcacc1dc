"""
Documentation routes - generate repository documentation through the provider
fallback chain, report generation status and invalidate cached results.
"""

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
import logging

from middleware.auth import get_github_token, get_github_service
from models import GenerateDocsRequest, GenerateDocsResponse, DocumentationStatusResponse
from services.doc_generator import DocumentationGenerator, get_doc_generator
from services.doc_service import generate_repository_documentation, get_status
from services.github_service import GitHubService

logger = logging.getLogger(__name__)
docs_router = APIRouter(prefix="/api", tags=["Documentation"])

# Failure categories that map to a distinct HTTP status; anything else is a 200 with success=false
ERROR_STATUS_CODES = {
    "configuration": 503,
    "timeout": 504,
    "unauthorized": 401,
    "not_found": 404,
    "rate_limited": 429,
}


@docs_router.post("/generate-docs", response_model=GenerateDocsResponse)
async def generate_docs(
    request: GenerateDocsRequest,
    github: GitHubService = Depends(get_github_service),
    generator: DocumentationGenerator = Depends(get_doc_generator),
):
    """Generate Markdown documentation for one repository and return it immediately."""
    logger.info(f"Starting documentation generation for {request.owner}/{request.name}")

    result = await generate_repository_documentation(
        request.owner,
        request.name,
        github.access_token,
        generator=generator,
        github_service=github,
        output_format=request.format,
    )
    response = GenerateDocsResponse(repository_id=request.repository_id, **result)

    status_code = None if response.success else ERROR_STATUS_CODES.get(response.error_type)
    if status_code:
        return JSONResponse(status_code=status_code, content=response.model_dump())
    return response


@docs_router.get("/documentation-status/{owner}/{name}", response_model=DocumentationStatusResponse)
async def documentation_status(owner: str, name: str, _token: str = Depends(get_github_token)):
    """Latest generation status for a repository in this process."""
    status = get_status(f"{owner}/{name}")
    if not status:
        raise HTTPException(status_code=404, detail="No documentation generated for this repository")
    return status


@docs_router.delete("/documentation-cache/{owner}/{name}")
async def clear_documentation_cache(
    owner: str,
    name: str,
    _token: str = Depends(get_github_token),
    generator: DocumentationGenerator = Depends(get_doc_generator),
):
    """Drop cached documentation for a repository so the next request regenerates it."""
    repository = f"{owner}/{name}"
    removed = generator.clear_cache(repository)
    return {"repository": repository, "removed": removed}
