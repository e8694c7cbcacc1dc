from fastapi import APIRouter, HTTPException, Depends
from typing import List
import logging

from errors import RepositoryFetchError
from middleware.auth import get_github_service
from models import RepositoryResponse
from services.doc_service import get_status
from services.github_service import GitHubService

logger = logging.getLogger(__name__)
repos_router = APIRouter(prefix="/api/repositories", tags=["Repositories"])


@repos_router.get("", response_model=List[RepositoryResponse])
async def list_repositories(github: GitHubService = Depends(get_github_service)):
    """List the caller's GitHub repositories with their documentation status."""
    try:
        repositories = await github.list_user_repositories()
    except RepositoryFetchError as e:
        logger.error(f"Error fetching repositories: {e}")
        status_code = 401 if e.status_code == 401 else 502
        raise HTTPException(status_code=status_code, detail=f"Failed to fetch repositories: {e}")

    logger.info(f"Found {len(repositories)} repositories from GitHub")

    results = []
    for repo in repositories:
        status = get_status(repo.get("full_name") or "") or {}
        results.append({
            **repo,
            "documentation_status": status.get("status", "pending"),
            "last_generated": status.get("last_generated"),
        })
    return results
