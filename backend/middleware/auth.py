import logging
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from services.github_service import GitHubService

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


async def get_github_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Return the caller's GitHub access token from the Authorization header.

    The token is passed through to GitHub untouched; it is never stored or logged.
    """
    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return credentials.credentials.strip()


async def get_github_service(access_token: str = Depends(get_github_token)) -> GitHubService:
    return GitHubService(access_token)
