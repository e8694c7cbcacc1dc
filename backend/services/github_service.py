"""
GitHub REST client that assembles repository snapshots for documentation.
"""

import base64
import hashlib
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from config import GITHUB_API_URL, GITHUB_REQUEST_TIMEOUT, MANIFEST_FILENAMES, REPO_CACHE_TTL
from errors import RepositoryFetchError
from models import FileEntry, FileKind, RepositorySnapshot, repository_key
from services.cache import TTLCache, cache as shared_cache

logger = logging.getLogger(__name__)

_REPOSITORY_FIELDS = (
    "id", "name", "full_name", "description", "private", "html_url", "language",
    "stargazers_count", "forks_count", "updated_at", "default_branch",
)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _decode_content(data: Dict[str, Any]) -> Optional[str]:
    content = data.get("content")
    if not content:
        return None
    try:
        return base64.b64decode(content).decode("utf-8", errors="replace")
    except ValueError:
        return None


class GitHubService:
    def __init__(
        self,
        access_token: str,
        base_url: str = GITHUB_API_URL,
        timeout: float = GITHUB_REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[TTLCache] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.cache = shared_cache if cache is None else cache

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, headers=self._headers, timeout=self.timeout, transport=self.transport
        )

    def _token_fingerprint(self) -> str:
        # Snapshots are scoped per token so private data never leaks across users
        return hashlib.sha256(self.access_token.encode("utf-8")).hexdigest()[:16]

    async def _get_json(self, client: httpx.AsyncClient, path: str, **params) -> Any:
        try:
            response = await client.get(path, params=params or None)
        except httpx.TimeoutException:
            raise RepositoryFetchError(f"GitHub request timed out: {path}", status_code=504)
        except httpx.HTTPError as e:
            raise RepositoryFetchError(f"GitHub is unreachable: {e}", status_code=502)

        if response.status_code != 200:
            message = f"GitHub returned {response.status_code} for {path}"
            if response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0":
                raise RepositoryFetchError(f"GitHub rate limit exceeded for {path}", status_code=429)
            raise RepositoryFetchError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            raise RepositoryFetchError(f"GitHub returned a non-JSON body for {path}", status_code=502)

    # ------------------------------------------------------------------
    # Repository listing
    # ------------------------------------------------------------------

    async def list_user_repositories(self) -> List[Dict[str, Any]]:
        """Repositories of the authenticated user, most recently updated first."""
        async with self._client() as client:
            data = await self._get_json(client, "/user/repos", sort="updated", per_page=100)
        if not isinstance(data, list):
            raise RepositoryFetchError("Unexpected response when listing repositories", status_code=502)
        return [{field: repo.get(field) for field in _REPOSITORY_FIELDS} for repo in data]

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    async def get_repository_structure(self, owner: str, repo: str, path: str = "") -> List[FileEntry]:
        async with self._client() as client:
            return await self._get_structure(client, owner, repo, path)

    async def _get_structure(self, client: httpx.AsyncClient, owner: str, repo: str, path: str = "") -> List[FileEntry]:
        contents_path = f"/repos/{owner}/{repo}/contents"
        if path:
            contents_path = f"{contents_path}/{path}"
        try:
            data = await self._get_json(client, contents_path)
        except RepositoryFetchError as e:
            logger.warning(f"Error fetching repository structure for {owner}/{repo}: {e}")
            return []

        items = data if isinstance(data, list) else [data]
        return [
            FileEntry(
                name=item.get("name", ""),
                path=item.get("path", ""),
                kind=FileKind.DIR if item.get("type") == "dir" else FileKind.FILE,
                size=item.get("size"),
            )
            for item in items
            if isinstance(item, dict)
        ]

    async def get_file_content(self, owner: str, repo: str, path: str) -> Optional[str]:
        async with self._client() as client:
            return await self._get_file_content(client, owner, repo, path)

    async def _get_file_content(self, client: httpx.AsyncClient, owner: str, repo: str, path: str) -> Optional[str]:
        try:
            data = await self._get_json(client, f"/repos/{owner}/{repo}/contents/{path}")
        except RepositoryFetchError as e:
            if e.status_code != 404:
                logger.warning(f"Error fetching {path} from {owner}/{repo}: {e}")
            return None
        return _decode_content(data) if isinstance(data, dict) else None

    async def get_repository_readme(self, owner: str, repo: str) -> Optional[str]:
        async with self._client() as client:
            return await self._get_readme(client, owner, repo)

    async def _get_readme(self, client: httpx.AsyncClient, owner: str, repo: str) -> Optional[str]:
        try:
            data = await self._get_json(client, f"/repos/{owner}/{repo}/readme")
        except RepositoryFetchError as e:
            if e.status_code != 404:
                logger.warning(f"Error fetching README for {owner}/{repo}: {e}")
            return None
        return _decode_content(data) if isinstance(data, dict) else None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    async def fetch_repository_snapshot(self, owner: str, name: str) -> RepositorySnapshot:
        """Collect metadata, root file tree, README and manifests for one repository."""
        cache_key = f"repo:{repository_key(f'{owner}/{name}')}:{self._token_fingerprint()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Using cached repository data for {owner}/{name}")
            return cached

        async with self._client() as client:
            repo_data = await self._get_json(client, f"/repos/{owner}/{name}")
            file_tree = await self._get_structure(client, owner, name)
            readme = await self._get_readme(client, owner, name)

            manifest_files: Dict[str, str] = {}
            root_files = {entry.name for entry in file_tree if entry.kind == FileKind.FILE}
            for filename in MANIFEST_FILENAMES:
                # Skip files the root listing says are absent, when a listing is available
                if file_tree and filename not in root_files:
                    continue
                content = await self._get_file_content(client, owner, name, filename)
                if content:
                    manifest_files[filename] = content

        snapshot = RepositorySnapshot(
            name=repo_data.get("name") or name,
            full_name=repo_data.get("full_name") or f"{owner}/{name}",
            description=repo_data.get("description"),
            language=repo_data.get("language"),
            stars=repo_data.get("stargazers_count") or 0,
            forks=repo_data.get("forks_count") or 0,
            updated_at=_parse_timestamp(repo_data.get("updated_at")),
            default_branch=repo_data.get("default_branch"),
            file_tree=tuple(file_tree),
            readme=readme,
            manifest_files=manifest_files,
        )
        logger.info(
            f"Fetched repository data for {owner}/{name}: {len(file_tree)} entries, "
            f"readme={'yes' if readme else 'no'}, manifests={sorted(manifest_files)}"
        )
        self.cache.set(cache_key, snapshot, REPO_CACHE_TTL)
        return snapshot
