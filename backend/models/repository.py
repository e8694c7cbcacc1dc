from enum import Enum
from types import MappingProxyType
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Mapping, Optional, Tuple
from datetime import datetime


def repository_key(full_name: str) -> str:
    """GitHub owner and repository names are case-insensitive; key everything on the lowered form."""
    return full_name.strip().lower()


class FileKind(str, Enum):
    FILE = "file"
    DIR = "dir"


class FileEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    kind: FileKind
    size: Optional[int] = None


class RepositorySnapshot(BaseModel):
    """Point-in-time bundle of repository metadata used as generation input."""

    model_config = ConfigDict(frozen=True)

    name: str
    full_name: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    updated_at: Optional[datetime] = None
    default_branch: Optional[str] = None
    file_tree: Tuple[FileEntry, ...] = ()
    readme: Optional[str] = None
    manifest_files: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("manifest_files")
    @classmethod
    def freeze_manifests(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        # Snapshots are shared through the repository cache
        return MappingProxyType(dict(value))

    @property
    def identity(self) -> str:
        return self.full_name or self.name

    @property
    def freshness_marker(self) -> str:
        return self.updated_at.isoformat() if self.updated_at else "unknown"


class RepositoryResponse(BaseModel):
    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    private: bool = False
    html_url: str
    language: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: Optional[datetime] = None
    default_branch: Optional[str] = None
    documentation_status: str = "pending"
    last_generated: Optional[str] = None
