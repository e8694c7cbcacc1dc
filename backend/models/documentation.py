from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Literal

from config import MAX_REPO_PARAM_LENGTH


class ProviderResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    provider: str


class GenerateDocsRequest(BaseModel):
    owner: str = Field(..., max_length=MAX_REPO_PARAM_LENGTH)
    name: str = Field(..., max_length=MAX_REPO_PARAM_LENGTH)
    repository_id: Optional[int] = None
    format: Literal["markdown", "html"] = "markdown"

    @field_validator("owner", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class GenerateDocsResponse(BaseModel):
    success: bool
    timestamp: str
    repository_id: Optional[int] = None
    content: Optional[str] = None
    html: Optional[str] = None
    provider: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    message: Optional[str] = None
    retryable: Optional[bool] = None


class DocumentationStatusResponse(BaseModel):
    repository: str
    status: str
    provider: Optional[str] = None
    error: Optional[str] = None
    last_generated: Optional[str] = None
    updated_at: str


class ProvidersResponse(BaseModel):
    available: List[str]
    current: Optional[str] = None
