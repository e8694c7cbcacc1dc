from models.repository import FileKind, FileEntry, RepositorySnapshot, RepositoryResponse, repository_key
from models.documentation import (
    ProviderResult, GenerateDocsRequest, GenerateDocsResponse,
    DocumentationStatusResponse, ProvidersResponse
)
