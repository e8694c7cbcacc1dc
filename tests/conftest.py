from datetime import datetime, timezone
from typing import List, Optional

import pytest

from errors import ProviderError
from models import FileEntry, FileKind, RepositorySnapshot
from services import doc_service
from services.cache import TTLCache, cache as shared_cache
from services.retry import RetryPolicy


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeProvider:
    """Provider double that fails ``failures`` times (or forever) before succeeding."""

    def __init__(self, name: str, content: str = "# Docs", failures: Optional[int] = 0, log: Optional[List[str]] = None):
        self.name = name
        self.content = content
        self.failures = failures
        self.calls = 0
        self.log = log if log is not None else []

    async def generate(self, snapshot: RepositorySnapshot) -> str:
        self.calls += 1
        self.log.append(self.name)
        if self.failures is None or self.calls <= self.failures:
            raise ProviderError(self.name, "upstream unavailable")
        return self.content


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


def make_snapshot(**overrides) -> RepositorySnapshot:
    fields = dict(
        name="widget",
        full_name="acme/widget",
        description="A widget library",
        language="Python",
        stars=42,
        forks=7,
        updated_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        default_branch="main",
        file_tree=(
            FileEntry(name="src", path="src", kind=FileKind.DIR),
            FileEntry(name="README.md", path="README.md", kind=FileKind.FILE, size=120),
            FileEntry(name="requirements.txt", path="requirements.txt", kind=FileKind.FILE, size=30),
        ),
        readme="# Widget\n\nMakes widgets.",
        manifest_files={"requirements.txt": "httpx\nfastapi\n"},
    )
    fields.update(overrides)
    return RepositorySnapshot(**fields)


@pytest.fixture
def snapshot() -> RepositorySnapshot:
    return make_snapshot()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ttl_cache(clock) -> TTLCache:
    return TTLCache(default_ttl=300, clock=clock)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fast_retry(sleep_recorder):
    """Provider retry policy with the production bounds but no real waiting."""
    from providers.base import is_retryable
    return RetryPolicy(max_attempts=3, base_delay=1.0, retry_on=is_retryable, sleep=sleep_recorder)


@pytest.fixture(autouse=True)
def _reset_shared_state():
    shared_cache.clear()
    doc_service.documentation_status.clear()
    yield
    shared_cache.clear()
    doc_service.documentation_status.clear()
