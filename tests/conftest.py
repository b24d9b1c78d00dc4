from typing import Dict, List

import pytest

from _engine.errors import GatewayError
from _types.model import CacheEntry


class FakeSummarizer:
    """Records every prompt and answers with a fixed-size summary."""

    def __init__(self, summary_length: int = 100):
        self.summary_length = summary_length
        self.prompts: List[str] = []

    def summarize(self, text: str) -> str:
        self.prompts.append(text)
        return f"summary {len(self.prompts)} ".ljust(self.summary_length, "x")

    @property
    def calls(self) -> int:
        return len(self.prompts)


class FailingSummarizer:
    def __init__(self):
        self.calls = 0

    def summarize(self, text: str) -> str:
        self.calls += 1
        raise GatewayError("service unavailable", status_code=503)


class MemoryCache:
    """In-memory stand-in for ContextCache."""

    def __init__(self, store: Dict[str, CacheEntry] = None):
        self.store: Dict[str, CacheEntry] = dict(store or {})
        self.writes = 0

    def read(self) -> Dict[str, CacheEntry]:
        return dict(self.store)

    def write(self, store: Dict[str, CacheEntry]) -> None:
        self.writes += 1
        self.store = dict(store)

    def clear(self) -> None:
        self.store = {}


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def memory_cache():
    return MemoryCache()
