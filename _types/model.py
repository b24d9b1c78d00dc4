from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, PositiveInt


class FileStatus(str, Enum):
    ADDED = "Added"
    MODIFIED = "Modified"
    DELETED = "Deleted"

    @classmethod
    def from_git(cls, letter: str) -> "FileStatus":
        """Map a git name-status letter (A, M, D, R100, ...) to a FileStatus."""
        code = (letter or "").strip()[:1].upper()
        if code == "A":
            return cls.ADDED
        if code == "D":
            return cls.DELETED
        return cls.MODIFIED


class PromptType(str, Enum):
    ANALYZE = "analyze"
    CREATE = "create"


class ChangedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    diff: str
    status: FileStatus = FileStatus.MODIFIED


class CacheEntry(BaseModel):
    summary: str
    timestamp: int


class Budget(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_token_limit: int
    input_share_fraction: float
    chars_per_token: int
    max_chars_per_chunk: int


class ContextOptions(BaseModel):
    model: Optional[str] = None
    max_chars: Optional[int] = None
    max_combined_chars: Optional[int] = None
    input_share_fraction: Optional[float] = None
    chars_per_token: Optional[int] = None
    max_workers: int = 1


class CommitInfo(BaseModel):
    sha_full: str
    sha_short: str
    date: str
    message: str


class AppConfig(BaseModel):
    OPENAI_API_BASEURL: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_API_MODEL: str
    OPENAI_RESPONSE_LANGUAGE: str
    OPENAI_CHUNK_SIZE_CHARS: Optional[PositiveInt] = None
    OPENAI_COMBINED_SIZE_CHARS: Optional[PositiveInt] = None
