import json
import os
import tempfile
from typing import Dict, Optional

from pydantic import ValidationError

from _engine.console import warn
from _engine.errors import CacheIOError
from _types.model import CacheEntry

DEFAULT_CACHE_DIR = ".cache"
DEFAULT_CACHE_FILE = "context.json"


class ContextCache:
    """
    Summaries of large diffs persisted as one JSON object on disk.

    Every failure is reported as a warning and degrades to an empty store or
    a no-op; callers never see an exception from this class.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or os.path.join(os.getcwd(), DEFAULT_CACHE_DIR, DEFAULT_CACHE_FILE)

    def read(self) -> Dict[str, CacheEntry]:
        try:
            return self._load()
        except CacheIOError as e:
            warn(f"Unable to read context cache, starting empty: {e}")
            return {}

    def write(self, store: Dict[str, CacheEntry]) -> None:
        try:
            self._dump(store)
        except CacheIOError as e:
            warn(f"Unable to write context cache: {e}")

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            warn(f"Unable to clear context cache: {e}")

    def _load(self) -> Dict[str, CacheEntry]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CacheIOError(str(e)) from e

        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheIOError(f"{self.path} is corrupted ({e})") from e
        if not isinstance(data, dict):
            raise CacheIOError(f"{self.path} does not hold a JSON object")

        store: Dict[str, CacheEntry] = {}
        for key, value in data.items():
            try:
                store[key] = CacheEntry.model_validate(value)
            except ValidationError:
                warn(f"Skipping malformed cache entry '{key}'")
        return store

    def _dump(self, store: Dict[str, CacheEntry]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        payload = {key: entry.model_dump() for key, entry in store.items()}
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".context-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise CacheIOError(str(e)) from e
