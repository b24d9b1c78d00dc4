"""
Reduce a list of changed files to a context that fits the model window.

Small diffs pass through untouched. Oversized diffs are chunked, each chunk
is summarized, and the joined summaries are compressed once more when they
are still too long. Summaries are cached on disk by filename and diff hash.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from _data.prompts import CHUNK_SUMMARY_PROMPT, COMBINE_SUMMARY_PROMPT
from _engine.console import console, warn
from _engine.context.budget import (
    DEFAULT_CHARS_PER_TOKEN,
    DEFAULT_INPUT_SHARE_FRACTION,
    compute_budget,
)
from _engine.context.cache import ContextCache
from _engine.context.chunker import chunk_text
from _engine.context.hasher import hash_content
from _engine.errors import InvalidArgumentError
from _types.model import CacheEntry, ChangedFile, ContextOptions, PromptType

CACHED_SUMMARY_MARKER = "/* SUMMARY (cached): {summary} */\n"
FRESH_SUMMARY_MARKER = "/* SUMMARY:\n{summary}\n*/\n"
SUMMARY_SEPARATOR = "\n\n"


def cache_key(file: ChangedFile) -> str:
    return f"{file.filename}:{hash_content(file.diff)}"


class _ContextRun:
    """State shared by the files of one build_context call."""

    def __init__(self, summarizer, cache: ContextCache, max_chars: int, max_combined_chars: int):
        self.summarizer = summarizer
        self.cache = cache
        self.max_chars = max_chars
        self.max_combined_chars = max_combined_chars
        self.store: Dict[str, CacheEntry] = cache.read()
        self._lock = threading.Lock()

    def lookup(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self.store.get(key)

    def remember(self, key: str, summary: str) -> None:
        # Flushed on every new entry so a crash keeps the finished files.
        with self._lock:
            self.store[key] = CacheEntry(summary=summary, timestamp=int(time.time() * 1000))
            self.cache.write(dict(self.store))

    def summarize_diff(self, file: ChangedFile) -> str:
        chunks = chunk_text(file.diff, self.max_chars)
        console.print(
            f"[info]Summarizing [highlight]{file.filename}[/highlight] "
            f"({len(file.diff):,} chars, {len(chunks)} chunk(s))...[/info]"
        )
        summaries = [
            self.summarizer.summarize(CHUNK_SUMMARY_PROMPT.format(chunk=chunk))
            for chunk in chunks
        ]
        combined = SUMMARY_SEPARATOR.join(summaries)

        if len(combined) > self.max_combined_chars:
            combined = self.summarizer.summarize(
                COMBINE_SUMMARY_PROMPT.format(summaries=combined)
            )
        return combined

    def process(self, file: ChangedFile) -> ChangedFile:
        key = cache_key(file)
        entry = self.lookup(key)
        if entry is not None:
            return file.model_copy(
                update={"diff": CACHED_SUMMARY_MARKER.format(summary=entry.summary)}
            )

        if len(file.diff or "") <= self.max_chars:
            return file

        summary = self.summarize_diff(file)
        self.remember(key, summary)
        return file.model_copy(update={"diff": FRESH_SUMMARY_MARKER.format(summary=summary)})

    def process_or_fallback(self, file: ChangedFile) -> ChangedFile:
        try:
            return self.process(file)
        except InvalidArgumentError:
            raise
        except Exception as e:
            warn(f"Failed to build context for {file.filename}: {e}. Using the original diff.")
            return file


def build_context(
    files: Sequence[ChangedFile],
    prompt_type: PromptType,
    summarizer,
    cache: ContextCache,
    options: Optional[ContextOptions] = None,
) -> List[ChangedFile]:
    """
    Build a bounded context for the given files.

    Args:
        files: Changed files, in the order they should appear in the prompt.
        prompt_type: Prompt the context is built for. Not part of the cache key.
        summarizer: Object exposing ``summarize(text) -> str``.
        cache: Store for summaries, read once per call.
        options: Model and budget overrides, and the worker count.

    Returns:
        List[ChangedFile]: one entry per input file, same order. Each diff is
        the original, a cached summary block or a fresh summary block.

    Raises:
        InvalidArgumentError: for invalid budget options.
    """
    options = options or ContextOptions()
    budget = compute_budget(
        options.model,
        input_share_fraction=(
            DEFAULT_INPUT_SHARE_FRACTION
            if options.input_share_fraction is None
            else options.input_share_fraction
        ),
        chars_per_token=(
            DEFAULT_CHARS_PER_TOKEN if options.chars_per_token is None else options.chars_per_token
        ),
        override=options.max_chars,
    )
    max_combined_chars = options.max_combined_chars
    if max_combined_chars is None:
        max_combined_chars = budget.max_chars_per_chunk
    elif max_combined_chars <= 0:
        raise InvalidArgumentError(
            f"max_combined_chars must be positive, got {max_combined_chars!r}"
        )

    if not files:
        return []

    run = _ContextRun(summarizer, cache, budget.max_chars_per_chunk, max_combined_chars)

    if options.max_workers <= 1 or len(files) == 1:
        return [run.process_or_fallback(file) for file in files]

    results: List[Optional[ChangedFile]] = [None] * len(files)
    with ThreadPoolExecutor(max_workers=options.max_workers) as executor:
        future_to_index = {
            executor.submit(run.process_or_fallback, file): index
            for index, file in enumerate(files)
        }
        for future in as_completed(future_to_index):
            results[future_to_index[future]] = future.result()
    return results
