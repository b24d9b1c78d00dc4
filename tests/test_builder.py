"""
Tests for the context builder: pass-through, caching, chunked summarization
and per-file fallback.
"""

import os

import pytest

from _engine.context.builder import (
    CACHED_SUMMARY_MARKER,
    FRESH_SUMMARY_MARKER,
    build_context,
    cache_key,
)
from _engine.context.cache import ContextCache
from _engine.context.hasher import hash_content
from _engine.errors import InvalidArgumentError
from _types.model import CacheEntry, ChangedFile, ContextOptions, FileStatus, PromptType

from conftest import FailingSummarizer, FakeSummarizer, MemoryCache


def _options(max_chars=1000, max_combined_chars=None, max_workers=1):
    return ContextOptions(
        model="gpt-4o-mini",
        max_chars=max_chars,
        max_combined_chars=max_combined_chars,
        max_workers=max_workers,
    )


class TestPassThrough:
    def test_small_diff_is_unchanged(self, summarizer, memory_cache):
        files = [ChangedFile(filename="a.js", diff="+x", status=FileStatus.ADDED)]

        result = build_context(files, PromptType.ANALYZE, summarizer, memory_cache, _options(1000))

        assert result == files
        assert result[0].diff == "+x"
        assert summarizer.calls == 0
        assert memory_cache.writes == 0

    def test_diff_exactly_at_budget_is_unchanged(self, summarizer, memory_cache):
        files = [ChangedFile(filename="a.py", diff="y" * 1000)]
        result = build_context(files, PromptType.ANALYZE, summarizer, memory_cache, _options(1000))
        assert result[0].diff == "y" * 1000
        assert summarizer.calls == 0

    def test_empty_input(self, summarizer, memory_cache):
        assert build_context([], PromptType.ANALYZE, summarizer, memory_cache, _options()) == []


class TestSummarization:
    def test_scenario_chunk_and_compress(self, memory_cache):
        summarizer = FakeSummarizer(summary_length=3000)
        diff = "d" * 25000
        files = [ChangedFile(filename="big.py", diff=diff)]

        result = build_context(
            files, PromptType.ANALYZE, summarizer, memory_cache, _options(8000, 8000)
        )

        # 4 chunk summaries of 3000 chars joined exceed 8000, so one more call
        assert summarizer.calls == 5
        assert all(p.endswith("d" * 1000) for p in summarizer.prompts[:4])
        final = summarizer.prompts[-1]
        assert "summary 1" in final and "summary 4" in final

        key = f"big.py:{hash_content(diff)}"
        assert list(memory_cache.store) == [key]
        summary = memory_cache.store[key].summary
        assert summary.startswith("summary 5")
        assert result[0].diff == FRESH_SUMMARY_MARKER.format(summary=summary)
        assert result[0].filename == "big.py"
        assert result[0].status == files[0].status

    def test_second_call_hits_cache(self, memory_cache):
        summarizer = FakeSummarizer(summary_length=3000)
        files = [ChangedFile(filename="big.py", diff="d" * 25000)]
        build_context(files, PromptType.ANALYZE, summarizer, memory_cache, _options(8000, 8000))

        again = FakeSummarizer()
        result = build_context(files, PromptType.ANALYZE, again, memory_cache, _options(8000, 8000))

        assert again.calls == 0
        summary = memory_cache.store[cache_key(files[0])].summary
        assert result[0].diff == CACHED_SUMMARY_MARKER.format(summary=summary)

    def test_short_combined_summary_is_not_compressed(self, memory_cache):
        summarizer = FakeSummarizer(summary_length=50)
        files = [ChangedFile(filename="big.py", diff="d" * 2500)]

        result = build_context(files, PromptType.ANALYZE, summarizer, memory_cache, _options(1000))

        assert summarizer.calls == 3
        assert "summary 1" in result[0].diff
        assert "summary 3" in result[0].diff

    def test_chunk_order_is_preserved(self, memory_cache):
        summarizer = FakeSummarizer(summary_length=10)
        diff = "A" * 100 + "B" * 100 + "C" * 100
        build_context(
            [ChangedFile(filename="f", diff=diff)],
            PromptType.ANALYZE,
            summarizer,
            memory_cache,
            _options(100),
        )
        assert [p[-1] for p in summarizer.prompts] == ["A", "B", "C"]
        stored = next(iter(memory_cache.store.values())).summary
        assert stored.index("summary 1") < stored.index("summary 2") < stored.index("summary 3")

    def test_input_objects_are_not_mutated(self, summarizer, memory_cache):
        original = ChangedFile(filename="big.py", diff="z" * 5000)
        result = build_context([original], PromptType.CREATE, summarizer, memory_cache, _options(1000))
        assert original.diff == "z" * 5000
        assert result[0] is not original

    def test_existing_cache_entry_is_used(self, summarizer):
        file = ChangedFile(filename="a.py", diff="q" * 10)
        cache = MemoryCache({cache_key(file): CacheEntry(summary="earlier", timestamp=1)})

        result = build_context([file], PromptType.ANALYZE, summarizer, cache, _options(1000))

        assert result[0].diff == "/* SUMMARY (cached): earlier */\n"
        assert summarizer.calls == 0

    def test_persists_to_disk_cache(self, tmp_path, summarizer):
        cache = ContextCache(str(tmp_path / ".cache" / "context.json"))
        files = [ChangedFile(filename="big.py", diff="d" * 3000)]

        build_context(files, PromptType.ANALYZE, summarizer, cache, _options(1000))
        reloaded = ContextCache(str(tmp_path / ".cache" / "context.json")).read()

        assert cache_key(files[0]) in reloaded

    def test_unreadable_disk_cache_does_not_block(self, tmp_path, summarizer):
        path = tmp_path / "context.json"
        path.write_bytes(b"\xff\xfe not utf-8")
        files = [ChangedFile(filename="a.py", diff="+x")]

        result = build_context(files, PromptType.ANALYZE, summarizer, ContextCache(str(path)), _options(1000))

        assert result[0].diff == "+x"

    def test_summary_is_used_when_it_cannot_be_persisted(self, tmp_path):
        class SurrogateSummarizer:
            def summarize(self, text):
                return "bad \ud800 summary"

        cache = ContextCache(str(tmp_path / "context.json"))
        files = [ChangedFile(filename="big.py", diff="d" * 3000)]

        result = build_context(files, PromptType.ANALYZE, SurrogateSummarizer(), cache, _options(1000))

        assert result[0].diff.startswith("/* SUMMARY")
        assert os.listdir(tmp_path) == []


class TestFallback:
    def test_failing_gateway_keeps_originals(self, memory_cache):
        failing = FailingSummarizer()
        files = [
            ChangedFile(filename="small.py", diff="+ok"),
            ChangedFile(filename="big1.py", diff="1" * 5000),
            ChangedFile(filename="big2.py", diff="2" * 5000, status=FileStatus.DELETED),
        ]

        result = build_context(files, PromptType.ANALYZE, failing, memory_cache, _options(1000))

        assert result == files
        assert [f.filename for f in result] == ["small.py", "big1.py", "big2.py"]
        assert failing.calls == 2
        assert memory_cache.store == {}

    def test_one_failure_does_not_stop_other_files(self, memory_cache):
        class FailsOnFirstFile(FakeSummarizer):
            def summarize(self, text):
                if "1111" in text:
                    raise RuntimeError("boom")
                return super().summarize(text)

        summarizer = FailsOnFirstFile(summary_length=20)
        files = [
            ChangedFile(filename="one.py", diff="1" * 3000),
            ChangedFile(filename="two.py", diff="2" * 3000),
        ]

        result = build_context(files, PromptType.ANALYZE, summarizer, memory_cache, _options(1000))

        assert result[0] == files[0]
        assert result[1].diff.startswith("/* SUMMARY:")
        assert list(memory_cache.store) == [cache_key(files[1])]

    def test_invalid_budget_aborts(self, summarizer, memory_cache):
        with pytest.raises(InvalidArgumentError):
            build_context(
                [ChangedFile(filename="a", diff="x")],
                PromptType.ANALYZE,
                summarizer,
                memory_cache,
                ContextOptions(model="gpt-4o", input_share_fraction=2.0),
            )

    def test_invalid_combined_threshold_aborts(self, summarizer, memory_cache):
        with pytest.raises(InvalidArgumentError):
            build_context(
                [ChangedFile(filename="a", diff="x")],
                PromptType.ANALYZE,
                summarizer,
                memory_cache,
                _options(1000, max_combined_chars=0),
            )


class TestParallel:
    def test_workers_keep_order_and_all_cache_entries(self, memory_cache):
        summarizer = FakeSummarizer(summary_length=20)
        files = [ChangedFile(filename=f"f{i}.py", diff=str(i) * 2500) for i in range(8)]
        files.insert(3, ChangedFile(filename="tiny.py", diff="+1"))

        result = build_context(
            files, PromptType.ANALYZE, summarizer, memory_cache, _options(1000, max_workers=4)
        )

        assert [f.filename for f in result] == [f.filename for f in files]
        assert result[3].diff == "+1"
        assert len(memory_cache.store) == 8
        assert memory_cache.writes == 8
