"""Tests for the persistent response cache."""

from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from delegen.cache import CacheStats, ResponseCache
from delegen.exceptions import CacheIoFailure

KEY_A = "a" * 64
KEY_B = "b" * 64


class TestResponseCacheBasic:
    def test_store_and_lookup(self, tmp_path: Path):
        cache = ResponseCache(tmp_path / "c")
        cache.store(KEY_A, "def f():\n    return 1\n")
        assert cache.lookup(KEY_A) == "def f():\n    return 1\n"

    def test_lookup_miss_returns_none(self, tmp_path: Path):
        assert ResponseCache(tmp_path).lookup(KEY_A) is None

    def test_record_layout(self, tmp_path: Path):
        cache = ResponseCache(tmp_path / "c")
        path = cache.store(KEY_A, "x = 1\r\n")
        assert path == tmp_path / "c" / KEY_A
        assert path.read_bytes() == b"x = 1\r\n"

    def test_directory_created_on_store(self, tmp_path: Path):
        cache = ResponseCache(tmp_path / "deep" / "dir")
        cache.store(KEY_A, "x")
        assert (tmp_path / "deep" / "dir").is_dir()

    def test_persists_across_instances(self, tmp_path: Path):
        ResponseCache(tmp_path).store(KEY_A, "kept")
        assert ResponseCache(tmp_path).lookup(KEY_A) == "kept"

    def test_existing_record_not_overwritten(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        cache.store(KEY_A, "first")
        cache.store(KEY_A, "second")
        assert cache.lookup(KEY_A) == "first"

    def test_no_temp_files_left(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        cache.store(KEY_A, "x")
        assert os.listdir(tmp_path) == [KEY_A]

    def test_malformed_key_rejected(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        with pytest.raises(ValueError):
            cache.lookup("../etc/passwd")
        with pytest.raises(ValueError):
            cache.store("ABC", "x")


class TestResponseCacheOperator:
    def test_entries_sorted(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        cache.store(KEY_B, "b")
        cache.store(KEY_A, "a")
        (tmp_path / "README").write_text("not a record")
        assert cache.entries() == [KEY_A, KEY_B]

    def test_entries_of_missing_directory(self, tmp_path: Path):
        assert ResponseCache(tmp_path / "nope").entries() == []

    def test_discard(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        cache.store(KEY_A, "a")
        assert cache.discard(KEY_A) is True
        assert cache.lookup(KEY_A) is None
        assert cache.discard(KEY_A) is False


class TestResponseCacheStats:
    def test_initial_stats(self, tmp_path: Path):
        assert ResponseCache(tmp_path).stats == CacheStats()

    def test_hit_and_miss_tracking(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        cache.lookup(KEY_A)
        cache.store(KEY_A, "a")
        cache.lookup(KEY_A)
        cache.lookup(KEY_A)
        s = cache.stats
        assert s.hits == 2
        assert s.misses == 1
        assert s.size == 1


class TestResponseCacheFailures:
    def test_unwritable_directory(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("in the way")
        cache = ResponseCache(blocker / "sub")
        with pytest.raises(CacheIoFailure) as info:
            cache.store(KEY_A, "x")
        assert KEY_A in info.value.path

    def test_unreadable_record(self, tmp_path: Path):
        (tmp_path / KEY_A).mkdir()
        with pytest.raises(CacheIoFailure):
            ResponseCache(tmp_path).lookup(KEY_A)


class TestResponseCacheConcurrency:
    def test_concurrent_writes_to_different_keys(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        keys = [f"{i:064x}" for i in range(32)]

        def write(key: str) -> None:
            cache.store(key, f"value {key}\n" * 100)

        threads = [threading.Thread(target=write, args=(k,)) for k in keys]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for key in keys:
            assert cache.lookup(key) == f"value {key}\n" * 100
        assert cache.entries() == sorted(keys)

    def test_concurrent_writes_to_same_key_leave_complete_record(self, tmp_path: Path):
        cache = ResponseCache(tmp_path)
        values = [f"{i}" * 1000 for i in range(8)]
        threads = [threading.Thread(target=cache.store, args=(KEY_A, v)) for v in values]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert cache.lookup(KEY_A) in values
        assert os.listdir(tmp_path) == [KEY_A]
