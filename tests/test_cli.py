"""Tests for the command line front end."""

from __future__ import annotations

from pathlib import Path

import pytest

from delegen.cache import ResponseCache
from delegen.cli import main
from delegen.keys import cache_key, content_digest

SOURCE = "x = 1\ndo_it('set y')\n"


@pytest.fixture
def workspace(monkeypatch, tmp_path):
    for name in ("OPENAI_API_KEY", "DELEGEN_CACHE_DIR", "DELEGEN_MODEL", "OPENAI_BASE_URL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "m.py"
    src.write_text(SOURCE)
    return tmp_path


def _prime(cache_dir: Path, src: Path, text: str) -> str:
    key = cache_key(content_digest(src.read_bytes(), "do_it", "'set y'"), "gpt-4o")
    ResponseCache(cache_dir).store(key, text)
    return key


class TestBuild:
    def test_build_to_stdout_from_cache(self, workspace, capsys):
        _prime(workspace / "gpt_responses", workspace / "m.py", "y = 2\n")
        assert main(["build", "m.py"]) == 0
        assert capsys.readouterr().out == "x = 1\ny = 2\n"

    def test_build_to_file(self, workspace, capsys):
        _prime(workspace / "c", workspace / "m.py", "y = 2\n")
        assert main(["build", "m.py", "-o", "out/m.py", "--cache-dir", "c"]) == 0
        assert (workspace / "out" / "m.py").read_text() == "x = 1\ny = 2\n"
        assert "1 from cache" in capsys.readouterr().err

    def test_missing_credential_reported(self, workspace, capsys):
        assert main(["build", "m.py"]) == 1
        assert "OPENAI_API_KEY" in capsys.readouterr().err

    def test_parse_failure_reported(self, workspace, capsys):
        _prime(workspace / "gpt_responses", workspace / "m.py", "not valid code {{{")
        assert main(["build", "m.py"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("error: ")
        assert "not valid code {{{" in err


class TestCacheCommands:
    def test_list(self, workspace, capsys):
        key = _prime(workspace / "gpt_responses", workspace / "m.py", "y = 2\n")
        assert main(["cache", "list"]) == 0
        assert capsys.readouterr().out.split() == [key]

    def test_rm(self, workspace):
        key = _prime(workspace / "gpt_responses", workspace / "m.py", "y = 2\n")
        assert main(["cache", "rm", key]) == 0
        assert ResponseCache(workspace / "gpt_responses").entries() == []

    def test_rm_unknown_key(self, workspace, capsys):
        assert main(["cache", "rm", "0" * 64]) == 1
        assert "no cache record" in capsys.readouterr().err

    def test_rm_malformed_key(self, workspace, capsys):
        assert main(["cache", "rm", "nope"]) == 1
        assert "Malformed" in capsys.readouterr().err
