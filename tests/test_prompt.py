"""Tests for the entry-point table and message templates."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from delegen.exceptions import UnknownEntryPoint
from delegen.prompt import (
    ENTRY_POINTS,
    PRIMARY_ENGLISH,
    PRIMARY_JAPANESE,
    build_messages,
    build_system_prompt,
    build_user_prompt,
    language_for,
)
from delegen.types import CallSite, Invocation


def _invocation(prompt: str | None, entry_point: str = PRIMARY_ENGLISH) -> Invocation:
    site = CallSite(path=Path("m.py"), entry_point=entry_point, payload="", start=(1, 0), end=(1, 2))
    return Invocation(site=site, source=b"def main():\n    pass\n\n", prompt=prompt)


class TestEntryPoints:
    def test_primary_names(self):
        assert ENTRY_POINTS[PRIMARY_ENGLISH] == "en"
        assert ENTRY_POINTS[PRIMARY_JAPANESE] == "ja"

    def test_only_two_languages(self):
        assert set(ENTRY_POINTS.values()) == {"en", "ja"}

    @pytest.mark.parametrize("name", ["do_it", "abracadabra", "deliver_it"])
    def test_english_aliases(self, name):
        assert language_for(name) == "en"

    @pytest.mark.parametrize("name", ["やって", "奇跡を起こして", "やり遂げて"])
    def test_japanese_aliases(self, name):
        assert language_for(name) == "ja"

    def test_names_are_identifiers(self):
        assert all(name.isidentifier() for name in ENTRY_POINTS)

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ENTRY_POINTS["new"] = "en"  # type: ignore[index]

    def test_unknown_name(self):
        with pytest.raises(UnknownEntryPoint):
            language_for("print")


class TestSystemPrompt:
    def test_embeds_entry_point(self):
        assert "`magic`" in build_system_prompt("magic")

    def test_aliases_share_template(self):
        a = build_system_prompt("do_it").replace("do_it", "X")
        b = build_system_prompt("magic").replace("magic", "X")
        assert a == b

    def test_japanese_template(self):
        assert "日本語のコメント" in build_system_prompt("頼む")


class TestUserPrompt:
    def test_file_only(self):
        assert build_user_prompt(_invocation(None)) == "def main():\n    pass\n\n"

    def test_file_then_prompt(self):
        assert build_user_prompt(_invocation("Add fib.")) == "def main():\n    pass\n\nAdd fib."

    def test_messages_roles(self):
        messages = build_messages(_invocation("Add fib."))
        assert [m["role"] for m in messages] == ["system", "user"]

    def test_messages_follow_invocation_language(self):
        invocation = replace(_invocation("Add fib."), language="ja")
        system = build_messages(invocation)[0]["content"]
        assert "日本語のコメント" in system
        assert f"`{PRIMARY_ENGLISH}`" in system
