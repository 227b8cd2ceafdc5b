"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the src directory is on the path when the package is not installed.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from delegen.config import DelegenConfig  # noqa: E402
from delegen.types import GenerationRequest  # noqa: E402


class RecordingClient:
    """A GenerationClient that returns scripted responses and records calls."""

    def __init__(self, responses: list[str] | None = None, default: str = "pass\n") -> None:
        self._responses = list(responses or [])
        self._default = default
        self.requests: list[GenerationRequest] = []

    def complete(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        return self._responses.pop(0) if self._responses else self._default


@pytest.fixture
def config(tmp_path: Path) -> DelegenConfig:
    return DelegenConfig(cache_dir=tmp_path / "gpt_responses")


@pytest.fixture
def make_client() -> type[RecordingClient]:
    return RecordingClient
