"""Shared fixtures for the asset finalizer tests."""

import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from asset_finalizer.config import AssetsConfig  # noqa: E402


class FakeMinifier:
    """Collapses whitespace and reports a fixed map, recording every call."""

    def __init__(self, raw_map: str | None = None):
        self.raw_map = raw_map
        self.calls = []

    def compile_with_map(self, source: str, filename: str):
        self.calls.append((source, filename))
        code = " ".join(source.split())
        if self.raw_map is not None:
            return code, self.raw_map
        name = Path(filename).name
        return code, json.dumps(
            {"version": 3, "file": name, "sources": [name], "names": [], "mappings": "AAAA"}
        )


@pytest.fixture
def minifier():
    return FakeMinifier()


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        overrides.setdefault("public_path", tmp_path / "public")
        return AssetsConfig(**overrides)

    return _make
