"""Compression hook that minifies JavaScript and links a fingerprinted source map."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .artifacts import ArtifactWriter
from .config import AssetsConfig
from .errors import MalformedMapError, MissingSourceMapError
from .minifiers import Minifier, build_minifier

TRAILING_SOURCE_MAPPING_URL = re.compile(r"//[#@]\s*sourceMappingURL=[^\s'\"]*\s*\Z")


@dataclass(frozen=True)
class CompressionRequest:
    """A single asset handed over by the host pipeline."""

    data: str
    name: str
    filename: str

    @classmethod
    def from_input(cls, payload: Mapping[str, Any]) -> "CompressionRequest":
        return cls(
            data=payload["data"],
            name=payload["name"],
            filename=str(payload.get("filename") or ""),
        )


@dataclass
class CompressedOutput:
    data: str
    map: dict

    def as_dict(self) -> dict:
        return {"data": self.data, "map": self.map}


def source_mapping_comment(url: str) -> str:
    return f"\n//# sourceMappingURL={url}\n"


def strip_source_mapping_url(code: str) -> str:
    """Remove ``sourceMappingURL`` comments trailing the code, and trailing whitespace.

    Only comments at the very end count; the same text earlier in the code
    (inside a string literal, say) is left alone.
    """
    code = code.rstrip()
    match = TRAILING_SOURCE_MAPPING_URL.search(code)
    while match:
        code = code[: match.start()].rstrip()
        match = TRAILING_SOURCE_MAPPING_URL.search(code)
    return code


def parse_source_map(raw: str, origin: str) -> dict:
    try:
        sourcemap = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedMapError(origin, str(exc)) from exc
    if not isinstance(sourcemap, dict):
        raise MalformedMapError(origin, f"expected a JSON object, got {type(sourcemap).__name__}")
    return sourcemap


class Compressor:
    """Minify JavaScript and publish its source map next to the assets.

    Pre-bundled assets (their logical name contains ``bundle_marker``) are
    already minified and ship their own ``<filename>.map``; only their
    ``sourceMappingURL`` comment is replaced. Everything else goes through
    the minifier, and the generated map either embeds the original source or
    points at a fingerprinted uncompressed copy of it.
    """

    def __init__(
        self,
        config: AssetsConfig | None = None,
        minifier: Optional[Minifier] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or AssetsConfig()
        self.minifier = minifier or build_minifier(self.config)
        self.logger = logger or logging.getLogger(__name__)
        self.writer = ArtifactWriter(self.config, self.logger)

    def __call__(self, payload: Mapping[str, Any]) -> dict:
        return self.compress(CompressionRequest.from_input(payload)).as_dict()

    def is_bundle(self, request: CompressionRequest) -> bool:
        return self.config.bundle_marker in request.name

    def compress(self, request: CompressionRequest) -> CompressedOutput:
        if self.is_bundle(request):
            compressed_js, sourcemap = self._load_bundle(request)
        else:
            compressed_js, sourcemap = self._minify(request)

        sourcemap_url = self.writer.persist(
            request.name,
            json.dumps(sourcemap),
            self.config.sourcemaps_prefix,
            "js.map",
        )

        return CompressedOutput(
            data=compressed_js + source_mapping_comment(sourcemap_url),
            map=sourcemap,
        )

    def compress_legacy(self, request: CompressionRequest) -> str:
        """Return only the minified text, for hooks that expect a plain string."""
        return self.compress(request).data

    def _load_bundle(self, request: CompressionRequest) -> tuple[str, dict]:
        map_path = Path(f"{request.filename}.map")
        try:
            raw = map_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise MissingSourceMapError(str(map_path)) from exc
        sourcemap = parse_source_map(raw, str(map_path))
        return strip_source_mapping_url(request.data), sourcemap

    def _minify(self, request: CompressionRequest) -> tuple[str, dict]:
        compressed_js, raw_map = self.minifier.compile_with_map(request.data, request.filename)
        sourcemap = parse_source_map(raw_map, f"minifier output for {request.name}")

        if self.config.sourcemaps_embed_source:
            sourcemap["sourcesContent"] = [request.data]
        else:
            uncompressed_url = self.writer.persist(
                request.name, request.data, self.config.uncompressed_prefix
            )
            sourcemap["sources"] = [uncompressed_url]

        sourcemap["file"] = f"{request.name}.js"
        return compressed_js, sourcemap
