"""JavaScript minifiers that return code together with a source map.

The compressor treats minification as an opaque capability: anything with a
``compile_with_map(source, filename)`` method returning ``(code, map_json)``
can be plugged in.
"""
from __future__ import annotations

import json
import os
import pathlib
import subprocess
import tempfile
from typing import Any, Dict, List, Mapping, Protocol, Tuple

import rjsmin

from .config import DEFAULT_TERSER_OPTIONS, AssetsConfig
from .errors import MinifierError


class Minifier(Protocol):
    def compile_with_map(self, source: str, filename: str) -> Tuple[str, str]:
        ...


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value)


def _sub_options(value: Mapping[str, Any]) -> str:
    return ",".join(f"{name}={_format_value(sub)}" for name, sub in value.items())


def terser_args(options: Mapping[str, Any]) -> List[str]:
    """Translate pass-through terser options into CLI flags.

    ``compress``, ``mangle`` and ``format`` accept ``True``, ``False`` or a
    dict of sub-options. ``output`` is the older name of ``format``; both are
    merged into one ``--format`` flag, ``format`` winning on conflicts.
    ``extra_args`` is appended verbatim.
    """
    args: List[str] = []
    for key, flag in (("compress", "--compress"), ("mangle", "--mangle")):
        value = options.get(key)
        if value is None or value is False:
            continue
        args.append(flag)
        if isinstance(value, Mapping) and value:
            args.append(_sub_options(value))

    format_values = [options.get(key) for key in ("output", "format")]
    enabled = [value for value in format_values if value is not None and value is not False]
    if enabled:
        merged: Dict[str, Any] = {}
        for value in enabled:
            if isinstance(value, Mapping):
                merged.update(value)
        args.append("--format")
        if merged:
            args.append(_sub_options(merged))

    args.extend(str(arg) for arg in options.get("extra_args", ()))
    return args


class TerserMinifier:
    """Minify with the ``terser`` CLI.

    The binary is looked up on ``PATH`` unless ``binary`` or ``TERSER_BIN``
    say otherwise. Options are layered over ``compress`` and ``mangle``
    being on. Source text is written into a scratch directory under the
    original file's basename so the generated map points at that name; the
    output goes to a separate directory.
    """

    def __init__(self, options: Mapping[str, Any] | None = None, binary: str | None = None) -> None:
        self.options = {**DEFAULT_TERSER_OPTIONS, **(options or {})}
        self.binary = binary or os.getenv("TERSER_BIN") or "terser"

    def compile_with_map(self, source: str, filename: str) -> Tuple[str, str]:
        source_name = pathlib.Path(filename).name or "input.js"
        with tempfile.TemporaryDirectory(prefix="asset-finalizer-") as workdir:
            source_dir = pathlib.Path(workdir) / "src"
            output_dir = pathlib.Path(workdir) / "out"
            source_dir.mkdir()
            output_dir.mkdir()
            (source_dir / source_name).write_text(source, encoding="utf-8")
            output_path = output_dir / source_name
            args = [
                self.binary,
                source_name,
                *terser_args(self.options),
                "--source-map",
                f"filename={json.dumps(source_name)}",
                "--output",
                str(output_path),
            ]
            try:
                result = subprocess.run(args, cwd=source_dir, capture_output=True, text=True)
            except FileNotFoundError as exc:
                raise MinifierError(f"terser executable not found: {self.binary}") from exc
            if result.returncode != 0:
                raise MinifierError(
                    f"terser exited with status {result.returncode} for {filename}: {result.stderr.strip()}"
                )
            code = output_path.read_text(encoding="utf-8")
            map_path = output_path.with_name(f"{output_path.name}.map")
            if not map_path.exists():
                raise MinifierError(f"terser did not produce a source map for {filename}")
            return code, map_path.read_text(encoding="utf-8")


class RjsminMinifier:
    """Pure Python fallback built on ``rjsmin``.

    rjsmin does not track positions, so the map attributes the whole output
    to the source file without any segment mappings.
    """

    def compile_with_map(self, source: str, filename: str) -> Tuple[str, str]:
        code = rjsmin.jsmin(source)
        source_name = pathlib.Path(filename).name
        sourcemap = {
            "version": 3,
            "file": source_name,
            "sources": [source_name],
            "names": [],
            "mappings": "",
        }
        return code, json.dumps(sourcemap)


def build_minifier(config: AssetsConfig) -> Minifier:
    if config.minifier == "rjsmin":
        return RjsminMinifier()
    return TerserMinifier(config.terser)
