"""Run a directory of JavaScript assets through the compressor."""
from __future__ import annotations

import logging
import pathlib
import shutil
from typing import List

from .compressor import CompressionRequest, Compressor

logger = logging.getLogger(__name__)


def copy_app(source: pathlib.Path, target: pathlib.Path) -> None:
    if target.exists():
        shutil.rmtree(target)
    shutil.copytree(source, target)


def logical_name(path: pathlib.Path, root: pathlib.Path) -> str:
    """``root/admin/app.js`` becomes ``admin/app``."""
    return path.relative_to(root).with_suffix("").as_posix()


def compress_js(path: pathlib.Path, root: pathlib.Path, compressor: Compressor) -> pathlib.Path:
    """Write the compressed asset to ``<name>.min.js`` and drop the original."""
    request = CompressionRequest(
        data=path.read_text(encoding="utf-8"),
        name=logical_name(path, root),
        filename=str(path),
    )
    dest = path.with_suffix(".min.js")
    dest.write_text(compressor.compress(request).data, encoding="utf-8")
    path.unlink()
    return dest


def build_assets(
    source_dir: pathlib.Path,
    build_dir: pathlib.Path,
    compressor: Compressor,
) -> List[pathlib.Path]:
    copy_app(source_dir, build_dir)
    written: List[pathlib.Path] = []
    for path in sorted(build_dir.rglob("*.js")):
        if not path.is_file() or path.name.endswith(".min.js"):
            continue
        written.append(compress_js(path, build_dir, compressor))
        logger.info(f"Compressed {path}")
    return written
