"""Content-addressed side artifacts (source maps and uncompressed sources)."""
from __future__ import annotations

import gzip
import hashlib
import io
import logging
import os
import pathlib
import tempfile
import zlib
from typing import Optional, Union

from .config import AssetsConfig

logger = logging.getLogger(__name__)


def digest(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def _as_bytes(content: Union[str, bytes]) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return content


def public_filename(*segments: str) -> str:
    """Join URL path segments with single slashes, dropping empty ones.

    A leading slash on the first segment is preserved.
    """
    parts = [segment.strip("/") for segment in segments if segment and segment.strip("/")]
    joined = "/".join(parts)
    if segments and segments[0].startswith("/"):
        return f"/{joined}"
    return joined


def write_atomic(path: pathlib.Path, data: bytes) -> None:
    """Write through a temporary sibling so ``path`` never holds partial content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _holds(path: pathlib.Path, data: bytes) -> bool:
    try:
        return path.read_bytes() == data
    except FileNotFoundError:
        return False


def _gzip_holds(gz_path: pathlib.Path, data: bytes) -> bool:
    try:
        return gzip.decompress(gz_path.read_bytes()) == data
    except (OSError, EOFError, zlib.error):
        return False


def gzip_file(path: pathlib.Path, log: Optional[logging.Logger] = None) -> pathlib.Path:
    """Write ``<path>.gz`` unless a sibling that decompresses to ``path`` exists.

    The gzip header carries the source file's name and modification time.
    """
    log = log or logger
    gz_path = path.with_name(path.name + ".gz")
    data = path.read_bytes()
    if _gzip_holds(gz_path, data):
        log.debug(f"{gz_path} already exists", extra={"event": "sibling_exists", "path": str(gz_path)})
        return gz_path

    log.info(f"Writing {gz_path}", extra={"event": "sibling_written", "path": str(gz_path)})
    mtime = int(path.stat().st_mtime)
    buffer = io.BytesIO()
    with gzip.GzipFile(filename=str(path), mode="wb", fileobj=buffer, mtime=mtime) as dst:
        dst.write(data)
    write_atomic(gz_path, buffer.getvalue())
    return gz_path


class ArtifactWriter:
    """Persist content under ``<prefix>/<name>-<digest>.<extension>`` and return its URL.

    An artifact already on disk is kept only when its bytes match; anything
    else (an interrupted earlier write, say) is replaced.
    """

    def __init__(self, config: AssetsConfig, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def filename_for(self, name: str, content: Union[str, bytes], prefix: str, extension: str = "js") -> str:
        data = _as_bytes(content)
        return public_filename(self.config.prefix, prefix, f"{name}-{digest(data)}.{extension}")

    def path_for(self, filename: str) -> pathlib.Path:
        return pathlib.Path(self.config.public_path) / filename.lstrip("/")

    def persist(self, name: str, content: Union[str, bytes], prefix: str, extension: str = "js") -> str:
        data = _as_bytes(content)
        filename = self.filename_for(name, data, prefix, extension)
        file_path = self.path_for(filename)

        if _holds(file_path, data):
            self.logger.debug(
                f"{file_path} already exists", extra={"event": "artifact_exists", "path": str(file_path)}
            )
        else:
            self.logger.info(f"Writing {file_path}", extra={"event": "artifact_written", "path": str(file_path)})
            write_atomic(file_path, data)

        if self.config.gzip_enabled:
            gzip_file(file_path, self.logger)

        return self.config.sourcemaps_url_root.resolve(filename)
