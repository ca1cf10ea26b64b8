"""Exceptions raised while finalizing JavaScript assets."""
from __future__ import annotations


class AssetFinalizerError(Exception):
    """Base class for errors that abort the build of a single asset."""


class MalformedMapError(AssetFinalizerError, ValueError):
    """A source map (generated or sidecar) is not a valid JSON object."""

    def __init__(self, origin: str, reason: str) -> None:
        super().__init__(f"Malformed source map from {origin}: {reason}")
        self.origin = origin


class MissingSourceMapError(AssetFinalizerError, FileNotFoundError):
    """A pre-bundled asset has no sidecar source map next to it."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Expected source map {path} does not exist")
        self.path = path


class MinifierError(AssetFinalizerError):
    """The external minifier could not be run or exited with an error."""
