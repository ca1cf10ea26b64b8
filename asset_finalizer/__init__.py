"""Minify JavaScript assets and publish fingerprinted source maps."""

from .artifacts import ArtifactWriter
from .compressor import CompressedOutput, CompressionRequest, Compressor
from .config import AssetsConfig, CustomRoot, FixedRoot, IdentityRoot, UrlRoot
from .errors import AssetFinalizerError, MalformedMapError, MinifierError, MissingSourceMapError
from .minifiers import Minifier, RjsminMinifier, TerserMinifier, build_minifier

__all__ = [
    "ArtifactWriter",
    "AssetFinalizerError",
    "AssetsConfig",
    "CompressedOutput",
    "CompressionRequest",
    "Compressor",
    "CustomRoot",
    "FixedRoot",
    "IdentityRoot",
    "MalformedMapError",
    "Minifier",
    "MinifierError",
    "MissingSourceMapError",
    "RjsminMinifier",
    "TerserMinifier",
    "UrlRoot",
    "build_minifier",
]
