"""Command line interface for compressing a directory of JavaScript assets."""
from __future__ import annotations

import argparse
import logging
import os
import pathlib
from typing import Any, Dict

from .builder import build_assets
from .compressor import Compressor
from .config import AssetsConfig, parse_bool
from .errors import AssetFinalizerError


def _optional_bool(value: str) -> bool:
    parsed = parse_bool(value)
    if parsed is not None:
        return parsed
    raise argparse.ArgumentTypeError(f"expected a boolean, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Minify JavaScript assets and publish fingerprinted source maps. "
            "Unset options fall back to the ASSETS_* environment variables."
        )
    )
    parser.add_argument("source", help="Directory containing the JavaScript assets")
    parser.add_argument(
        "--build-dir",
        default=os.getenv("ASSETS_BUILD_DIR", "build"),
        help="Directory the compressed assets are written to (replaced on every run)",
    )
    parser.add_argument("--public-path", default=None, help="Root directory served to browsers")
    parser.add_argument("--prefix", default=None, help="Assets prefix below the public path")
    parser.add_argument("--sourcemaps-prefix", default=None, help="Directory for source maps below the prefix")
    parser.add_argument(
        "--uncompressed-prefix",
        default=None,
        help="Directory for uncompressed sources below the prefix",
    )
    parser.add_argument(
        "--url-root",
        default=None,
        help="Root URL prepended to artifact paths in source maps (e.g. a CDN host)",
    )
    parser.add_argument(
        "--embed-source",
        action="store_true",
        default=None,
        help="Embed the original source in the map instead of writing an uncompressed copy",
    )
    parser.add_argument("--gzip", type=_optional_bool, default=None, help="Global gzip flag")
    parser.add_argument(
        "--sourcemaps-gzip",
        type=_optional_bool,
        default=None,
        help="Gzip side artifacts; overrides --gzip when given",
    )
    parser.add_argument("--minifier", choices=["terser", "rjsmin"], default=None, help="Minifier to use")
    return parser


def config_from_args(args: argparse.Namespace) -> AssetsConfig:
    overrides: Dict[str, Any] = {}
    for field, value in (
        ("public_path", args.public_path),
        ("prefix", args.prefix),
        ("sourcemaps_prefix", args.sourcemaps_prefix),
        ("uncompressed_prefix", args.uncompressed_prefix),
        ("sourcemaps_url_root", args.url_root),
        ("sourcemaps_embed_source", args.embed_source),
        ("gzip", args.gzip),
        ("sourcemaps_gzip", args.sourcemaps_gzip),
        ("minifier", args.minifier),
    ):
        if value is not None:
            overrides[field] = value
    return AssetsConfig.from_env(**overrides)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    parser = build_parser()
    args = parser.parse_args(argv)

    source = pathlib.Path(args.source)
    if not source.is_dir():
        parser.error(f"Source directory {source} does not exist")

    config = config_from_args(args)
    try:
        written = build_assets(source, pathlib.Path(args.build_dir), Compressor(config))
    except AssetFinalizerError as exc:
        print(f"error: {exc}")
        return 1

    if not written:
        print("No JavaScript assets found.")
        return 0

    for path in written:
        print(f"Wrote {path}")
    print(f"\nCompressed {len(written)} assets; source maps under {config.public_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
