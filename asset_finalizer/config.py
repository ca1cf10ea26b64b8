"""Configuration for the asset finalizer."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class UrlRoot:
    """Turns a public-relative artifact filename into the URL written to maps."""

    def resolve(self, filename: str) -> str:  # pragma: no cover - abstract
        raise NotImplementedError


class IdentityRoot(UrlRoot):
    def resolve(self, filename: str) -> str:
        return filename

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IdentityRoot)

    def __repr__(self) -> str:
        return "IdentityRoot()"


class FixedRoot(UrlRoot):
    """Prefix every filename with a static root such as a CDN host."""

    def __init__(self, root: str) -> None:
        self.root = root

    def resolve(self, filename: str) -> str:
        if not self.root:
            return filename
        return f"{self.root.rstrip('/')}/{filename.lstrip('/')}"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FixedRoot) and other.root == self.root

    def __repr__(self) -> str:
        return f"FixedRoot({self.root!r})"


class CustomRoot(UrlRoot):
    def __init__(self, func: Callable[[str], str]) -> None:
        self.func = func

    def resolve(self, filename: str) -> str:
        return str(self.func(filename))

    def __repr__(self) -> str:
        return f"CustomRoot({self.func!r})"


DEFAULT_TERSER_OPTIONS: Dict[str, Any] = {"compress": True, "mangle": True}


def _default_terser_options() -> Dict[str, Any]:
    return dict(DEFAULT_TERSER_OPTIONS)


class AssetsConfig(BaseModel):
    """Every option the compressor recognizes, with its default."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    public_path: Path = Path("public")
    prefix: str = "/assets"
    terser: Dict[str, Any] = Field(default_factory=_default_terser_options)
    sourcemaps_embed_source: bool = False
    uncompressed_prefix: str = "sources"
    sourcemaps_prefix: str = "maps"
    sourcemaps_url_root: UrlRoot = Field(default_factory=IdentityRoot)
    sourcemaps_gzip: Optional[bool] = None
    gzip: bool = True
    bundle_marker: str = "-bundle"
    minifier: Literal["terser", "rjsmin"] = "terser"

    @field_validator("sourcemaps_url_root", mode="before")
    @classmethod
    def coerce_url_root(cls, value: Any) -> UrlRoot:
        if isinstance(value, UrlRoot):
            return value
        if value is None or value is False:
            return IdentityRoot()
        if isinstance(value, str):
            return FixedRoot(value)
        if callable(value):
            return CustomRoot(value)
        raise ValueError("sourcemaps_url_root must be False, a string or a callable.")

    @field_validator("terser")
    @classmethod
    def merge_terser_defaults(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        """Layer user options over the defaults; only an explicit ``False`` turns one off."""
        return {**DEFAULT_TERSER_OPTIONS, **value}

    @field_validator("bundle_marker")
    @classmethod
    def validate_bundle_marker(cls, value: str) -> str:
        if not value:
            raise ValueError("bundle_marker cannot be empty.")
        return value

    @property
    def gzip_enabled(self) -> bool:
        """``sourcemaps_gzip`` wins when set, otherwise the global ``gzip`` flag."""
        if self.sourcemaps_gzip is None:
            return self.gzip
        return self.sourcemaps_gzip

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "AssetsConfig":
        """Build a config from ``ASSETS_*`` environment variables.

        Keyword overrides take precedence over the environment.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        for field, var in (
            ("public_path", "ASSETS_PUBLIC_PATH"),
            ("prefix", "ASSETS_PREFIX"),
            ("uncompressed_prefix", "ASSETS_UNCOMPRESSED_PREFIX"),
            ("sourcemaps_prefix", "ASSETS_SOURCEMAPS_PREFIX"),
            ("bundle_marker", "ASSETS_BUNDLE_MARKER"),
            ("minifier", "ASSETS_MINIFIER"),
        ):
            if env.get(var):
                values[field] = env[var]

        url_root = env.get("ASSETS_SOURCEMAPS_URL_ROOT")
        if url_root and parse_bool(url_root) is not False:
            values["sourcemaps_url_root"] = url_root

        for field, var in (
            ("sourcemaps_embed_source", "ASSETS_SOURCEMAPS_EMBED_SOURCE"),
            ("gzip", "ASSETS_GZIP"),
            ("sourcemaps_gzip", "ASSETS_SOURCEMAPS_GZIP"),
        ):
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            parsed = parse_bool(raw)
            if parsed is None:
                logger.warning(f"Invalid {var}={raw!r}; falling back to the default")
                continue
            values[field] = parsed

        values.update(overrides)
        return cls(**values)


def parse_bool(raw: str) -> Optional[bool]:
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None
