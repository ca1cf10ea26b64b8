import pytest
from pydantic import ValidationError

from asset_finalizer.config import AssetsConfig, CustomRoot, FixedRoot, IdentityRoot


def test_defaults():
    config = AssetsConfig()
    assert config.prefix == "/assets"
    assert config.sourcemaps_prefix == "maps"
    assert config.uncompressed_prefix == "sources"
    assert config.sourcemaps_embed_source is False
    assert config.sourcemaps_url_root == IdentityRoot()
    assert config.terser == {"compress": True, "mangle": True}
    assert config.minifier == "terser"


@pytest.mark.parametrize("value", [False, None])
def test_url_root_false_or_none_is_identity(value):
    config = AssetsConfig(sourcemaps_url_root=value)
    assert isinstance(config.sourcemaps_url_root, IdentityRoot)
    assert config.sourcemaps_url_root.resolve("/assets/maps/a.js.map") == "/assets/maps/a.js.map"


def test_url_root_string_is_fixed_root():
    config = AssetsConfig(sourcemaps_url_root="https://cdn.example.com/")
    assert config.sourcemaps_url_root == FixedRoot("https://cdn.example.com/")
    assert (
        config.sourcemaps_url_root.resolve("/assets/maps/a.js.map")
        == "https://cdn.example.com/assets/maps/a.js.map"
    )


def test_url_root_callable_is_custom_root():
    config = AssetsConfig(sourcemaps_url_root=lambda path: f"https://maps.internal{path}?v=1")
    assert isinstance(config.sourcemaps_url_root, CustomRoot)
    assert config.sourcemaps_url_root.resolve("/assets/x.js") == "https://maps.internal/assets/x.js?v=1"


def test_url_root_rejects_other_types():
    with pytest.raises(ValidationError):
        AssetsConfig(sourcemaps_url_root=42)


def test_empty_bundle_marker_rejected():
    with pytest.raises(ValidationError):
        AssetsConfig(bundle_marker="")


@pytest.mark.parametrize(
    "sourcemaps_gzip, gzip, expected",
    [
        (None, True, True),
        (None, False, False),
        (True, False, True),
        (False, True, False),
    ],
)
def test_gzip_enabled_falls_back_to_global_flag(sourcemaps_gzip, gzip, expected):
    config = AssetsConfig(sourcemaps_gzip=sourcemaps_gzip, gzip=gzip)
    assert config.gzip_enabled is expected


def test_from_env_reads_assets_variables(tmp_path):
    env = {
        "ASSETS_PUBLIC_PATH": str(tmp_path),
        "ASSETS_PREFIX": "/static",
        "ASSETS_SOURCEMAPS_PREFIX": "sm",
        "ASSETS_SOURCEMAPS_URL_ROOT": "https://cdn.example.com",
        "ASSETS_SOURCEMAPS_EMBED_SOURCE": "true",
        "ASSETS_GZIP": "0",
        "ASSETS_MINIFIER": "rjsmin",
    }
    config = AssetsConfig.from_env(env)
    assert config.public_path == tmp_path
    assert config.prefix == "/static"
    assert config.sourcemaps_prefix == "sm"
    assert config.sourcemaps_url_root == FixedRoot("https://cdn.example.com")
    assert config.sourcemaps_embed_source is True
    assert config.gzip is False
    assert config.sourcemaps_gzip is None
    assert config.minifier == "rjsmin"


def test_from_env_url_root_false_means_identity():
    config = AssetsConfig.from_env({"ASSETS_SOURCEMAPS_URL_ROOT": "false"})
    assert config.sourcemaps_url_root == IdentityRoot()


def test_from_env_invalid_bool_falls_back(caplog):
    config = AssetsConfig.from_env({"ASSETS_GZIP": "maybe"})
    assert config.gzip is True
    assert any("ASSETS_GZIP" in record.getMessage() for record in caplog.records)


def test_from_env_overrides_win():
    config = AssetsConfig.from_env({"ASSETS_PREFIX": "/static"}, prefix="/packs")
    assert config.prefix == "/packs"
