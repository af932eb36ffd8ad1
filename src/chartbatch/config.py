from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .asset_exporter import MissingAssetPolicy
from .categories import CategoryScheme, normalize_scheme_index
from .chart_compiler import DEFAULT_CHART_EXTENSIONS, CompileOptions
from .errors import ConfigurationError
from .metadata_source import METADATA_FILENAME
from .track_discovery import MUSIC_DIRNAME
from .utils import env_bool, env_str, load_yaml_file

ENV_CONFIG_PATH = "CHARTBATCH_CONFIG"
ENV_IGNORE_INCOMPLETE = "CHARTBATCH_IGNORE_INCOMPLETE"
ENV_ON_MISSING = "CHARTBATCH_ON_MISSING"

# Used when an asset root is given as an empty string; relative to the source root
DEFAULT_ASSET_DIRS = {
    "audio": "SoundData",
    "image": "AssetBundleImages/jacket",
    "video": "MovieData",
}


@dataclass
class AssetRoots:
    """Raw asset root settings: None skips the kind, "" selects the default directory."""

    audio: Optional[str] = None
    image: Optional[str] = None
    video: Optional[str] = None

    def resolve(self, kind: str, source_root: Path) -> Optional[Path]:
        raw = getattr(self, kind)
        if raw is None:
            return None
        if raw.strip() == "":
            return source_root / DEFAULT_ASSET_DIRS[kind]
        return Path(raw).expanduser()


@dataclass
class Settings:
    source_root: Optional[Path] = None
    output_root: Optional[Path] = None
    assets: AssetRoots = field(default_factory=AssetRoots)
    category_scheme: CategoryScheme = CategoryScheme.GENRE
    compile_options: CompileOptions = field(default_factory=CompileOptions)
    chart_extensions: tuple[str, ...] = DEFAULT_CHART_EXTENSIONS
    metadata_filename: str = METADATA_FILENAME
    ignore_incomplete: bool = False
    id_as_folder_name: bool = False
    log_json: bool = False
    export_zip: bool = False
    compile_collections: bool = False
    on_missing_asset: MissingAssetPolicy = MissingAssetPolicy.WARN

    @property
    def music_dir(self) -> Path:
        if self.source_root is None:
            raise ConfigurationError("Source root was not specified")
        return self.source_root / MUSIC_DIRNAME

    def asset_root(self, kind: str) -> Optional[Path]:
        if self.source_root is None:
            raise ConfigurationError("Source root was not specified")
        return self.assets.resolve(kind, self.source_root)

    def require_inputs(self) -> None:
        """Raise ConfigurationError unless the source and output roots are usable."""
        if self.source_root is None:
            raise ConfigurationError("Source root was not specified")
        if self.output_root is None:
            raise ConfigurationError("Output root was not specified")
        if not self.source_root.is_dir():
            raise ConfigurationError(f"Source root does not exist: {self.source_root}")
        if not self.music_dir.is_dir():
            raise ConfigurationError(f"Source root has no '{MUSIC_DIRNAME}' folder: {self.music_dir}")
        if self.output_root.exists() and not self.output_root.is_dir():
            raise ConfigurationError(f"Output root is not a directory: {self.output_root}")


def _optional_path(value: Any, *, field_name: str) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"'{field_name}' must be a string path")
    if not value.strip():
        return None
    return Path(value).expanduser()


def _optional_str(value: Any, *, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"'{field_name}' must be a string")
    return value


def _ensure_extensions(value: Any) -> tuple[str, ...]:
    if value is None:
        return DEFAULT_CHART_EXTENSIONS
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not value:
        raise ConfigurationError("'chart_extensions' must be a non-empty list of suffixes")
    extensions: list[str] = []
    for entry in value:
        if not isinstance(entry, str) or not entry.strip():
            raise ConfigurationError("'chart_extensions' entries must be non-empty strings")
        suffix = entry.strip().lower()
        extensions.append(suffix if suffix.startswith(".") else f".{suffix}")
    return tuple(extensions)


def _build_compile_options(data: dict[str, Any]) -> CompileOptions:
    if not isinstance(data, dict):
        raise ConfigurationError("'compile' must be provided as a mapping when specified")
    shift = data.get("shift_tick", 0)
    try:
        shift_tick = int(shift) if shift is not None else 0
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'compile.shift_tick' must be an integer, got {shift!r}") from exc
    try:
        return CompileOptions(
            target_format=_optional_str(data.get("target_format"), field_name="compile.target_format"),
            rotation=_optional_str(data.get("rotation"), field_name="compile.rotation"),
            shift_tick=shift_tick,
            strict_decimal=bool(data.get("strict_decimal", False)),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def _build_asset_roots(data: dict[str, Any]) -> AssetRoots:
    if not isinstance(data, dict):
        raise ConfigurationError("'assets' must be provided as a mapping when specified")
    return AssetRoots(
        audio=_optional_str(data.get("audio"), field_name="assets.audio"),
        image=_optional_str(data.get("image"), field_name="assets.image"),
        video=_optional_str(data.get("video"), field_name="assets.video"),
    )


def _parse_policy(value: Any) -> MissingAssetPolicy:
    try:
        return MissingAssetPolicy.parse(value)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def build_settings(data: dict[str, Any]) -> Settings:
    return Settings(
        source_root=_optional_path(data.get("source_dir"), field_name="source_dir"),
        output_root=_optional_path(data.get("output_dir"), field_name="output_dir"),
        assets=_build_asset_roots(data.get("assets", {}) or {}),
        category_scheme=normalize_scheme_index(data.get("category_scheme", 0)),
        compile_options=_build_compile_options(data.get("compile", {}) or {}),
        chart_extensions=_ensure_extensions(data.get("chart_extensions")),
        metadata_filename=str(data.get("metadata_filename") or METADATA_FILENAME),
        ignore_incomplete=bool(data.get("ignore_incomplete", False)),
        id_as_folder_name=bool(data.get("id_as_folder_name", False)),
        log_json=bool(data.get("log_json", False)),
        export_zip=bool(data.get("export_zip", False)),
        compile_collections=bool(data.get("collections", False)),
        on_missing_asset=_parse_policy(data.get("on_missing_asset", MissingAssetPolicy.WARN.value)),
    )


def load_config(path: Path) -> Settings:
    try:
        data = load_yaml_file(path)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to load configuration {path}: {exc}") from exc
    return build_settings(data)


def apply_env_overrides(settings: Settings) -> Settings:
    """Apply ``CHARTBATCH_*`` environment overrides on top of file settings."""
    ignore = env_bool(ENV_IGNORE_INCOMPLETE)
    policy = env_str(ENV_ON_MISSING)
    updates: dict[str, Any] = {}
    if ignore is not None:
        updates["ignore_incomplete"] = ignore
    if policy is not None:
        updates["on_missing_asset"] = _parse_policy(policy)
    return replace(settings, **updates) if updates else settings


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Layer command line options over ``settings``; unset options keep the file values."""
    updates: dict[str, Any] = {}

    if getattr(args, "path", None) is not None:
        updates["source_root"] = Path(args.path).expanduser()
    if getattr(args, "output", None) is not None:
        updates["output_root"] = Path(args.output).expanduser()

    assets = settings.assets
    asset_updates = {
        kind: getattr(args, option)
        for kind, option in (("audio", "music"), ("image", "cover"), ("video", "video"))
        if getattr(args, option, None) is not None
    }
    if asset_updates:
        updates["assets"] = replace(assets, **asset_updates)

    if getattr(args, "genre", None) is not None:
        updates["category_scheme"] = normalize_scheme_index(args.genre)

    options = settings.compile_options
    option_updates: dict[str, Any] = {}
    if getattr(args, "format", None) is not None:
        option_updates["target_format"] = args.format
    if getattr(args, "rotate", None) is not None:
        option_updates["rotation"] = args.rotate
    if getattr(args, "shift", None) is not None:
        option_updates["shift_tick"] = args.shift
    if getattr(args, "decimal", False):
        option_updates["strict_decimal"] = True
    if option_updates:
        try:
            updates["compile_options"] = replace(options, **option_updates)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    for flag, attribute in (
        ("ignore", "ignore_incomplete"),
        ("number", "id_as_folder_name"),
        ("json", "log_json"),
        ("zip", "export_zip"),
        ("collection", "compile_collections"),
    ):
        if getattr(args, flag, False):
            updates[attribute] = True

    if getattr(args, "on_missing", None) is not None:
        updates["on_missing_asset"] = _parse_policy(args.on_missing)

    return replace(settings, **updates) if updates else settings


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Build run settings from an optional config file, the environment and the command line."""
    config_path = getattr(args, "config", None)
    if config_path is None:
        env_path = env_str(ENV_CONFIG_PATH)
        config_path = Path(env_path) if env_path else None

    if config_path is not None:
        if not Path(config_path).is_file():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        settings = load_config(Path(config_path))
    else:
        settings = Settings()

    settings = apply_env_overrides(settings)
    return apply_cli_overrides(settings, args)
