"""Configuration loading for the declaration generator."""

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

try:
    import tomllib
except ImportError:
    import toml as tomllib  # type: ignore

from exporters.declaration_exporter import EMPTY_NEVER, EMPTY_POLICIES
from registry.errors import ConfigError


CARGO_MANIFEST = "Cargo.toml"
CARGO_METADATA_KEY = "named-invoke"
MANIFEST_DIR_ENV = "CARGO_MANIFEST_DIR"


@dataclass(frozen=True)
class GeneratorConfig:
    """Options for one generator run; unset fields fall back to defaults."""

    output: Optional[str] = None
    sources: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    exclude_dirs: List[str] = field(default_factory=list)
    empty_policy: str = EMPTY_NEVER
    workers: int = 1
    cargo_rerun: bool = False

    def merged(self, overrides: Mapping[str, Any]) -> "GeneratorConfig":
        """Return a copy with every non-empty override applied."""
        updates = {
            key: value for key, value in overrides.items()
            if value is not None and value != [] and value is not False
        }
        return config_from_mapping(updates, base=self)


def resolve_project_root(
    explicit: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Determine the project root.

    Uses the explicit path when given, then the directory Cargo exports to
    build scripts, then the current directory.
    """
    if explicit is not None:
        return Path(explicit).resolve()
    if environ is None:
        environ = os.environ
    manifest_dir = environ.get(MANIFEST_DIR_ENV)
    if manifest_dir:
        return Path(manifest_dir).resolve()
    return Path.cwd().resolve()


def config_from_mapping(data: Mapping[str, Any], base: Optional[GeneratorConfig] = None) -> GeneratorConfig:
    """
    Validate a mapping of options and apply it on top of ``base``.

    Keys may use dashes or underscores.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.
    """
    if base is None:
        base = GeneratorConfig()
    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(GeneratorConfig)}
    updates: Dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).replace("-", "_")
        if key not in known:
            raise ConfigError(f"Unknown configuration key: {raw_key!r}")
        updates[key] = _validate(key, value)

    return replace(base, **updates)


def _validate(key: str, value: Any) -> Any:
    if key in {"sources", "extensions", "exclude_dirs"}:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ConfigError(f"{key} must be a list of strings")
        if key == "extensions":
            value = [_normalize_extension(ext) for ext in value]
        return value
    if key == "output":
        if not isinstance(value, str):
            raise ConfigError("output must be a string")
        return value
    if key == "empty_policy":
        if value not in EMPTY_POLICIES:
            raise ConfigError(f"empty_policy must be one of {', '.join(EMPTY_POLICIES)}")
        return value
    if key == "workers":
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError("workers must be a positive integer")
        return value
    if key == "cargo_rerun":
        if not isinstance(value, bool):
            raise ConfigError("cargo_rerun must be a boolean")
        return value
    return value


def _normalize_extension(ext: str) -> str:
    if not ext.startswith("."):
        ext = "." + ext
    return ext.lower()


def parse_config_file(path: Path) -> Any:
    """
    Parse a YAML, JSON or TOML file according to its suffix.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    suffix = path.suffix.lower()
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(content) or {}
        elif suffix == ".json":
            return json.loads(content)
        elif suffix == ".toml":
            return tomllib.loads(content)
        else:
            raise ConfigError(f"Unsupported configuration format: {path.name}")
    except (yaml.YAMLError, json.JSONDecodeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration file {path}: {e}") from e


def load_config(path: Union[str, Path], base: Optional[GeneratorConfig] = None) -> GeneratorConfig:
    """Load a configuration file on top of ``base``."""
    return config_from_mapping(parse_config_file(Path(path)), base=base)


def load_cargo_metadata(root: Path, base: Optional[GeneratorConfig] = None) -> GeneratorConfig:
    """
    Load options from ``[package.metadata.named-invoke]`` in Cargo.toml.

    Returns ``base`` (or the defaults) unchanged when the manifest or the
    table is absent.
    """
    if base is None:
        base = GeneratorConfig()
    manifest = root / CARGO_MANIFEST
    if not manifest.is_file():
        return base

    data = parse_config_file(manifest)
    metadata = data.get("package", {}).get("metadata", {}).get(CARGO_METADATA_KEY)
    if metadata is None:
        return base
    return config_from_mapping(metadata, base=base)
