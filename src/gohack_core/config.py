"""Layered configuration: built-in defaults, optional TOML file, environment."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from .errors import ConfigError

ROOT_ENV = "GOHACK"
CONFIG_ENV = "GOHACK_CONFIG"

LOG_LEVELS = ("debug", "info", "warning", "error")

DEFAULT_CONFIG: Dict[str, Any] = {
    "hack": {
        "root": None,
        "vcs": False,
    },
    "log": {
        "verbosity": "warning",
    },
}


class HackConfig(BaseModel):
    """Effective gohack settings."""

    root: Path
    vcs: bool = False
    log_level: str = "warning"
    config_path: Optional[Path] = None

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level == "warn":
            level = "warning"
        if level not in LOG_LEVELS:
            raise ValueError(f"log verbosity must be one of: {', '.join(LOG_LEVELS)}")
        return level


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_defaults(defaults: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def home_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    home = env.get("HOME") or env.get("USERPROFILE")
    if not home:
        raise ConfigError("$HOME is not defined")
    return Path(home)


def default_root(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return $HOME/gohack, the checkout root used when nothing else is configured."""
    return home_dir(environ) / "gohack"


def resolve_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_ENV, "").strip()
    if explicit:
        return Path(explicit).expanduser()
    return home_dir(env) / ".config" / "gohack" / "config.toml"


def _read_toml_optional(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config TOML: {path} ({exc})") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> HackConfig:
    """Resolve the effective configuration.

    Later layers win: defaults, then the TOML file, then $GOHACK for the root.
    """
    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env)
    raw = merge_defaults(default_config(), _read_toml_optional(path))

    hack = raw.get("hack")
    log = raw.get("log")
    if not isinstance(hack, dict) or not isinstance(log, dict):
        raise ConfigError(f"{path}: [hack] and [log] must be tables")

    root_value = hack.get("root")
    if env.get(ROOT_ENV, "").strip():
        root = Path(env[ROOT_ENV].strip()).expanduser()
        # go.mod only accepts rooted or dot-relative directory paths.
        if not root.is_absolute():
            root = (Path.cwd() / root).resolve()
    elif root_value:
        if not isinstance(root_value, str):
            raise ConfigError(f"{path}: hack.root must be a string")
        root = Path(root_value).expanduser()
        if not root.is_absolute():
            root = (path.parent / root).resolve()
    else:
        root = default_root(env)

    try:
        return HackConfig(
            root=root,
            vcs=hack.get("vcs", False),
            log_level=str(log.get("verbosity", "warning")),
            config_path=path,
        )
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def config_as_toml_dict(config: HackConfig) -> Dict[str, Any]:
    return {
        "hack": {"root": str(config.root), "vcs": config.vcs},
        "log": {"verbosity": config.log_level},
    }
