from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .errors import ConfigurationError

"""Library settings.

Values come from the dataclass defaults, then an optional YAML file (path
argument or ``PQMSG_CONFIG``), then ``PQMSG_*`` environment variables.
"""

log = logging.getLogger(__name__)

ENV_PREFIX = "PQMSG_"
CONFIG_ENV = "PQMSG_CONFIG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    aead: str = "AESCTR256-HMACSHA256"
    expander: str = "HKDF-SHA256"
    pbkdf: str = "ARGON2ID"
    salt_size: int = 16
    buffer_size: int = 32 * 1024
    rsa_bits: int = 3072
    enable_liboqs: bool = False
    argon2_time: int = 3
    argon2_memory: int = 64 * 1024
    argon2_threads: int = 4

    def __post_init__(self) -> None:
        if self.salt_size < 8:
            raise ConfigurationError(f"salt_size must be at least 8, got {self.salt_size}")
        if self.buffer_size < 1:
            raise ConfigurationError(f"buffer_size must be positive, got {self.buffer_size}")
        if self.rsa_bits < 2048:
            raise ConfigurationError(f"rsa_bits must be at least 2048, got {self.rsa_bits}")


def _coerce(name: str, kind: Any, value: Any) -> Any:
    if kind in (bool, "bool"):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigurationError(f"{name}: expected a boolean, got {value!r}")
    if kind in (int, "int"):
        if isinstance(value, bool):
            raise ConfigurationError(f"{name}: expected an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{name}: expected an integer, got {value!r}") from None
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{name}: expected a non-empty string, got {value!r}")
    return value.strip()


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigurationError(f"cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    section = data.get("pqmsg", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"{path}: 'pqmsg' section must be a mapping")
    return section


def load_settings(path: str | os.PathLike | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    env = environ if environ is not None else os.environ
    known = {f.name: f.type for f in fields(Settings)}
    values: Dict[str, Any] = {}

    cfg_path = path or env.get(CONFIG_ENV)
    if cfg_path:
        for key, value in _read_yaml(Path(cfg_path)).items():
            if key not in known:
                raise ConfigurationError(f"{cfg_path}: unknown setting {key!r}")
            values[key] = _coerce(key, known[key], value)
        log.debug("loaded settings from %s", cfg_path)

    for key, kind in known.items():
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None:
            values[key] = _coerce(ENV_PREFIX + key.upper(), kind, raw)

    return replace(Settings(), **values)
