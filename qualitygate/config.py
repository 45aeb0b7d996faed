"""Gate configuration: YAML file, environment and command-line overrides."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .utils import read_text

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Quality Gate"

ENV_REQUIRED = "QUALITY_GATE_REQUIRED"
ENV_ALLOW_SKIP = "QUALITY_GATE_ALLOW_SKIP"
ENV_SKIPPED_IS_PASS = "QUALITY_GATE_SKIPPED_IS_PASS"

_KNOWN_KEYS = {"title", "required", "allow_skip", "skipped_is_pass"}
_TRUE_TOKENS = {"1", "true", "yes", "on"}
_FALSE_TOKENS = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class GateConfig:
    """
    Which stages the gate requires and how skips are judged.

    required:        names that must be present and succeed
    allow_skip:      required names whose skip counts as a pass
    skipped_is_pass: treat every skipped required stage as a pass
    """
    required: Tuple[str, ...] = ()
    allow_skip: Tuple[str, ...] = ()
    skipped_is_pass: bool = False
    title: str = DEFAULT_TITLE

    def is_required(self, name: str) -> bool:
        return name in self.required

    def skip_allowed(self, name: str) -> bool:
        return self.skipped_is_pass or name in self.allow_skip


def split_names(value: object) -> Tuple[str, ...]:
    """Normalize a list or comma-separated string of stage names, dropping duplicates."""
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[object] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ConfigError(f"Expected a list or comma-separated string of stage names, got {type(value).__name__}")

    out = []
    for item in items:
        if not isinstance(item, str):
            raise ConfigError(f"Stage names must be strings, got {item!r}")
        name = item.strip()
        if name and name not in out:
            out.append(name)
    return tuple(out)


def parse_bool(value: object, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        norm = value.strip().lower()
        if norm in _TRUE_TOKENS:
            return True
        if norm in _FALSE_TOKENS:
            return False
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def config_from_mapping(raw: Mapping[str, object], base: Optional[GateConfig] = None) -> GateConfig:
    """Overlay the keys present in raw onto base."""
    unknown = sorted(str(k) for k in raw if k not in _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    cfg = base or GateConfig()
    changes: Dict[str, object] = {}
    if "required" in raw:
        changes["required"] = split_names(raw["required"])
    if "allow_skip" in raw:
        changes["allow_skip"] = split_names(raw["allow_skip"])
    if "skipped_is_pass" in raw:
        changes["skipped_is_pass"] = parse_bool(raw["skipped_is_pass"], "skipped_is_pass")
    if "title" in raw:
        title = raw["title"]
        if not isinstance(title, str) or not title.strip():
            raise ConfigError("title: expected a non-empty string")
        changes["title"] = title.strip()
    return replace(cfg, **changes)


def load_config_file(path: Path, base: Optional[GateConfig] = None) -> GateConfig:
    """Load a YAML gate configuration file."""
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        raw = yaml.safe_load(read_text(path)) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping at top level: {path}")
    logger.debug("Loaded gate config from %s", path)
    return config_from_mapping(raw, base)


def config_from_env(environ: Optional[Mapping[str, str]] = None, base: Optional[GateConfig] = None) -> GateConfig:
    env = os.environ if environ is None else environ
    raw: Dict[str, object] = {}
    if env.get(ENV_REQUIRED):
        raw["required"] = env[ENV_REQUIRED]
    if env.get(ENV_ALLOW_SKIP):
        raw["allow_skip"] = env[ENV_ALLOW_SKIP]
    if ENV_SKIPPED_IS_PASS in env:
        raw["skipped_is_pass"] = env[ENV_SKIPPED_IS_PASS]
    return config_from_mapping(raw, base)


def build_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GateConfig:
    """
    Resolve the effective configuration.

    Precedence (lowest first): defaults, config file, environment, overrides.
    Overrides whose value is None are ignored.
    """
    cfg = GateConfig()
    if config_path is not None:
        cfg = load_config_file(config_path, cfg)
    cfg = config_from_env(environ, cfg)
    if overrides:
        cfg = config_from_mapping({k: v for k, v in overrides.items() if v is not None}, cfg)
    return cfg
