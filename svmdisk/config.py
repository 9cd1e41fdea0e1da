"""
config.py
Load and validate configuration from TOML (Python 3.11+ tomllib).
Search order:
  1) explicit --config path
  2) adjacent DEFAULT_CONFIG_PATH (bundle root / 'svmdisk.toml')
  3) /etc/svmdisk.toml
A missing auto-discovered file means built-in defaults.
"""

from __future__ import annotations
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict
from .types import Config
from .bundle import config_candidates
from .metastat import DEFAULT_COMMAND

log = logging.getLogger("svmdisk.config")

KNOWN_KEYS = {
    "sources": {"sourcedir", "metastat", "metastat_cmd", "mnttab", "swaptab", "vtoc_dir"},
    "output": {"colour"},
    "runtime": {"log_level"},
}


def _gv(d: Dict[str, Any], path: list[str], default=None):
    cur = d
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _load_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _path(v) -> Path | None:
    return Path(v) if v else None


def _bool(value, key: str, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    log.warning("%s must be true or false, got %r; using %s", key, value, str(default).lower())
    return default


def _warn_unknown(cfg: Dict[str, Any], path: Path) -> None:
    for section, value in cfg.items():
        if section == "version":
            continue
        if section not in KNOWN_KEYS:
            log.warning("Unknown section [%s] in %s, ignored", section, path)
            continue
        if isinstance(value, dict):
            for key in value:
                if key not in KNOWN_KEYS[section]:
                    log.warning("Unknown parameter %s.%s in %s, ignored", section, key, path)


def find_config(path_arg: str | None) -> Path:
    """Pick the best config path based on CLI arg and availability."""
    if path_arg:
        # User explicitly specified a config - it must exist
        p = Path(path_arg)
        if not p.exists():
            raise FileNotFoundError(f"Specified config file does not exist: {path_arg}")
        return p

    candidates = config_candidates()
    for p in candidates:
        if p.exists():
            return p
    return candidates[-1]


def default_config() -> Config:
    return build_config({})


def load_config(path: Path) -> Config:
    cfg = _load_toml(path)
    _warn_unknown(cfg, path)
    return build_config(cfg)


def build_config(cfg: Dict[str, Any]) -> Config:
    def gv(keys, default=None):
        return _gv(cfg, keys, default)

    return Config(
        sourcedir=_path(gv(["sources", "sourcedir"])),
        metastat=_path(gv(["sources", "metastat"])),
        metastat_cmd=gv(["sources", "metastat_cmd"], DEFAULT_COMMAND),
        mnttab=_path(gv(["sources", "mnttab"], "/etc/mnttab")),
        swaptab=_path(gv(["sources", "swaptab"])),
        vtoc_dir=_path(gv(["sources", "vtoc_dir"])),
        colour=_bool(gv(["output", "colour"], True), "output.colour", True),
        log_level=str(gv(["runtime", "log_level"], "WARNING")).upper(),
    )
