"""
bundle.py
Where svmdisk finds its own files when shipped as a portable directory
(PyInstaller binary or a plain checkout copied next to saved dumps).

- bundle root: directory of the binary, or the project root in a source run
- bin/: helper tools, e.g. a 'metastat' wrapper that cats a remote host's dump
- config candidates: svmdisk.toml next to the bundle, then /etc/svmdisk.toml
"""
from __future__ import annotations
import os, shutil, sys
from pathlib import Path
from typing import List, Optional


def bundle_root() -> Path:
    """
    - PyInstaller onefile: the directory of sys.executable.
    - Source run: the first parent holding pyproject.toml or svmdisk.toml.
    """
    if getattr(sys, "_MEIPASS", None):
        return Path(sys.executable).resolve().parent

    package_dir = Path(__file__).resolve().parent
    for parent in package_dir.parents:
        if (parent / "pyproject.toml").exists() or (parent / "svmdisk.toml").exists():
            return parent
    return package_dir.parent


BUNDLE_DIR: Path = bundle_root()
BIN_DIR: Path = BUNDLE_DIR / "bin"
DEFAULT_CONFIG_PATH: str = str(BUNDLE_DIR / "svmdisk.toml")
SYSTEM_CONFIG_PATH: str = "/etc/svmdisk.toml"


def config_candidates() -> List[Path]:
    """Auto-discovered configuration files, most specific first."""
    return [Path(DEFAULT_CONFIG_PATH), Path(SYSTEM_CONFIG_PATH)]


def find_tool(name: str) -> Optional[str]:
    """
    Full path of a helper command: bin/<name> next to the bundle wins over PATH.
    Absolute or relative paths are only checked for existence.
    """
    if os.sep in name:
        return name if os.access(name, os.X_OK) else None
    local = BIN_DIR / name
    if local.is_file() and os.access(local, os.X_OK):
        return str(local)
    return shutil.which(name)
