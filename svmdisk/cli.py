#!/usr/bin/env python3
"""
cli.py
Command-line interface for svmdisk.
Parses arguments, loads config, builds the SVM graph and runs one query.
"""
from __future__ import annotations
import argparse, dataclasses, logging, sys, tomllib
from pathlib import Path
from . import __version__
from .bundle import DEFAULT_CONFIG_PATH
from .config import default_config, find_config, load_config
from .errors import SvmError
from .orchestrator import COMMANDS, check_arity, load_svm, run_command


def validate_arguments(args) -> str | None:
    """Validate CLI arguments; returns an error message or None."""
    if args.sourcedir and not Path(args.sourcedir).is_dir():
        return f"--sourcedir is not a directory: {args.sourcedir}"
    return check_arity(args.command, args.args)


def apply_overrides(cfg, args):
    """Command-line flags win over the configuration file."""
    overrides = {}
    for name in ("sourcedir", "metastat", "mnttab", "swaptab", "vtoc_dir"):
        value = getattr(args, name)
        if value:
            overrides[name] = Path(value)
    if args.no_colour:
        overrides["colour"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return dataclasses.replace(cfg, **overrides)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        description="svmdisk: explore a Solaris Volume Manager configuration ('metastat -p' dump)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="\ncommands: " + ", ".join(COMMANDS)
        + "\nisfree exits 0 when the device is free, 1 when it is used.",
    )
    ap.add_argument(
        "--config",
        default=None,
        help=f"path to svmdisk.toml (default: {DEFAULT_CONFIG_PATH} then /etc/svmdisk.toml)",
    )
    ap.add_argument("--sourcedir", help="directory holding metastat-p.txt, mnttab.txt, swaptab.txt and vtoc files")
    ap.add_argument("--metastat", help="metastat -p dump to read instead of running the command")
    ap.add_argument("--mnttab", help="mount table (default /etc/mnttab)")
    ap.add_argument("--swaptab", help="saved 'swap -l' output")
    ap.add_argument("--vtoc-dir", dest="vtoc_dir", help="directory of saved prtvtoc outputs")
    ap.add_argument("--no-colour", action="store_true", help="plain output, no ANSI colours")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING (default) or ERROR")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("command", choices=sorted(COMMANDS), help="query to run")
    ap.add_argument("args", nargs="*", help="devices, slices, disks or mount points")

    args = ap.parse_args(argv)

    error = validate_arguments(args)
    if error:
        print(f"❌ Error: {error}", file=sys.stderr)
        return 2

    cfg_path = None
    try:
        cfg_path = find_config(args.config)
        cfg = load_config(cfg_path) if cfg_path.exists() else default_config()
    except FileNotFoundError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    except (tomllib.TOMLDecodeError, OSError) as e:
        print(f"❌ Error: Invalid configuration file {cfg_path}: {e}", file=sys.stderr)
        return 1

    cfg = apply_overrides(cfg, args)
    setup_logging(cfg.log_level)

    try:
        graph = load_svm(cfg)
        return run_command(graph, args.command, args.args)
    except SvmError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        if cfg.metastat is None and cfg.sourcedir is None:
            print("💡 Hint: not on the Solaris host? Try --sourcedir or --metastat with saved dumps", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
