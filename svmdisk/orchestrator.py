"""
orchestrator.py
Coordinates the end-to-end flow:
  - Resolve sources (a source directory expands to the four usual files)
  - Load mount table and partition tables (unreadable sources only warn)
  - Read the metastat source and classify every record
  - Propagate and freeze the graph
  - Run one query command and print its result
"""

from __future__ import annotations
import dataclasses
import logging
from typing import Callable, Dict, List, Tuple
from .types import Config
from .builder import GraphBuilder
from .graph import SvmGraph
from .metastat import read_source
from .mnttab import Mnttab
from .util import blocks_to_mb
from .vtoc import Vtoc

log = logging.getLogger("svmdisk.orchestrator")


def resolve_sources(cfg: Config) -> Config:
    """A source directory overrides every individual source."""
    if cfg.sourcedir is None:
        return cfg
    d = cfg.sourcedir
    return dataclasses.replace(
        cfg,
        metastat=d / "metastat-p.txt",
        mnttab=d / "mnttab.txt",
        swaptab=d / "swaptab.txt",
        vtoc_dir=d,
    )


def load_svm(cfg: Config) -> SvmGraph:
    cfg = resolve_sources(cfg)

    mnttab = Mnttab()
    if cfg.mnttab is not None:
        mnttab.readmtab(cfg.mnttab)
    if cfg.swaptab is not None:
        mnttab.readstab(cfg.swaptab)

    vtoc = Vtoc()
    if cfg.vtoc_dir is not None:
        n = vtoc.readvtocdir(cfg.vtoc_dir)
        log.info("read %d partition table(s) from %s", n, cfg.vtoc_dir)

    lines = read_source(cfg.metastat, cfg.metastat_cmd)
    builder = GraphBuilder().readconfig(lines)
    log.info("%d metadevice(s) and hot spare pool(s) classified", len(builder.devices))
    return builder.freeze(vtoc=vtoc, mnttab=mnttab, colour=cfg.colour)


def _print_set(items) -> int:
    for item in sorted(items):
        print(item)
    return 0


def _size(graph: SvmGraph, args: List[str]) -> int:
    rc = 0
    for dev in args:
        size = graph.size_of(dev)
        if size is None:
            print(f"{dev} unknown")
            rc = 1
        else:
            print(f"{dev} {size} blocks ({blocks_to_mb(size)} MB)")
    return rc


def _isfree(graph: SvmGraph, args: List[str]) -> int:
    free = graph.isdevfree(args[0])
    print("free" if free else "used")
    return 0 if free else 1


def _show(text: str) -> int:
    if text:
        print(text)
    return 0


# name -> (minimum args, maximum args or None, handler)
COMMANDS: Dict[str, Tuple[int, int | None, Callable[[SvmGraph, List[str]], int]]] = {
    "showconfig": (0, 0, lambda g, a: _show(g.showconfig())),
    "showsp": (0, None, lambda g, a: _show(g.showsp(*a))),
    "explain": (1, None, lambda g, a: _show(g.explaindev(*a))),
    "size": (1, None, _size),
    "subdevs": (1, None, lambda g, a: _print_set(g.getsubdevs(*a))),
    "physdevs": (1, None, lambda g, a: _print_set(g.getphysdevs(*a))),
    "mponslice": (1, 1, lambda g, a: _print_set(g.mponslice(a[0]))),
    "mpondisk": (1, 1, lambda g, a: _print_set(g.mpondisk(a[0]))),
    "mpondev": (1, 1, lambda g, a: _print_set(g.mpondev(a[0]))),
    "devs4mp": (1, 1, lambda g, a: _print_set(g.devs4mp(a[0]))),
    "disks4mp": (1, 1, lambda g, a: _print_set(g.disks4mp(a[0]))),
    "nextdev": (0, 0, lambda g, a: _show(f"d{g.getnextdev()}")),
    "isfree": (1, 1, _isfree),
}


def check_arity(command: str, args: List[str]) -> str | None:
    """Return an error message when `args` does not fit `command`."""
    lo, hi, _ = COMMANDS[command]
    if len(args) < lo:
        return f"{command} needs at least {lo} argument(s)"
    if hi is not None and len(args) > hi:
        return f"{command} takes at most {hi} argument(s)"
    return None


def run_command(graph: SvmGraph, command: str, args: List[str]) -> int:
    _, _, handler = COMMANDS[command]
    return handler(graph, args)
