"""
metastat.py
Reading 'metastat -p' output:
- Line reader: '#' comments, trailing-backslash continuations
- Record splitter: '<device> <tokens...>' with the description rejoined on single spaces
- Source opener: a dump file, or the live command (default 'metastat -p')

Classification of the records is done by builder.py.
"""

from __future__ import annotations
import logging
import shlex
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import SourceError
from .bundle import find_tool
from .util import run

log = logging.getLogger("svmdisk.metastat")

DEFAULT_COMMAND = "metastat -p"


def join_continuations(lines: Iterable[str]) -> Iterator[str]:
    """Yield logical lines, skipping comments and joining backslash continuations."""
    pending: Optional[str] = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        if pending is None and line.startswith("#"):
            continue
        if pending is not None:
            line = pending + " " + line.strip()
            pending = None
        if line.rstrip().endswith("\\"):
            pending = line.rstrip()[:-1].rstrip()
            continue
        yield line
    if pending is not None:
        # continuation on the last line of the source
        yield pending


def iter_records(lines: Iterable[str]) -> Iterator[Tuple[str, str]]:
    """Yield (device, description) pairs; blank lines are skipped."""
    for line in join_continuations(lines):
        tokens = line.split()
        if not tokens:
            continue
        yield tokens[0], " ".join(tokens[1:])


def read_source(path: Optional[Path] = None, command: str = DEFAULT_COMMAND) -> List[str]:
    """
    Return the lines of a metastat dump.
    A file is read when `path` is given, otherwise `command` is run.
    Raises SourceError if the source cannot be opened or read.
    """
    if path is not None:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.readlines()
        except OSError as e:
            raise SourceError(f"Cannot open metastat source '{path}': {e}") from e

    argv = shlex.split(command)
    tool = find_tool(argv[0]) if argv else None
    if tool is None:
        raise SourceError(f"Cannot open metastat source '{command}': command not found")
    argv[0] = tool
    log.debug("running %s", command)
    rc, out = run(argv)
    if rc != 0:
        raise SourceError(f"lost metastat source '{command}' (rc={rc})")
    return out.splitlines(keepends=True)
