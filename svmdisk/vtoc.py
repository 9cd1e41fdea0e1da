"""
vtoc.py
Disk partition tables from saved 'prtvtoc' output.

  * /dev/rdsk/c0t0d0s2 partition map
  *                          First     Sector    Last
  * Partition  Tag  Flags    Sector     Count    Sector  Mount Directory
         0      2    00    4194304   4194304   8388607   /
         2      5    01          0  71127180  71127179

readvtocdir() loads every file of a directory whose name carries a disk id
(c0t0d0.vtoc, prtvtoc_c0t0d0s2.txt, ...). Unreadable sources only log a
warning: the affected slices then have no known size.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, Optional

from .types import DISK_RE, SLICE_RE, Slice

log = logging.getLogger("svmdisk.vtoc")


def parse_prtvtoc(text: str) -> Dict[int, Slice]:
    slices: Dict[int, Slice] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("*"):
            continue
        fields = line.split()
        if len(fields) < 6 or not all(f.isdigit() for f in (fields[0], fields[1], *fields[3:6])):
            log.debug("skipping vtoc line: %s", line)
            continue
        number = int(fields[0])
        slices[number] = Slice(
            number=number,
            tag=int(fields[1]),
            flags=fields[2],
            first=int(fields[3]),
            count=int(fields[4]),
            last=int(fields[5]),
            mountpoint=fields[6] if len(fields) > 6 else None,
        )
    return slices


class Vtoc:
    def __init__(self):
        self.disks: Dict[str, Dict[int, Slice]] = {}

    def readvtoc(self, path: Path, disk: Optional[str] = None) -> bool:
        """Load one prtvtoc dump; the disk id defaults to the one in the file name."""
        path = Path(path)
        if disk is None:
            m = DISK_RE.search(path.name)
            if m is None:
                log.warning("no disk id in vtoc file name %s", path)
                return False
            disk = m.group(0)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            log.warning("Cannot read vtoc source %s: %s", path, e)
            return False
        self.disks[disk] = parse_prtvtoc(text)
        return True

    def readvtocdir(self, directory: Path) -> int:
        """Load every vtoc file of `directory`; returns the number of disks read."""
        directory = Path(directory)
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            log.warning("Cannot read vtoc directory %s: %s", directory, e)
            return 0
        loaded = 0
        for entry in entries:
            if entry.is_file() and DISK_RE.search(entry.name) and self.readvtoc(entry):
                loaded += 1
        return loaded

    def size(self, slice_: str) -> Optional[int]:
        """Block count of c#t#d#s#, None if the slice is unknown."""
        if not SLICE_RE.fullmatch(slice_):
            return None
        disk, _, number = slice_.rpartition("s")
        entry = self.disks.get(disk, {}).get(int(number))
        return entry.count if entry is not None else None
