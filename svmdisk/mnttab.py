"""
mnttab.py
Mounted devices from two flat sources:
- /etc/mnttab:  special mountpoint fstype options time
- 'swap -l':    swapfile dev swaplo blocks free   (mount point recorded as 'swap')

Specials under /dev are keyed by their last path component, so
/dev/md/dsk/d10 -> d10 and /dev/dsk/c0t0d0s0 -> c0t0d0s0.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, Optional

log = logging.getLogger("svmdisk.mnttab")


def device_key(special: str) -> str:
    if special.startswith("/dev/"):
        return special.rsplit("/", 1)[-1]
    return special


class Mnttab:
    def __init__(self):
        self.dev2mp: Dict[str, str] = {}

    def _read(self, path: Path, what: str) -> Optional[str]:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            log.warning("Cannot read %s source %s: %s", what, path, e)
            return None

    def readmtab(self, mnttab: Path = Path("/etc/mnttab")) -> bool:
        text = self._read(mnttab, "mnttab")
        if text is None:
            return False
        for line in text.splitlines():
            fields = line.split()
            if len(fields) < 2 or fields[0].startswith("#"):
                continue
            self.dev2mp[device_key(fields[0])] = fields[1]
        return True

    def readstab(self, swaptab: Path) -> bool:
        text = self._read(swaptab, "swap")
        if text is None:
            return False
        for line in text.splitlines():
            fields = line.split()
            if not fields or fields[0] == "swapfile":
                continue
            self.dev2mp[device_key(fields[0])] = "swap"
        return True
