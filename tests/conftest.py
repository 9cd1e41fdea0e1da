"""
Pytest configuration and shared fixtures.

The sample host has seven disks:
  c0t0d0, c0t1d0   system disks (root and swap mirrors, soft-partition mirror halves)
  c1t0d0, c1t1d0   data disks
  c2t0d0..c2t2d0   raid5 members
"""
import pytest
from pathlib import Path
from svmdisk.builder import GraphBuilder
from svmdisk.mnttab import Mnttab
from svmdisk.orchestrator import load_svm
from svmdisk.types import Config
from svmdisk.vtoc import Vtoc, parse_prtvtoc

METASTAT = """\
# metastat -p snapshot
d0 -m d10 d20 1
d10 1 1 c0t0d0s0
d20 1 1 c0t1d0s0
d1 -m d11 d21 1
d11 1 1 c0t0d0s1
d21 1 1 c0t1d0s1
d100 -m d101 d102 1
d101 1 2 c0t0d0s7 \\
         c1t0d0s0
d102 2 1 c0t1d0s7 1 c1t1d0s0 -i 32b
d200 -p d100 -o 1 -b 2097152
d201 -p d100 -o 2097154 -b 4194304
d202 -p d100 -o 8388610 -b 1048576 -o 10485763 -b 1048576
d300 -p c1t0d0s1 -o 1 -b 1048576
d301 -p c1t0d0s1 -o 1048578 -b 2097152
d50 -r c2t0d0s0 c2t1d0s0 c2t2d0s0 -k -i 32b
d60 -t d61 d62
d61 1 1 c1t1d0s1
d62 1 1 c0t0d0s3
d70 2 2 c2t0d0s1 c2t1d0s1 1 c0t1d0s3
hsp001 c2t2d0s1
hsp002
"""

MNTTAB = """\
/dev/md/dsk/d0\t/\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=1540000\t1161360000
/proc\t/proc\tproc\tdev=4600000\t1161360000
/dev/md/dsk/d200\t/export/home\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=15400c8\t1161360012
/dev/md/dsk/d201\t/opt\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=15400c9\t1161360012
/dev/md/dsk/d300\t/var/crash\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=154012c\t1161360013
/dev/md/dsk/d50\t/data\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=1540032\t1161360013
/dev/md/dsk/d60\t/logs\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=154003c\t1161360014
swap\t/tmp\ttmpfs\txattr,dev=4740001\t1161360020
/dev/dsk/c0t0d0s4\t/scratch\tufs\trw,intr,largefiles,logging,xattr,onerror=panic,dev=800004\t1161360021
"""

SWAPTAB = """\
swapfile             dev  swaplo blocks   free
/dev/md/dsk/d1      85,1      16 2097136 2097136
"""

SYSTEM_DISK = {0: 4194304, 1: 2097152, 2: 71127180, 3: 20480, 7: 8388608}
SLICES = {
    "c0t0d0": SYSTEM_DISK,
    "c0t1d0": SYSTEM_DISK,
    "c1t0d0": {0: 10485760, 1: 10485760},
    "c1t1d0": {0: 10485760, 1: 8388608},
    "c2t0d0": {0: 2048000, 1: 1024000},
    "c2t1d0": {0: 2048000, 1: 1024000},
    "c2t2d0": {0: 2048000, 1: 1024000},
}


def prtvtoc_text(disk, slices):
    """Render a prtvtoc(1M) listing for `slices` (slice number -> block count)."""
    lines = [
        f"* /dev/rdsk/{disk}s2 partition map",
        "*",
        "* Dimensions:",
        "*     512 bytes/sector",
        "*",
        "*                          First     Sector    Last",
        "* Partition  Tag  Flags    Sector     Count    Sector  Mount Directory",
    ]
    first = 0
    for number, count in sorted(slices.items()):
        start = 0 if number == 2 else first
        lines.append(f"      {number}      2    00  {start:>9} {count:>9} {start + count - 1:>9}")
        if number != 2:
            first += count
    return "\n".join(lines) + "\n"


def write_sample(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "metastat-p.txt").write_text(METASTAT)
    (directory / "mnttab.txt").write_text(MNTTAB)
    (directory / "swaptab.txt").write_text(SWAPTAB)
    for disk, slices in SLICES.items():
        (directory / f"prtvtoc_{disk}s2.txt").write_text(prtvtoc_text(disk, slices))
    return directory


@pytest.fixture
def sample_dir(tmp_path):
    """A source directory laid out the way --sourcedir expects it."""
    return write_sample(tmp_path / "tapir")


@pytest.fixture
def sample_config(sample_dir):
    return Config(
        sourcedir=sample_dir,
        metastat=None,
        metastat_cmd="metastat -p",
        mnttab=None,
        swaptab=None,
        vtoc_dir=None,
        colour=False,
        log_level="DEBUG",
    )


@pytest.fixture
def svm(sample_config):
    """The sample host, fully loaded and propagated."""
    return load_svm(sample_config)


@pytest.fixture
def make_graph():
    """
    Build a graph from inline metastat text.
    `slices` maps disk -> {slice number: blocks}; `mounts` maps device -> mount point.
    """
    def _make(text, slices=None, mounts=None, colour=False):
        vtoc = Vtoc()
        for disk, table in (slices or {}).items():
            vtoc.disks[disk] = parse_prtvtoc(prtvtoc_text(disk, table))
        mnttab = Mnttab()
        mnttab.dev2mp.update(mounts or {})
        builder = GraphBuilder().readconfig(text.splitlines(keepends=True))
        return builder.freeze(vtoc=vtoc, mnttab=mnttab, colour=colour)
    return _make
