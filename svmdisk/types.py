"""
types.py
Dataclasses used across modules: Config, the device node variants, Extent,
PartitionUse and Slice.

Device nodes are frozen: a node's kind is decided once by the builder and
never changes afterwards.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, FrozenSet

LOGICAL_RE = re.compile(r"d\d+")
HOTSPARE_RE = re.compile(r"hsp\d+")
SLICE_RE = re.compile(r"c\d+t\d+d\d+s\d+")
DISK_RE = re.compile(r"c\d+t\d+d\d+")
# keys of the mount table that the propagator joins against
MOUNTABLE_RE = re.compile(r"d\d+|c\d+t\d+d\d+(?:s\d+)?")


def is_logical(name: str) -> bool:
    return LOGICAL_RE.fullmatch(name) is not None


def is_hotspare(name: str) -> bool:
    return HOTSPARE_RE.fullmatch(name) is not None


def is_slice(name: str) -> bool:
    return SLICE_RE.fullmatch(name) is not None


@dataclass
class Config:
    # sources
    sourcedir: Optional[Path]
    metastat: Optional[Path]
    metastat_cmd: str
    mnttab: Optional[Path]
    swaptab: Optional[Path]
    vtoc_dir: Optional[Path]
    # output
    colour: bool
    # runtime
    log_level: str


class DeviceKind(Enum):
    DEVICE = "device"
    CONCAT = "concat"
    STRIPE = "stripe"
    CONCAT_STRIPE = "concat+stripe"
    MIRROR = "mirror"
    RAID5 = "raid5"
    TRANS = "trans"
    SOFTPART = "softpart"
    HOTSPARE = "hotspare"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Extent:
    offset: int
    size: int
    owner: str


@dataclass(frozen=True)
class Device:
    name: str
    kind: DeviceKind
    explanation: str = ""
    subelements: Tuple[str, ...] = ()
    leaves: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Striped(Device):
    """device, stripe, concat or concat+stripe"""
    columns: int = 0
    rows: int = 0
    iflag: Optional[str] = None
    hsp: Optional[str] = None


@dataclass(frozen=True)
class Mirror(Device):
    sides: int = 0


@dataclass(frozen=True)
class Raid5(Device):
    columns: int = 0
    kflag: bool = False
    iflag: Optional[str] = None
    oflag: Optional[str] = None


@dataclass(frozen=True)
class Trans(Device):
    columns: int = 0


@dataclass(frozen=True)
class SoftPartition(Device):
    backing: str = ""
    extents: Tuple[Extent, ...] = ()

    @property
    def size(self) -> int:
        return sum(e.size for e in self.extents)


@dataclass(frozen=True)
class HotSparePool(Device):
    disks: Tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.disks)


@dataclass
class PartitionUse:
    use: int = 0
    size: Optional[int] = None


@dataclass(frozen=True)
class Slice:
    number: int
    tag: int
    flags: str
    first: int
    count: int
    last: int
    mountpoint: Optional[str] = field(default=None)
