"""
graph.py
The frozen SVM configuration: device nodes, propagated membership maps, the
size calculator and the read-only queries.

Sizes are in 512-byte blocks and recomputed on every call:
  slice           block count from the partition table
  softpart        sum of its extents, whatever the backing device
  trans           largest member
  mirror          smallest member
  raid5           smallest member * (members - 1)
  everything else sum of members
"""

from __future__ import annotations
from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Optional, Set, Union

from . import __version__, report
from .errors import NoDevicesError
from .propagate import join_mounts, join_partitions, physdevs_closure, subdevice_closure
from .types import (
    DISK_RE,
    Device,
    DeviceKind,
    Extent,
    PartitionUse,
    SoftPartition,
    is_logical,
    is_slice,
)
from .util import numeric_suffix


def reduce_sizes(kind: DeviceKind, sizes: List[int]) -> int:
    if kind is DeviceKind.TRANS:
        return max(sizes)
    if kind is DeviceKind.MIRROR:
        return min(sizes)
    if kind is DeviceKind.RAID5:
        return min(sizes) * (len(sizes) - 1)
    return sum(sizes)


class SvmGraph:
    """Immutable after construction; build it with GraphBuilder.freeze()."""

    def __init__(
        self,
        metastat: Mapping[str, str],
        devices: Mapping[str, Device],
        spcontains: Mapping[str, Iterable[Extent]],
        partitions: Mapping[str, PartitionUse],
        physdevs: Mapping[str, FrozenSet[str]],
        dev2mp: Mapping[str, FrozenSet[str]],
        pdev2mp: Mapping[str, FrozenSet[str]],
        mp2dev: Mapping[str, str],
        vtoc=None,
        colour: bool = False,
    ):
        self.metastat = MappingProxyType(dict(metastat))
        self.devices = MappingProxyType(dict(devices))
        self.spcontains = MappingProxyType({k: tuple(v) for k, v in spcontains.items()})
        self.partitions = MappingProxyType(dict(partitions))
        self.physdevs = MappingProxyType(dict(physdevs))
        self.dev2mp = MappingProxyType(dict(dev2mp))
        self.pdev2mp = MappingProxyType(dict(pdev2mp))
        self.mp2dev = MappingProxyType(dict(mp2dev))
        self.vtoc = vtoc
        self.colour = colour
        self._subelements = {n: d.subelements for n, d in self.devices.items()}

    @classmethod
    def build(cls, builder, vtoc=None, mnttab=None, colour: bool = False) -> "SvmGraph":
        physdevs = physdevs_closure(builder.devices, list(builder.metastat))
        join_partitions(builder.partitions, vtoc)
        mounts = mnttab.dev2mp if mnttab is not None else {}
        dev2mp, pdev2mp, mp2dev = join_mounts(mounts, builder.devices, physdevs)
        return cls(
            builder.metastat,
            builder.devices,
            builder.spcontains,
            builder.partitions,
            physdevs,
            dev2mp,
            pdev2mp,
            mp2dev,
            vtoc=vtoc,
            colour=colour,
        )

    # sizes

    def size_of(self, dev: str) -> Optional[int]:
        """Size in blocks, or None when `dev` is unknown."""
        if is_slice(dev):
            use = self.partitions.get(dev)
            if use is not None and use.size is not None:
                return use.size
            return self.vtoc.size(dev) if self.vtoc is not None else None

        node = self.devices.get(dev)
        if node is None:
            return None
        if isinstance(node, SoftPartition):
            return node.size
        if node.subelements:
            sizes = [self.size(s) for s in node.subelements]
        elif node.leaves:
            sizes = [self.size(p) for p in sorted(node.leaves)]
        else:
            return 0
        return reduce_sizes(node.kind, sizes)

    def size(self, dev: str) -> int:
        """Size in blocks; 0 when unknown or empty."""
        return self.size_of(dev) or 0

    # structure

    def getsubdevs(self, *devs: str) -> Set[str]:
        subdevs: Set[str] = set()
        for dev in devs:
            subdevs |= subdevice_closure(self._subelements, dev)
        return subdevs

    def getphysdevs(self, *devs: str) -> Set[str]:
        pdevs: Set[str] = set()
        for dev in devs:
            if dev in self.metastat:
                pdevs |= self.physdevs.get(dev, frozenset())
        return pdevs

    def _physclosure(self, dev: str) -> Set[str]:
        if is_slice(dev):
            return {dev}
        return self.getphysdevs(dev)

    def getnextdev(self) -> int:
        """First free device number beyond the last one defined."""
        numbers = [numeric_suffix(d) for d in self.metastat if is_logical(d)]
        if not numbers:
            raise NoDevicesError("no metadevice defined, cannot suggest the next one")
        return max(numbers) + 1

    def isdevfree(self, dev: Union[str, int]) -> bool:
        dev = str(dev)
        if dev.isdigit():
            dev = f"d{dev}"
        return dev not in self.metastat

    # mount points

    def mponslice(self, slice_: str) -> Set[str]:
        return set(self.pdev2mp.get(slice_, ()))

    def mpondisk(self, disk: str) -> Set[str]:
        m = DISK_RE.search(disk)
        if m is None:
            return set()
        mps: Set[str] = set()
        for i in range(8):
            mps |= self.mponslice(f"{m.group(0)}s{i}")
        return mps

    def mpondev(self, dev: str) -> Set[str]:
        return set(self.dev2mp.get(dev, ()))

    def devs4mp(self, mp: str) -> Set[str]:
        dev = self.mp2dev.get(mp)
        if dev is None:
            return set()
        return {dev} | self.getsubdevs(dev)

    def disks4mp(self, mp: str) -> Set[str]:
        dev = self.mp2dev.get(mp)
        if dev is None:
            return set()
        return self._physclosure(dev)

    # reports

    def explaindev(self, *devs: str) -> str:
        return report.explaindev(self, *devs)

    def showconfig(self) -> str:
        return report.showconfig(self)

    def showsp(self, *devs: str) -> str:
        return report.showsp(self, *devs)

    def version(self) -> str:
        return __version__
