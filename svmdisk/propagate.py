"""
propagate.py
Second pass over a fully classified configuration:
- Subdevice closure: every device reachable through sub-elements, at any depth
- Physical closure (PhysDevices4Dev): the slices under each logical device
- Partition join: block count of every used slice, read once
- Mount join: dev2mp / pdev2mp / mp2dev from the mount table

Logical devices may reference devices defined later in the dump, so nothing
here runs before every record has been classified.
"""

from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Mapping, Sequence, Set, Tuple

from .errors import CycleError
from .types import MOUNTABLE_RE, Device, PartitionUse, is_logical, is_slice

log = logging.getLogger("svmdisk.propagate")


def subdevice_closure(subelements: Mapping[str, Sequence[str]], dev: str) -> Set[str]:
    """
    Every id reachable from `dev` through sub-elements, `dev` excluded.
    Iterative depth-first walk; a back edge raises CycleError.
    """
    seen: Set[str] = set()
    onpath = {dev}
    stack = [(dev, iter(subelements.get(dev, ())))]
    while stack:
        node, children = stack[-1]
        for child in children:
            if child in onpath:
                raise CycleError(f"{node} refers back to {child}: configuration is not acyclic")
            if child in seen:
                continue
            seen.add(child)
            onpath.add(child)
            stack.append((child, iter(subelements.get(child, ()))))
            break
        else:
            stack.pop()
            onpath.discard(node)
    return seen


def physdevs_closure(
    devices: Mapping[str, Device], names: Sequence[str]
) -> Dict[str, FrozenSet[str]]:
    """PhysDevices4Dev for every logical id in `names`."""
    subelements = {n: d.subelements for n, d in devices.items()}
    phys: Dict[str, FrozenSet[str]] = {}
    for dev in names:
        if not is_logical(dev):
            continue
        pdevs: Set[str] = set()
        for sdev in {dev} | subdevice_closure(subelements, dev):
            node = devices.get(sdev)
            if node is not None:
                pdevs.update(node.leaves)
        phys[dev] = frozenset(pdevs)
    return phys


def join_partitions(partitions: Mapping[str, PartitionUse], vtoc) -> None:
    """Cache the block count of every used slice. Unknown slices stay None."""
    if vtoc is None:
        return
    for slice_ in partitions:
        partitions[slice_].size = vtoc.size(slice_)
        if partitions[slice_].size is None:
            log.debug("no partition table entry for %s", slice_)


def join_mounts(
    mounts: Mapping[str, str],
    devices: Mapping[str, Device],
    phys: Mapping[str, FrozenSet[str]],
) -> Tuple[Dict[str, FrozenSet[str]], Dict[str, FrozenSet[str]], Dict[str, str]]:
    """Return (dev2mp, pdev2mp, mp2dev)."""
    subelements = {n: d.subelements for n, d in devices.items()}
    dev2mp: Dict[str, Set[str]] = defaultdict(set)
    pdev2mp: Dict[str, Set[str]] = defaultdict(set)
    mp2dev: Dict[str, str] = {}

    for dev, mnt in mounts.items():
        if not MOUNTABLE_RE.fullmatch(dev):
            continue
        dev2mp[dev].add(mnt)
        mp2dev[mnt] = dev
        for subdev in subdevice_closure(subelements, dev):
            dev2mp[subdev].add(mnt)
        if is_slice(dev):
            # a slice is its own physical closure; devices built on it overlap the mount
            pdev2mp[dev].add(mnt)
            for ldev, pdevs in phys.items():
                if dev in pdevs:
                    dev2mp[ldev].add(mnt)
        else:
            for pdev in phys.get(dev, ()):
                pdev2mp[pdev].add(mnt)

    return (
        {k: frozenset(v) for k, v in dev2mp.items()},
        {k: frozenset(v) for k, v in pdev2mp.items()},
        mp2dev,
    )
