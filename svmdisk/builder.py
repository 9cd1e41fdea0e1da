"""
builder.py
Classifies raw 'metastat -p' records into device nodes.

GraphBuilder accumulates the raw table, one node per recognised device, the
soft-partition extents per container and the slice use counters. freeze()
runs the propagation pass and hands back an immutable SvmGraph.

Recognised descriptions (first match wins):
  -p ...          soft partition   d30 -p d10 -o 1 -b 2097152
  -r ...          raid5            d50 -r c1t0d0s0 c2t0d0s0 c3t0d0s0 -k -i 32b
  -t ...          trans            d60 -t d61 d62
  -m ...          mirror           d0 -m d10 d20 1
  <n> ...         device/stripe/concat/concat+stripe
                                   d10 1 1 c0t0d0s0
                                   d11 2 1 c0t0d0s1 1 c1t0d0s1 -i 32b
  hsp<n> [disks]  hot spare pool   hsp001 c2t0d0s0 c3t0d0s0
"""

from __future__ import annotations
import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from .graph import SvmGraph
from .metastat import iter_records
from .types import (
    Device,
    DeviceKind,
    Extent,
    HotSparePool,
    Mirror,
    PartitionUse,
    Raid5,
    SoftPartition,
    Striped,
    Trans,
    is_hotspare,
    is_logical,
    is_slice,
)

log = logging.getLogger("svmdisk.builder")


class MalformedRecord(ValueError):
    pass


def _take(toks: Deque[str], what: str) -> str:
    if not toks:
        raise MalformedRecord(f"missing {what}")
    return toks.popleft()


def _take_int(toks: Deque[str], what: str) -> int:
    tok = _take(toks, what)
    if not tok.isdigit():
        raise MalformedRecord(f"expected {what}, got '{tok}'")
    return int(tok)


def _skip_interlace(toks: Deque[str]) -> None:
    """Drop inline '-i <value>' pairs at the head of the token queue."""
    while toks and toks[0] == "-i":
        toks.popleft()
        _take(toks, "interlace value")


def striped_kind(columns: int, rows: int) -> DeviceKind:
    if columns == 1 and rows == 1:
        return DeviceKind.DEVICE
    if columns > 1 and rows == 1:
        return DeviceKind.STRIPE
    if columns == 1 and rows > 1:
        return DeviceKind.CONCAT
    return DeviceKind.CONCAT_STRIPE


class GraphBuilder:
    def __init__(self):
        self.metastat: Dict[str, str] = {}
        self.devices: Dict[str, Device] = {}
        self.spcontains: Dict[str, List[Extent]] = {}
        self.partitions: Dict[str, PartitionUse] = {}

    def readconfig(self, lines: Iterable[str]) -> "GraphBuilder":
        for dev, desc in iter_records(lines):
            self.add(dev, desc)
        return self

    def add(self, dev: str, desc: str) -> Optional[Device]:
        """Record one raw description and classify it. First definition wins."""
        if dev in self.metastat:
            log.warning("%s is already defined, and one more definition is given", dev)
            return None
        self.metastat[dev] = desc
        return self.createobject(dev, desc)

    def createobject(self, dev: str, desc: str) -> Optional[Device]:
        tokens = desc.split()
        try:
            if is_logical(dev):
                node = self._logical(dev, tokens)
            elif is_hotspare(dev):
                node = self._hotspare(dev, tokens)
            else:
                log.warning("%s is not a metadevice nor a hot spare pool, kept unparsed", dev)
                return None
        except MalformedRecord as e:
            if tokens and tokens[0].startswith("-p"):
                log.warning("Incomplete definition for %s (%s), discarded", dev, e)
                del self.metastat[dev]
            else:
                log.warning("Incomplete definition for %s (%s), kept unparsed", dev, e)
            return None
        if node is not None:
            self.devices[dev] = node
        return node

    def _logical(self, dev: str, tokens: List[str]) -> Optional[Device]:
        lead = tokens[0] if tokens else ""
        if lead.startswith("-p"):
            return self._softpart(dev, tokens)
        if lead.startswith("-r"):
            return self._raid5(dev, tokens[1:])
        if lead.startswith("-t"):
            return self._trans(dev, tokens[1:])
        if lead.startswith("-m"):
            return self._mirror(dev, tokens[1:])
        if lead[:1].isdigit():
            return self._striped(dev, tokens)
        log.warning("%s: unrecognised description '%s', kept unparsed", dev, " ".join(tokens))
        return None

    def _use(self, slices: Iterable[str]) -> None:
        for s in slices:
            self.partitions.setdefault(s, PartitionUse()).use += 1

    def _softpart(self, dev: str, tokens: List[str]) -> SoftPartition:
        toks = deque(tokens)
        backing = None
        offsets: List[int] = []
        sizes: List[int] = []
        while toks:
            opt = toks.popleft()
            if opt == "-p":
                if backing is not None:
                    raise MalformedRecord("more than one backing device")
                backing = _take(toks, "backing device")
            elif opt == "-o":
                offsets.append(_take_int(toks, "offset"))
            elif opt == "-b":
                sizes.append(_take_int(toks, "size"))
        if backing is None or not offsets or not sizes or len(offsets) != len(sizes):
            raise MalformedRecord("soft partition needs a device and offset/size pairs")

        extents = tuple(Extent(o, s, dev) for o, s in zip(offsets, sizes))
        self.spcontains.setdefault(backing, []).extend(extents)
        if is_slice(backing):
            self._use([backing])
            subs, leaves = (), frozenset([backing])
        else:
            subs, leaves = (backing,), frozenset()

        explanation = "%s is a soft partition (dev=%s, size=%d, offset={%s})" % (
            dev,
            backing,
            sum(sizes),
            ", ".join(str(o) for o in offsets),
        )
        return SoftPartition(
            dev, DeviceKind.SOFTPART, explanation, subs, leaves,
            backing=backing, extents=extents,
        )

    def _raid5(self, dev: str, tokens: List[str]) -> Raid5:
        toks = deque(tokens)
        subs: List[str] = []
        leaves: List[str] = []
        elements: List[str] = []
        kflag = False
        iflag = oflag = None
        while toks:
            el = toks.popleft()
            if is_logical(el):
                subs.append(el)
                elements.append(el)
            elif is_slice(el):
                leaves.append(el)
                elements.append(el)
            elif el == "-k":
                kflag = True
            elif el == "-i":
                iflag = _take(toks, "interlace value")
            elif el == "-o":
                oflag = _take(toks, "original column count")
        self._use(leaves)
        columns = len(elements)
        return Raid5(
            dev, DeviceKind.RAID5,
            f"{dev} is a raid5 with {columns} columns ({' '.join(elements)})",
            tuple(subs), frozenset(leaves),
            columns=columns, kflag=kflag, iflag=iflag, oflag=oflag,
        )

    def _trans(self, dev: str, tokens: List[str]) -> Trans:
        subs = tuple(t for t in tokens if is_logical(t))
        return Trans(
            dev, DeviceKind.TRANS, f"{dev} is a trans ({' '.join(subs)})", subs,
            columns=len(subs),
        )

    def _mirror(self, dev: str, tokens: List[str]) -> Mirror:
        subs = tuple(t for t in tokens if is_logical(t))
        if len(subs) == 1:
            log.info("mirror %s has only one side", dev)
        return Mirror(
            dev, DeviceKind.MIRROR, f"{dev} is a mirror ({' '.join(subs)})", subs,
            sides=len(subs),
        )

    def _striped(self, dev: str, tokens: List[str]) -> Striped:
        toks = deque(tokens)
        nstripe = _take_int(toks, "column count")
        if nstripe < 1:
            raise MalformedRecord("no column")
        maxconcat = 0
        subs: List[str] = []
        leaves: List[str] = []
        elements: List[str] = []
        for _ in range(nstripe):
            _skip_interlace(toks)
            cstripe = _take_int(toks, "row count")
            if cstripe < 1:
                raise MalformedRecord("empty column")
            maxconcat = max(maxconcat, cstripe)
            for _ in range(cstripe):
                _skip_interlace(toks)
                el = _take(toks, "element")
                if is_logical(el):
                    subs.append(el)
                elif is_slice(el):
                    leaves.append(el)
                else:
                    log.warning("%s: unknown element '%s' ignored", dev, el)
                    continue
                elements.append(el)

        iflag = hsp = None
        while toks:
            opt = toks.popleft()
            if opt == "-i":
                iflag = _take(toks, "interlace value")
            elif opt == "-h":
                hsp = _take(toks, "hot spare pool")
            else:
                log.debug("%s: ignoring trailing token '%s'", dev, opt)

        self._use(leaves)
        kind = striped_kind(nstripe, maxconcat)
        return Striped(
            dev, kind, f"{dev} is a {kind} ({' '.join(elements)})",
            tuple(subs), frozenset(leaves),
            columns=nstripe, rows=maxconcat, iflag=iflag, hsp=hsp,
        )

    def _hotspare(self, dev: str, tokens: List[str]) -> HotSparePool:
        if tokens:
            explanation = f"{dev} is a hotspare ({' '.join(tokens)})"
        else:
            explanation = f"{dev} is a hotspare without any disk"
        return HotSparePool(dev, DeviceKind.HOTSPARE, explanation, disks=tuple(tokens))

    def freeze(self, vtoc=None, mnttab=None, colour: bool = False):
        """Run the propagation pass and return the immutable graph."""
        return SvmGraph.build(self, vtoc=vtoc, mnttab=mnttab, colour=colour)
