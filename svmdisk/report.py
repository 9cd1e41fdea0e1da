"""
report.py
Human-readable rendering of a frozen SvmGraph:
- explaindev: one line per known device with its size
- showconfig: every device, then every hot spare pool, in numeric order
- showsp: soft-partition layout of each container, with free gaps

Sizes are shown in MB (blocks >> 11). Output is plain text; free space is
green and exhausted containers red when the graph has colour enabled.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List

from .types import is_hotspare, is_logical, is_slice
from .util import blocks_to_mb, numeric_suffix

if TYPE_CHECKING:
    from .graph import SvmGraph

log = logging.getLogger("svmdisk.report")


class Colour:
    RED = "\033[91m"
    GREEN = "\033[92m"
    RESET = "\033[0m"


SP_HEADER = "Partition | Device |     Offset |        End |       Size            | Mountpoint"
SP_RULE = "----------+--------+------------+------------+-----------------------------------"


def _paint(text: str, colour: str, enabled: bool) -> str:
    if enabled:
        return f"{colour}{text}{Colour.RESET}"
    return text


def explaindev(graph: "SvmGraph", *devs: str) -> str:
    lines = []
    for dev in devs:
        node = graph.devices.get(dev)
        if node is None:
            continue
        lines.append(f"{node.explanation}. It is {blocks_to_mb(graph.size(dev))} MB large")
    return "\n".join(lines)


def showconfig(graph: "SvmGraph") -> str:
    devs = sorted((d for d in graph.devices if is_logical(d)), key=numeric_suffix)
    hsps = sorted((d for d in graph.devices if is_hotspare(d)), key=numeric_suffix)

    lines = ["SVM Configuration:"]
    for dev in devs:
        node = graph.devices[dev]
        lines.append(
            f"{dev} ({node.kind}): {node.explanation} [{blocks_to_mb(graph.size(dev))} MB]"
        )
    for dev in hsps:
        node = graph.devices[dev]
        lines.append(f"{dev} ({node.kind}): {node.explanation}")
    return "\n".join(lines)


def _free_row(dev: str, start: int, end: int, size: int) -> str:
    return "%-9s | *FREE* | %10d | %10d | %10d (%5d MB) | free" % (
        dev, start, end, size, blocks_to_mb(size),
    )


def showsp(graph: "SvmGraph", *devs: str) -> str:
    """
    Layout of the given soft-partition containers (slices or metadevices),
    all of them when none is given. A gap of more than 2 blocks between two
    extents is shown as free space.
    """
    lines: List[str] = []
    for dev in sorted(devs or graph.spcontains):
        extents = graph.spcontains.get(dev)
        if not extents:
            continue
        lines.append("")
        lines.append(f"---- Soft partitions on {dev} ----")
        lines.append(SP_HEADER)
        lines.append(SP_RULE)

        tsize = 0
        precendblock = -1
        for ext in sorted(extents, key=lambda e: e.offset):
            endblock = ext.offset + ext.size - 1
            if ext.offset - precendblock > 2:
                lines.append(_paint(
                    _free_row(dev, precendblock + 2, ext.offset - 2, ext.offset - precendblock - 3),
                    Colour.GREEN, graph.colour,
                ))
            lines.append("%-9s |  %5s | %10d | %10d | %10d (%5d MB) | %s" % (
                dev,
                ext.owner,
                ext.offset,
                endblock,
                ext.size,
                blocks_to_mb(ext.size),
                " ".join(sorted(graph.mpondev(ext.owner))),
            ))
            tsize += ext.size
            # overlapping extents never reopen a gap
            precendblock = max(precendblock, endblock)

        capacity = graph.size(dev)
        if is_slice(dev):
            free = capacity - (precendblock + 2)
        else:
            free = capacity - precendblock - 1
        if free > 0:
            lines.append(_paint(
                _free_row(dev, precendblock + 2, capacity, free), Colour.GREEN, graph.colour,
            ))
        else:
            lines.append(_paint(
                "%-9s | No more free space..." % dev, Colour.RED, graph.colour,
            ))
        if precendblock + 1 > capacity:
            log.warning(
                "%s: more space allocated to soft partitions than available (%d > %d blocks)",
                dev, precendblock + 1, capacity,
            )

        lines.append(SP_RULE)
        lines.append("Total space used   |            |            | %10d (%5d MB)" % (
            tsize, blocks_to_mb(tsize),
        ))
    return "\n".join(lines)
