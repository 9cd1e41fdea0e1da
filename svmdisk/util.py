"""
util.py
Cross-cutting utilities:
- Process execution (list of args, stdout captured)
- Small helpers: block-to-MB conversion, numeric sort keys
"""

from __future__ import annotations
import re, subprocess


def run(argv):
    """
    Execute a command given as a list of arguments and capture its stdout.
    Returns (rc, output_str); rc is 127 when the program cannot be started.
    """
    try:
        out = subprocess.check_output(argv, stderr=subprocess.PIPE)
        return 0, out.decode("utf-8", "replace")
    except subprocess.CalledProcessError as e:
        return e.returncode, e.output.decode("utf-8", "replace") if e.output else ""
    except OSError as e:
        return 127, str(e)


def blocks_to_mb(blocks: int) -> int:
    """512-byte blocks to whole megabytes, truncating."""
    return blocks >> 11


def numeric_suffix(name: str) -> int:
    """d100 -> 100, hsp001 -> 1; -1 when there is no trailing number."""
    m = re.search(r"(\d+)$", name)
    return int(m.group(1)) if m else -1
