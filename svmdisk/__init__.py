"""
svmdisk package
- Reads a Solaris Volume Manager configuration ('metastat -p'), the mount table and
  disk partition tables, and answers questions about devices, disks and mount points.
"""
__all__ = ["cli", "config", "orchestrator", "metastat", "builder", "propagate", "graph", "report", "vtoc", "mnttab", "util", "types", "errors", "bundle"]
__version__ = "0.3.0"
