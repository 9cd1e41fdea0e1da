"""
Tests for prtvtoc parsing.
"""
import logging
from svmdisk.vtoc import Vtoc, parse_prtvtoc

PRTVTOC = """\
* /dev/rdsk/c0t0d0s2 partition map
*
* Dimensions:
*     512 bytes/sector
*     424 sectors/track
*
*                          First     Sector    Last
* Partition  Tag  Flags    Sector     Count    Sector  Mount Directory
       0      2    00    4194304   4194304   8388607   /
       1      3    01          0   4194304   4194303
       2      5    01          0  71127180  71127179
       7      0    00    8388608   8388608  16777215   /export/home
"""


def test_parse_prtvtoc():
    slices = parse_prtvtoc(PRTVTOC)
    assert sorted(slices) == [0, 1, 2, 7]
    root = slices[0]
    assert (root.tag, root.flags, root.first, root.count, root.last) == (2, "00", 4194304, 4194304, 8388607)
    assert root.mountpoint == "/"
    assert slices[1].mountpoint is None
    assert slices[7].mountpoint == "/export/home"


def test_parse_prtvtoc_ignores_garbage():
    assert parse_prtvtoc("* only comments\n\nnot a slice line\n") == {}


def test_readvtoc_disk_from_file_name(tmp_path):
    p = tmp_path / "c0t0d0.vtoc"
    p.write_text(PRTVTOC)
    vtoc = Vtoc()
    assert vtoc.readvtoc(p)
    assert vtoc.size("c0t0d0s0") == 4194304
    assert vtoc.size("c0t0d0s2") == 71127180
    assert vtoc.size("c0t0d0s5") is None
    assert vtoc.size("c9t0d0s0") is None
    assert vtoc.size("d10") is None


def test_readvtoc_explicit_disk(tmp_path):
    p = tmp_path / "system-disk.txt"
    p.write_text(PRTVTOC)
    vtoc = Vtoc()
    assert not vtoc.readvtoc(p)
    assert vtoc.readvtoc(p, disk="c5t0d0")
    assert vtoc.size("c5t0d0s7") == 8388608


def test_readvtoc_missing_file(tmp_path, caplog):
    vtoc = Vtoc()
    with caplog.at_level(logging.WARNING):
        assert not vtoc.readvtoc(tmp_path / "c0t0d0.vtoc")
    assert "Cannot read vtoc source" in caplog.text
    assert vtoc.disks == {}


def test_readvtocdir(tmp_path):
    (tmp_path / "prtvtoc_c0t0d0s2.txt").write_text(PRTVTOC)
    (tmp_path / "c1t0d0.vtoc").write_text(PRTVTOC)
    (tmp_path / "metastat-p.txt").write_text("d10 1 1 c0t0d0s0\n")
    (tmp_path / "c2t0d0").mkdir()
    vtoc = Vtoc()
    assert vtoc.readvtocdir(tmp_path) == 2
    assert sorted(vtoc.disks) == ["c0t0d0", "c1t0d0"]


def test_readvtocdir_missing(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        assert Vtoc().readvtocdir(tmp_path / "nope") == 0
    assert "Cannot read vtoc directory" in caplog.text
