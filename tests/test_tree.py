from __future__ import annotations

import io

from pharinfo.model import ArchiveInfo, CompressionAlgorithm, FileEntry
from pharinfo.reporters.console import LinePrinter, make_console
from pharinfo.reporters.tree import render_content

GZ = CompressionAlgorithm.GZ
NONE = CompressionAlgorithm.NONE


def _archive(*paths, compression=GZ) -> ArchiveInfo:
    return ArchiveInfo(
        path="app.phar",
        size=0,
        files=[FileEntry(relative_path=p, compression=compression, compressed_size=100) for p in paths],
    )


def _render(archive: ArchiveInfo, max_depth=None, indent=True) -> list:
    buf = io.StringIO()
    render_content(LinePrinter(make_console(buf)), archive, max_depth, indent)
    return buf.getvalue().splitlines()


def test_directory_headers_printed_once():
    lines = _render(_archive("a/b/c.txt", "a/b/d.txt", "a/e.txt"))

    assert lines == [
        "a/",
        "  b/",
        "    c.txt [GZ] - 100 bytes",
        "    d.txt [GZ] - 100 bytes",
        "  e.txt [GZ] - 100 bytes",
    ]


def test_root_files_are_not_indented():
    lines = _render(_archive("src/main.php", "index.php"))

    assert lines == [
        "src/",
        "  main.php [GZ] - 100 bytes",
        "index.php [GZ] - 100 bytes",
    ]


def test_uncompressed_files_are_tagged_none():
    lines = _render(_archive("index.php", compression=NONE))
    assert lines == ["index.php [NONE] - 100 bytes"]


def test_max_depth_zero_lists_root_files_only():
    lines = _render(_archive("a/b/c.txt", "index.php", "a/e.txt", "box.json"), max_depth=0)

    assert lines == [
        "index.php [GZ] - 100 bytes",
        "box.json [GZ] - 100 bytes",
    ]


def test_max_depth_limits_nesting():
    lines = _render(_archive("a/b/c.txt", "a/e.txt"), max_depth=1)

    assert lines == [
        "a/",
        "  e.txt [GZ] - 100 bytes",
    ]


def test_flat_mode_prints_relative_paths():
    lines = _render(_archive("a/b/c.txt", "a/e.txt", "index.php"), indent=False)

    assert lines == [
        "a/b/c.txt [GZ] - 100 bytes",
        "a/e.txt [GZ] - 100 bytes",
        "index.php [GZ] - 100 bytes",
    ]


def test_directory_names_are_remembered_by_segment_not_path():
    # Known quirk: `b/` under `c/` is suppressed because `a/b/` was printed first.
    lines = _render(_archive("a/b/x.txt", "c/b/y.txt"))

    assert lines == [
        "a/",
        "  b/",
        "    x.txt [GZ] - 100 bytes",
        "c/",
        "    y.txt [GZ] - 100 bytes",
    ]


def test_each_call_starts_with_fresh_state():
    archive = _archive("a/x.txt")
    assert _render(archive) == _render(archive)


def test_duplicate_paths_use_their_own_metadata():
    archive = ArchiveInfo(
        path="app.phar",
        size=0,
        files=[
            FileEntry(relative_path="a.php", compression=NONE, compressed_size=1000),
            FileEntry(relative_path="a.php", compression=GZ, compressed_size=20),
        ],
    )

    assert _render(archive) == [
        "a.php [NONE] - 1.0 kB",
        "a.php [GZ] - 20 bytes",
    ]


def test_large_listing_reads_metadata_from_entries(monkeypatch):
    def fail(self, relative_path):
        raise AssertionError("per-file lookup")

    monkeypatch.setattr(ArchiveInfo, "get_file_meta", fail)
    paths = [f"d{i % 50}/f{i}.php" for i in range(5000)]

    lines = _render(_archive(*paths))

    assert len(lines) == 5000 + 50
    assert lines[0] == "d0/"
    assert lines[1] == "  f0.php [GZ] - 100 bytes"
