from __future__ import annotations

from typing import Optional, Set

from rich.markup import escape

from pharinfo.model import ArchiveInfo, CompressionAlgorithm, FileEntry
from pharinfo.reporters.console import LinePrinter, format_size


def _compression_tag(compression: CompressionAlgorithm) -> str:
    if compression is CompressionAlgorithm.NONE:
        return "[red]\\[NONE][/red]"
    return f"[cyan]\\[{compression.value}][/cyan]"


def _render_parent_directories(
    entry: FileEntry,
    printer: LinePrinter,
    rendered_directories: Set[str],
) -> int:
    """
    Prints the directory headers of `entry` that were not printed yet and
    returns the depth at which the file itself goes.

    Directories are remembered by bare name, so `c/b/` after `a/b/` does not
    print `b/` again.
    """
    parents = entry.parent_directories
    for index, directory in enumerate(parents):
        if directory in rendered_directories:
            continue
        printer.line(f"[info]{escape(directory)}/[/info]", depth=index, indent=True)
        rendered_directories.add(directory)
    return len(parents)


def render_content(
    printer: LinePrinter,
    archive: ArchiveInfo,
    max_depth: Optional[int],
    indent: bool,
) -> None:
    """
    Lists the archive files in stored order.

    max_depth: files nested deeper than this many directories are skipped,
        None lists everything.
    indent: print a tree with directory headers instead of full relative paths.
    """
    depth = 0
    rendered_directories: Set[str] = set()

    for entry in archive.get_files():
        if max_depth is not None and entry.depth > max_depth:
            continue

        if indent:
            depth = _render_parent_directories(entry, printer, rendered_directories)

        name = entry.filename if indent else entry.relative_path

        printer.line(
            f"{escape(name)} {_compression_tag(entry.compression)} - {format_size(entry.compressed_size)}",
            depth=depth,
            indent=indent,
        )
