from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from rich.markup import escape

from pharinfo.compression import summarize_compression
from pharinfo.model import ArchiveInfo
from pharinfo.reporters.console import LinePrinter, format_size
from pharinfo.requirements import (
    MalformedRequirementError,
    Requirement,
    decode_descriptor,
    format_conflicting,
    format_required,
    partition_requirements,
)

logger = logging.getLogger(__name__)

REQUIREMENTS_DESCRIPTOR = ".box/.requirements.json"

Section = Callable[[ArchiveInfo, LinePrinter], None]


def render_short_summary(
    archive: ArchiveInfo,
    printer: LinePrinter,
    separator: Optional[Callable[[], None]] = None,
    *,
    requirements_path: str = REQUIREMENTS_DESCRIPTOR,
) -> None:
    """
    Renders every summary section in a fixed order.
    `separator` is called between two sections, not after the last one.
    """

    def requirement_checker(a: ArchiveInfo, p: LinePrinter) -> None:
        render_requirement_checker(a, p, requirements_path=requirements_path)

    sections: List[Section] = [
        render_compression,
        render_signature,
        render_metadata,
        render_timestamp,
        requirement_checker,
        render_contents_summary,
    ]

    last_index = len(sections) - 1
    for index, section in enumerate(sections):
        section(archive, printer)
        if separator is not None and index != last_index:
            separator()


def render_version(archive: ArchiveInfo, printer: LinePrinter) -> None:
    printer.line(f"[comment]API Version:[/comment] {escape(archive.version)}")


def render_compression(archive: ArchiveInfo, printer: LinePrinter) -> None:
    printer.line(f"[comment]Archive Compression:[/comment] {archive.compression.display_name}")

    buckets = summarize_compression(archive.files_compression_count())

    if len(buckets) == 1:
        printer.line(f"[comment]Files Compression:[/comment] {buckets[0].label}")
        return

    printer.line("[comment]Files Compression:[/comment]")
    for bucket in buckets:
        printer.line(f"  - {bucket.label} ({bucket.percentage:.2f}%)")


def render_signature(archive: ArchiveInfo, printer: LinePrinter) -> None:
    signature = archive.signature
    if signature is None:
        printer.line("[comment]Signature unreadable[/comment]")
        return

    printer.line(f"[comment]Signature:[/comment] {escape(signature.hash_type)}")
    printer.line(f"[comment]Signature Hash:[/comment] {escape(signature.hash)}")


def render_metadata(archive: ArchiveInfo, printer: LinePrinter) -> None:
    if archive.metadata is None:
        printer.line("[comment]Metadata:[/comment] None")
        return

    printer.line("[comment]Metadata:[/comment]")
    printer.verbatim(archive.metadata)


def format_timestamp(timestamp: int) -> Optional[str]:
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
    except (OverflowError, ValueError, OSError):
        logger.warning("Timestamp %d is out of range for a date.", timestamp)
        return None


def render_timestamp(archive: ArchiveInfo, printer: LinePrinter) -> None:
    formatted = format_timestamp(archive.timestamp)
    if formatted is None:
        printer.line(f"[comment]Timestamp:[/comment] {archive.timestamp}")
        return

    printer.line(f"[comment]Timestamp:[/comment] {archive.timestamp} ({formatted})")


def render_requirement_checker(
    archive: ArchiveInfo,
    printer: LinePrinter,
    *,
    requirements_path: str = REQUIREMENTS_DESCRIPTOR,
) -> None:
    descriptor = archive.get_file(requirements_path)
    if descriptor is None:
        printer.line("[comment]RequirementChecker:[/comment] Not found.")
        return

    records = decode_descriptor(descriptor.content)
    if records is None:
        printer.line("[comment]RequirementChecker:[/comment] Could not be checked.")
        return

    if not records:
        printer.line("[comment]RequirementChecker:[/comment] No requirement found.")
        return

    try:
        required, conflicting = partition_requirements(records)
    except MalformedRequirementError as e:
        logger.warning("Skipping requirement checker section: %s", e)
        printer.line("[comment]RequirementChecker:[/comment] Could not be checked.")
        return

    printer.line("[comment]RequirementChecker:[/comment]")
    _render_required_section(required, printer)
    _render_conflicting_section(conflicting, printer)


def _render_required_section(required: List[Requirement], printer: LinePrinter) -> None:
    if not required:
        return

    printer.line("  [comment]Required:[/comment]")
    for requirement in required:
        printer.line(f"  - {escape(format_required(requirement))}")


def _render_conflicting_section(conflicting: List[Requirement], printer: LinePrinter) -> None:
    if not conflicting:
        return

    printer.line("  [comment]Conflict:[/comment]")
    for requirement in conflicting:
        printer.line(f"  - {escape(format_conflicting(requirement))}")


def render_contents_summary(archive: ArchiveInfo, printer: LinePrinter) -> None:
    total = sum(n for n in archive.files_compression_count().values() if n)
    files = "1 file" if total == 1 else f"{total} files"

    printer.line(f"[comment]Contents:[/comment] {files} ({format_size(archive.archive_size())})")
