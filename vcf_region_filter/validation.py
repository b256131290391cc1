"""Version-line validation and header extraction for VCF inputs."""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass, field
from typing import List, Optional

from .filtering import CHROM_IDX, is_comment_line
from .io_utils import open_vcf
from .logging_utils import VCFFormatError, handle_critical_error, log_message
from .reader import TabularReader

VCF_VERSION_PATTERN = re.compile(r"##fileformat=VCFv4")
COLUMN_HEADER_TOKEN = "#CHROM"

# Errors that mean a compressed stream is truncated or not gzip at all.
STREAM_ERRORS = (OSError, EOFError, zlib.error)


@dataclass
class VCFHeader:
    """The version line and ``#`` header lines of a VCF file."""

    path: str
    version_line: str
    lines: List[str] = field(default_factory=list)
    """Raw header lines (terminators included), ending with the ``#CHROM`` row."""

    @property
    def column_line(self) -> Optional[str]:
        return self.lines[-1] if self.lines else None

    def render(self) -> str:
        """Return the header exactly as it is echoed before any records."""
        return self.version_line + "\n" + "".join(self.lines)


def is_vcf_version_line(line: Optional[str]) -> bool:
    if not line:
        return False
    return VCF_VERSION_PATTERN.search(line) is not None


def validate_version_line(line: Optional[str], path: str) -> str:
    """Return *line* if it declares VCFv4, otherwise raise :class:`VCFFormatError`."""
    if not is_vcf_version_line(line):
        handle_critical_error(
            f"Not a VCF file: {path} (version line {line!r})",
            exc_cls=VCFFormatError,
        )
    return line  # type: ignore[return-value]


def open_validated_reader(handle, path: str) -> TabularReader:
    """Wrap *handle* in a reader positioned after a validated version line."""
    reader = TabularReader(handle)
    try:
        version_line = reader.detect_end_of_line()
    except STREAM_ERRORS as exc:
        handle_critical_error(
            f"Failed to read version line from {path}: {exc}",
            exc_cls=VCFFormatError,
            exc_info=exc,
        )
    validate_version_line(version_line, path)
    return reader


def extract_header(path: str, verbose: bool = False) -> VCFHeader:
    """Read the version line and header block of *path*.

    Every ``#``-prefixed line after the version line is collected up to and
    including the ``#CHROM`` column row. A file without that row raises
    :class:`VCFFormatError`.
    """

    try:
        handle = open_vcf(path)
    except OSError as exc:
        handle_critical_error(
            f"Couldn't open {path}: {exc}", exc_cls=VCFFormatError, exc_info=exc
        )

    with handle:
        reader = open_validated_reader(handle, path)
        header = VCFHeader(path=path, version_line=reader.version_line)
        found = False
        try:
            for line, columns in reader:
                if not is_comment_line(line):
                    continue
                header.lines.append(line)
                if columns[CHROM_IDX] == COLUMN_HEADER_TOKEN:
                    found = True
                    break
        except STREAM_ERRORS as exc:
            handle_critical_error(
                f"Failed while reading header of {path}: {exc}",
                exc_cls=VCFFormatError,
                exc_info=exc,
            )

    if not found:
        handle_critical_error(f"No header found in {path}", exc_cls=VCFFormatError)

    log_message(
        f"Header from {path}: {header.version_line} with {len(header.lines)} header line(s)",
        verbose,
    )
    return header


__all__ = [
    "COLUMN_HEADER_TOKEN",
    "STREAM_ERRORS",
    "VCFHeader",
    "VCF_VERSION_PATTERN",
    "extract_header",
    "is_vcf_version_line",
    "open_validated_reader",
    "validate_version_line",
]
