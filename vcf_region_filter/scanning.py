"""Per-file scan: read one VCF shard and publish records inside the intervals."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Sequence

from .filtering import (
    ALT_IDX,
    CHROM_IDX,
    MIN_RECORD_COLUMNS,
    POS_IDX,
    REF_IDX,
    is_comment_line,
    passes_filter,
)
from .intervals import IntervalIndex, canonicalize_chromosome, parse_coordinate
from .io_utils import open_vcf
from .logging_utils import VCFFormatError, handle_critical_error, log_message
from .validation import STREAM_ERRORS, open_validated_reader

KEY_SEPARATOR = "_"


class ResultMessage(NamedTuple):
    """A matching record on its way from a worker to the consumer."""

    key: str
    line: str


@dataclass
class ScanStats:
    path: str
    records: int = 0
    passing: int = 0
    hits: int = 0
    cancelled: bool = False


def make_variant_key(chrom: str, pos: str, ref: str, alt: str) -> str:
    """Return the dedup identity ``chrom_pos_ref_alt``."""
    return KEY_SEPARATOR.join((chrom, pos, ref, alt))


def _parse_position(columns: Sequence[str], path: str) -> int:
    try:
        return parse_coordinate(columns[POS_IDX])
    except ValueError as exc:
        handle_critical_error(
            f"Invalid POS {columns[POS_IDX]!r} in {path}",
            exc_cls=VCFFormatError,
            exc_info=exc,
        )


def scan_vcf(
    path: str,
    index: IntervalIndex,
    publish: Callable[[ResultMessage], None],
    cancel_event: Optional[threading.Event] = None,
    verbose: bool = False,
) -> ScanStats:
    """Scan *path* and call *publish* for every PASS record inside *index*.

    The version line is validated before any record is read. Comment lines,
    non-PASS records and records on chromosomes absent from the index are
    skipped silently. A malformed POS, a record too short to carry a FILTER
    column, or a corrupt stream raises :class:`VCFFormatError`. When
    *cancel_event* is set the scan stops at the next record boundary.
    """

    stats = ScanStats(path=path)
    try:
        handle = open_vcf(path)
    except OSError as exc:
        handle_critical_error(
            f"Couldn't open {path}: {exc}", exc_cls=VCFFormatError, exc_info=exc
        )

    with handle:
        reader = open_validated_reader(handle, path)
        try:
            for line, columns in reader:
                if cancel_event is not None and cancel_event.is_set():
                    stats.cancelled = True
                    break
                if is_comment_line(line) or columns == [""]:
                    continue
                stats.records += 1
                if len(columns) < MIN_RECORD_COLUMNS:
                    handle_critical_error(
                        f"Malformed record in {path}: expected at least "
                        f"{MIN_RECORD_COLUMNS} columns, found {len(columns)}",
                        exc_cls=VCFFormatError,
                    )
                if not passes_filter(columns):
                    continue
                stats.passing += 1

                chrom = canonicalize_chromosome(columns[CHROM_IDX])
                bucket = index.chromosomes.get(chrom)
                if bucket is None:
                    continue

                position = _parse_position(columns, path)
                if not bucket.contains(position):
                    continue

                key = make_variant_key(
                    chrom, columns[POS_IDX], columns[REF_IDX], columns[ALT_IDX]
                )
                stats.hits += 1
                publish(ResultMessage(key, line))
        except STREAM_ERRORS as exc:
            handle_critical_error(
                f"Failed while reading {path}: {exc}",
                exc_cls=VCFFormatError,
                exc_info=exc,
            )

    log_message(
        f"Scanned {path}: {stats.records} record(s), {stats.passing} PASS, "
        f"{stats.hits} in intervals" + (" (cancelled)" if stats.cancelled else ""),
        verbose,
        level=logging.DEBUG,
    )
    return stats


__all__ = ["KEY_SEPARATOR", "ResultMessage", "ScanStats", "make_variant_key", "scan_vcf"]
