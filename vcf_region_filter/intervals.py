"""Interval index construction and position containment queries.

The interval file is a BED-like, tab-separated table of ``chrom``, ``start``
and ``end`` columns. Chromosome names are canonicalised to carry the ``chr``
prefix so that ``1`` and ``chr1`` share one bucket. Intervals are inclusive at
both ends and are kept exactly as read: overlapping or nested intervals are
never merged.

Each chromosome keeps its intervals sorted by start together with a running
maximum of the end coordinates. A containment query bisects the starts to find
every interval that could begin at or before the position, and the running
maximum tells whether any of them reaches it. This answers "is the position
inside ANY interval" in logarithmic time regardless of overlaps.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .logging_utils import (
    ConfigurationError,
    IntervalFormatError,
    handle_critical_error,
    log_message,
)

CHROM_PREFIX = "chr"
# ASCII digits only: no underscores, surrounding whitespace or non-ASCII numerals.
COORDINATE_PATTERN = re.compile(r"[+-]?[0-9]+")


def canonicalize_chromosome(name: str) -> str:
    """Return *name* with the ``chr`` prefix, adding it when missing."""
    if name.startswith(CHROM_PREFIX):
        return name
    return CHROM_PREFIX + name


def parse_coordinate(text: str) -> int:
    """Parse a decimal coordinate, raising ValueError for anything but ASCII digits."""
    if not COORDINATE_PATTERN.fullmatch(text):
        raise ValueError(f"invalid coordinate: {text!r}")
    return int(text)


@dataclass(frozen=True)
class Interval:
    """An inclusive ``[start, end]`` range on one chromosome."""

    start: int
    end: int


class ChromosomeIntervals:
    """Start-sorted intervals for a single chromosome."""

    __slots__ = ("intervals", "_starts", "_max_ends")

    def __init__(self, intervals: Iterable[Interval]):
        # sorted() is stable: equal starts keep their file order.
        self.intervals: Tuple[Interval, ...] = tuple(
            sorted(intervals, key=lambda interval: interval.start)
        )
        self._starts: List[int] = [interval.start for interval in self.intervals]
        self._max_ends: List[int] = []
        running = None
        for interval in self.intervals:
            running = interval.end if running is None else max(running, interval.end)
            self._max_ends.append(running)

    def __len__(self) -> int:
        return len(self.intervals)

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.intervals)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChromosomeIntervals):
            return NotImplemented
        return self.intervals == other.intervals

    def __repr__(self) -> str:
        return f"ChromosomeIntervals({list(self.intervals)!r})"

    def contains(self, position: int) -> bool:
        """Return True if *position* lies within any interval (inclusive)."""
        if not self.intervals:
            return False
        if position < self._starts[0] or position > self._max_ends[-1]:
            return False
        # Intervals [0, idx) start at or before position.
        idx = bisect_right(self._starts, position)
        if idx == 0:
            return False
        return self._max_ends[idx - 1] >= position


@dataclass(frozen=True)
class IntervalIndex:
    """Read-only mapping of canonical chromosome name to its sorted intervals.

    The index is shared by every scan worker, so neither the attribute nor the
    mapping behind it can be changed after construction.
    """

    chromosomes: Mapping[str, ChromosomeIntervals] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "chromosomes", MappingProxyType(dict(self.chromosomes)))

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Sequence[Tuple[int, int]]]
    ) -> "IntervalIndex":
        """Build an index from ``{chrom: [(start, end), ...]}``."""
        chromosomes = {
            canonicalize_chromosome(chrom): ChromosomeIntervals(
                Interval(int(start), int(end)) for start, end in pairs
            )
            for chrom, pairs in mapping.items()
        }
        return cls(chromosomes)

    def __len__(self) -> int:
        return len(self.chromosomes)

    def get(self, chromosome: str) -> Optional[ChromosomeIntervals]:
        """Return the intervals for *chromosome*, or None when it is unmapped."""
        return self.chromosomes.get(canonicalize_chromosome(chromosome))

    @property
    def interval_count(self) -> int:
        return sum(len(bucket) for bucket in self.chromosomes.values())

    def contains(self, chromosome: str, position: int) -> bool:
        bucket = self.get(chromosome)
        if bucket is None:
            return False
        return bucket.contains(position)


def contains(index: IntervalIndex, chromosome: str, position: int) -> bool:
    """Return True if *position* on *chromosome* falls inside any indexed interval."""
    return index.contains(chromosome, position)


def _parse_bed_row(row: str, line_number: int, bed_path: str) -> Tuple[str, Interval]:
    fields = row.split("\t")
    if len(fields) < 3:
        handle_critical_error(
            f"Interval file {bed_path} line {line_number}: expected at least 3 "
            f"tab-separated columns, found {len(fields)}",
            exc_cls=IntervalFormatError,
        )
    try:
        start = parse_coordinate(fields[1])
        end = parse_coordinate(fields[2])
    except ValueError as exc:
        handle_critical_error(
            f"Interval file {bed_path} line {line_number}: couldn't convert {fields!r}",
            exc_cls=IntervalFormatError,
            exc_info=exc,
        )
    return canonicalize_chromosome(fields[0]), Interval(start, end)


def read_bed(bed_path: Optional[str], verbose: bool = False) -> IntervalIndex:
    """Parse *bed_path* into an :class:`IntervalIndex`.

    Blank lines are skipped and columns beyond the third are ignored. A row
    with a non-integer start or end aborts the run with
    :class:`IntervalFormatError`; a missing or unreadable file raises
    :class:`ConfigurationError`. An empty file yields an empty index.
    """

    if not bed_path:
        handle_critical_error("bedPath required", exc_cls=ConfigurationError)

    grouped: Dict[str, List[Interval]] = {}
    try:
        with open(bed_path, "r", encoding="utf-8", newline="") as handle:
            for line_number, raw_line in enumerate(handle, start=1):
                row = raw_line.rstrip("\r\n")
                if not row:
                    continue
                chrom, interval = _parse_bed_row(row, line_number, bed_path)
                grouped.setdefault(chrom, []).append(interval)
    except UnicodeDecodeError as exc:
        handle_critical_error(
            f"Interval file {bed_path} is not valid UTF-8: {exc}",
            exc_cls=IntervalFormatError,
            exc_info=exc,
        )
    except OSError as exc:
        handle_critical_error(
            f"Couldn't open interval file {bed_path}: {exc}",
            exc_cls=ConfigurationError,
            exc_info=exc,
        )

    index = IntervalIndex(
        {chrom: ChromosomeIntervals(intervals) for chrom, intervals in grouped.items()}
    )
    log_message(
        f"Loaded {index.interval_count} interval(s) across {len(index)} "
        f"chromosome(s) from {bed_path}",
        verbose,
        level=logging.INFO,
    )
    return index


__all__ = [
    "CHROM_PREFIX",
    "COORDINATE_PATTERN",
    "ChromosomeIntervals",
    "Interval",
    "IntervalIndex",
    "canonicalize_chromosome",
    "contains",
    "parse_coordinate",
    "read_bed",
]
