"""Record-level predicates applied while scanning variant files.

Only high-confidence calls are considered: the FILTER column must carry the
literal ``PASS`` value. Header and comment lines start with ``#`` and never
reach the interval query.
"""

from __future__ import annotations

from typing import Sequence

CHROM_IDX = 0
POS_IDX = 1
ID_IDX = 2
REF_IDX = 3
ALT_IDX = 4
QUAL_IDX = 5
FILTER_IDX = 6
INFO_IDX = 7
FORMAT_IDX = 8

ACCEPTED_FILTER_VALUE = "PASS"
COMMENT_PREFIX = "#"
MIN_RECORD_COLUMNS = FILTER_IDX + 1


def is_comment_line(line: str) -> bool:
    return line.startswith(COMMENT_PREFIX)


def passes_filter(columns: Sequence[str]) -> bool:
    """Return True when the record's FILTER column is exactly ``PASS``."""
    return columns[FILTER_IDX] == ACCEPTED_FILTER_VALUE
