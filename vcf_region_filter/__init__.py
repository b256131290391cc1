"""Interval filtering of gzipped VCF files.

The package reads a BED-like interval file, scans every VCF matched by a glob
pattern on a thread pool, and writes each PASS record that falls inside an
interval exactly once per ``chrom_pos_ref_alt`` key. The public helpers are
re-exported here; :mod:`vcf_region_filter.cli` provides the command-line
interface.
"""

from __future__ import annotations

from .dedup import DedupConsumer
from .intervals import (
    ChromosomeIntervals,
    Interval,
    IntervalIndex,
    canonicalize_chromosome,
    contains,
    read_bed,
)
from .logging_utils import (
    ConfigurationError,
    IntervalFormatError,
    RegionFilterError,
    VCFFormatError,
    configure_logging,
)
from .pipeline import FilterSummary, filter_variants, find_vcf_files, run_scans
from .reader import TabularReader
from .scanning import ResultMessage, ScanStats, make_variant_key, scan_vcf
from .validation import VCFHeader, extract_header

__version__ = "0.1.0"

__all__ = [
    "ChromosomeIntervals",
    "ConfigurationError",
    "DedupConsumer",
    "FilterSummary",
    "Interval",
    "IntervalFormatError",
    "IntervalIndex",
    "RegionFilterError",
    "ResultMessage",
    "ScanStats",
    "TabularReader",
    "VCFFormatError",
    "VCFHeader",
    "canonicalize_chromosome",
    "configure_logging",
    "contains",
    "extract_header",
    "filter_variants",
    "find_vcf_files",
    "make_variant_key",
    "read_bed",
    "run_scans",
    "scan_vcf",
]
