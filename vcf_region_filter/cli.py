"""Command-line entrypoint for the VCF interval filter."""
from __future__ import annotations

import argparse
import datetime
import logging
import sys

from .io_utils import open_output
from .logging_utils import (
    RegionFilterError,
    configure_logging,
    handle_critical_error,
    log_message,
)
from .pipeline import DEFAULT_MAX_WORKERS, DEFAULT_QUEUE_SIZE, filter_variants


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("Value must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vcf-region-filter",
        description=(
            "Print PASS variant records from gzipped VCF files that fall inside "
            "the intervals of a BED file, once per chrom/pos/ref/alt."
        ),
    )
    parser.add_argument(
        "--bedPath",
        "--bed-path",
        dest="bed_path",
        default="",
        help="Tab-separated interval file (chrom, start, end).",
    )
    parser.add_argument(
        "--vcfGlob",
        "--vcf-glob",
        dest="vcf_glob",
        default="",
        help="Glob pattern selecting the VCF files to scan (quote it).",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output",
        help="Write results here instead of stdout. A .gz suffix compresses the output.",
    )
    parser.add_argument(
        "-j",
        "--workers",
        dest="max_workers",
        type=_positive_int,
        default=DEFAULT_MAX_WORKERS,
        help=f"Number of files scanned concurrently (default {DEFAULT_MAX_WORKERS}).",
    )
    parser.add_argument(
        "--queue-size",
        dest="queue_size",
        type=_positive_int,
        default=DEFAULT_QUEUE_SIZE,
        help=f"Capacity of the results queue (default {DEFAULT_QUEUE_SIZE}).",
    )
    parser.add_argument("--log-file", dest="log_file", help="Also write log records to this file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) logging.")
    return parser


def parse_arguments(argv=None):
    """Parse CLI args for the interval filter."""
    return _build_parser().parse_args(argv)


def run(args) -> int:
    """Execute a parsed invocation and return the process exit status."""
    verbose = args.verbose
    configure_logging(
        log_level=logging.DEBUG if verbose else logging.INFO,
        log_file=args.log_file,
        enable_console=True,
    )
    log_message("Run started - " + datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    log_message(f"Interval file: {args.bed_path or '<none>'}")
    log_message(f"VCF glob: {args.vcf_glob or '<none>'}")

    try:
        try:
            with open_output(args.output) as output:
                summary = filter_variants(
                    args.bed_path,
                    args.vcf_glob,
                    output,
                    max_workers=args.max_workers,
                    queue_size=args.queue_size,
                )
        except OSError as e:
            handle_critical_error(f"Failed to write output: {e}", exc_cls=RegionFilterError, exc_info=e)
    except RegionFilterError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    log_message(
        f"Completed: {summary.emitted} unique variant(s), "
        f"{sum(summary.counts.values())} total match(es)",
    )
    return 0


def main(argv=None):
    sys.exit(run(parse_arguments(argv)))


if __name__ == "__main__":  # pragma: no cover - entry point
    main()
