"""Coordinator for the interval filter: index, header, worker pool, consumer."""

from __future__ import annotations

import concurrent.futures
import glob
import logging
import queue
import sys
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TextIO

from .dedup import QUEUE_CLOSED, DedupConsumer
from .intervals import IntervalIndex, read_bed
from .logging_utils import (
    ConfigurationError,
    handle_critical_error,
    log_message,
)
from .scanning import ResultMessage, ScanStats, scan_vcf
from .validation import VCFHeader, extract_header

DEFAULT_MAX_WORKERS = 16
DEFAULT_QUEUE_SIZE = 100
PUT_TIMEOUT = 0.1


@dataclass
class FilterSummary:
    """Outcome of a completed run."""

    files: List[str]
    header: VCFHeader
    counts: Dict[str, int]
    emitted: int
    scans: List[ScanStats] = field(default_factory=list)


def find_vcf_files(vcf_glob: Optional[str], verbose: bool = False) -> List[str]:
    """Expand *vcf_glob* into a sorted list of paths; no match is an error."""
    if not vcf_glob:
        handle_critical_error("vcfGlob required", exc_cls=ConfigurationError)
    files = sorted(glob.glob(vcf_glob, recursive=True))
    if not files:
        handle_critical_error(
            f"No VCF files matched {vcf_glob!r}", exc_cls=ConfigurationError
        )
    log_message(f"Matched {len(files)} VCF file(s) with {vcf_glob}", verbose)
    return files


class _ResultsChannel:
    """Write side of the bounded results queue shared by the workers."""

    def __init__(self, results: "queue.Queue", cancel_event: threading.Event):
        self._results = results
        self._cancel_event = cancel_event

    def publish(self, message: ResultMessage) -> None:
        # Blocks while the queue is full, but gives up once the run is cancelled.
        while not self._cancel_event.is_set():
            try:
                self._results.put(message, timeout=PUT_TIMEOUT)
                return
            except queue.Full:
                continue


class _ConsumerThread(threading.Thread):
    def __init__(
        self,
        consumer: DedupConsumer,
        results: "queue.Queue",
        cancel_event: threading.Event,
    ):
        super().__init__(name="vcf-region-filter-consumer", daemon=True)
        self.consumer = consumer
        self.results = results
        self.cancel_event = cancel_event
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            self.consumer.drain(self.results)
        except BaseException as exc:  # surfaced to the coordinator via self.error
            self.error = exc
            self.cancel_event.set()
            self._discard_remaining()

    def _discard_remaining(self) -> None:
        while True:
            message = self.results.get()
            self.results.task_done()
            if message is QUEUE_CLOSED:
                return


def run_scans(
    files: List[str],
    index: IntervalIndex,
    consumer: DedupConsumer,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    queue_size: int = DEFAULT_QUEUE_SIZE,
    verbose: bool = False,
) -> List[ScanStats]:
    """Scan *files* on a bounded thread pool, feeding *consumer* through a queue.

    The first worker failure cancels the remaining scans; the queue is closed
    only after every submitted scan has returned, and the failure is re-raised
    once the consumer has been joined.
    """

    if max_workers < 1:
        handle_critical_error("max_workers must be at least 1", exc_cls=ConfigurationError)
    if queue_size < 1:
        handle_critical_error("queue_size must be at least 1", exc_cls=ConfigurationError)

    results: "queue.Queue[Optional[ResultMessage]]" = queue.Queue(maxsize=queue_size)
    cancel_event = threading.Event()
    channel = _ResultsChannel(results, cancel_event)
    consumer_thread = _ConsumerThread(consumer, results, cancel_event)
    consumer_thread.start()

    first_error: Optional[BaseException] = None
    stats: List[ScanStats] = []
    workers = min(max_workers, len(files)) or 1
    log_message(f"Scanning {len(files)} file(s) with {workers} worker(s)", verbose)

    try:
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="vcf-scan"
        ) as executor:
            futures = {
                executor.submit(
                    scan_vcf, path, index, channel.publish, cancel_event, verbose
                ): path
                for path in files
            }
            pending = set(futures)
            try:
                while pending:
                    done, pending = concurrent.futures.wait(
                        pending, return_when=concurrent.futures.FIRST_EXCEPTION
                    )
                    for future in done:
                        if future.cancelled():
                            continue
                        exc = future.exception()
                        if exc is None:
                            stats.append(future.result())
                            continue
                        if first_error is None:
                            first_error = exc
                            log_message(
                                f"Cancelling remaining scans after failure in {futures[future]}",
                                verbose,
                                level=logging.WARNING,
                            )
                            cancel_event.set()
                            for other in pending:
                                other.cancel()
                    if consumer_thread.error is not None and first_error is None:
                        first_error = consumer_thread.error
                        for other in pending:
                            other.cancel()
            except BaseException:
                cancel_event.set()
                raise
    finally:
        # Every worker has returned by now, so nothing can publish after this.
        results.put(QUEUE_CLOSED)
        consumer_thread.join()

    if first_error is None and consumer_thread.error is not None:
        first_error = consumer_thread.error
    if first_error is not None:
        raise first_error
    return stats


def filter_variants(
    bed_path: Optional[str],
    vcf_glob: Optional[str],
    output: Optional[TextIO] = None,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    queue_size: int = DEFAULT_QUEUE_SIZE,
    verbose: bool = False,
) -> FilterSummary:
    """Write the header and every first-seen in-interval PASS record to *output*.

    The header (version line plus the ``#`` block ending with ``#CHROM``) is
    taken from the first matched file only. Occurrence counts for every key
    are logged once all scans have finished.
    """

    output = output if output is not None else sys.stdout
    index = read_bed(bed_path, verbose)
    files = find_vcf_files(vcf_glob, verbose)

    header = extract_header(files[0], verbose)
    output.write(header.render())

    consumer = DedupConsumer(output)
    scans = run_scans(
        files,
        index,
        consumer,
        max_workers=max_workers,
        queue_size=queue_size,
        verbose=verbose,
    )
    output.flush()

    consumer.report()
    log_message(
        f"Emitted {consumer.emitted} unique variant(s) from {len(files)} file(s)",
        verbose,
        level=logging.INFO,
    )
    return FilterSummary(
        files=files,
        header=header,
        counts=dict(consumer.counts),
        emitted=consumer.emitted,
        scans=scans,
    )


__all__ = [
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_QUEUE_SIZE",
    "FilterSummary",
    "filter_variants",
    "find_vcf_files",
    "run_scans",
]
