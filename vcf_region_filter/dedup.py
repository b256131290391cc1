"""Single-owner deduplication of matching variant lines.

:class:`DedupConsumer` is the only reader of the results queue and the only
writer of the seen-key counts, so it needs no locking. The first message for
a key is written out; later messages for the same key only bump its count.
When the same key arrives from two files the retained line is whichever
reached the queue first, which depends on thread scheduling and is not stable
across runs.
"""

from __future__ import annotations

import logging
import queue
from typing import Dict, Iterable, Optional, TextIO

from .logging_utils import log_message
from .scanning import ResultMessage

# Put on the results queue once every worker has finished.
QUEUE_CLOSED = None


class DedupConsumer:
    def __init__(self, output: TextIO):
        self.output = output
        self.counts: Dict[str, int] = {}
        self.emitted = 0

    def consume(self, message: ResultMessage) -> bool:
        """Record *message*; write its line and return True if the key is new."""
        count = self.counts.get(message.key)
        if count is not None:
            self.counts[message.key] = count + 1
            return False
        self.output.write(message.line)
        self.counts[message.key] = 1
        self.emitted += 1
        return True

    def consume_all(self, messages: Iterable[ResultMessage]) -> None:
        for message in messages:
            self.consume(message)

    def drain(self, results: "queue.Queue[Optional[ResultMessage]]") -> None:
        """Consume from *results* until the closing sentinel arrives."""
        while True:
            message = results.get()
            try:
                if message is QUEUE_CLOSED:
                    return
                self.consume(message)
            finally:
                results.task_done()

    def report(self, verbose: bool = False) -> None:
        for key, count in self.counts.items():
            log_message(f"Saw {key} {count} times", verbose, level=logging.INFO)


__all__ = ["DedupConsumer", "QUEUE_CLOSED"]
