"""Streaming reader for tab-separated text with a discovered line terminator.

VCF shards in the wild arrive with ``\\n``, ``\\r\\n`` or, occasionally, bare
``\\r`` line endings. :class:`TabularReader` reads the first line of a binary
stream to learn which terminator the file uses and hands that first line back
separately (for VCF input it is the ``##fileformat`` version line). Every
subsequent call returns one complete line, however long, because the reader
accumulates fixed-size chunks until the terminator shows up.
"""

from __future__ import annotations

import re
from typing import BinaryIO, Iterator, List, Optional, Tuple

DEFAULT_CHUNK_SIZE = 64 * 1024
FIELD_SEPARATOR = "\t"
# Undecodable bytes survive as lone surrogates and are re-encoded unchanged on output.
DECODE_ERRORS = "surrogateescape"
LINE_BREAK = re.compile(rb"[\r\n]")


class TabularReader:
    """Line and column reader over a binary stream."""

    def __init__(
        self,
        handle: BinaryIO,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        encoding: str = "utf-8",
        errors: str = DECODE_ERRORS,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be a positive integer")
        self._handle = handle
        self._chunk_size = chunk_size
        self._encoding = encoding
        self._errors = errors
        self._buffer = bytearray()
        self._exhausted = False
        self._terminator: Optional[bytes] = None
        self._terminator_text = ""
        self.version_line: Optional[str] = None

    @property
    def end_of_line(self) -> Optional[bytes]:
        """The byte that ends each line (``b"\\n"`` or ``b"\\r"``)."""
        if self._terminator is None:
            return None
        return self._terminator[-1:]

    @property
    def terminator(self) -> Optional[bytes]:
        """The full terminator sequence stripped from each record."""
        return self._terminator

    @property
    def strip_count(self) -> int:
        return len(self._terminator) if self._terminator else 0

    def _fill(self) -> bool:
        if self._exhausted:
            return False
        chunk = self._handle.read(self._chunk_size)
        if not chunk:
            self._exhausted = True
            return False
        self._buffer.extend(chunk)
        return True

    def _take(self, size: int) -> bytes:
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def _scan_for(self, marker: bytes, start: int = 0) -> int:
        """Return the index of *marker* in the buffer, reading more as needed."""
        search_from = start
        while True:
            idx = self._buffer.find(marker, search_from)
            if idx != -1:
                return idx
            search_from = max(len(self._buffer), start)
            if not self._fill():
                return -1

    def detect_end_of_line(self) -> str:
        """Consume the first line, record its terminator and return it stripped.

        The first line break decides the terminator: ``\\r\\n``, a bare
        ``\\r`` or ``\\n``. A stream without any line break defaults to
        ``\\n``. Only the first line is ever buffered.
        """

        search_from = 0
        while True:
            match = LINE_BREAK.search(self._buffer, search_from)
            if match is None:
                search_from = len(self._buffer)
                if self._fill():
                    continue
                self._terminator = b"\n"
                first = self._take(len(self._buffer))
                break
            at = match.start()
            if self._buffer[at] == 0x0A:
                self._terminator = b"\n"
                first = self._take(at + 1)
                break
            # A "\r" decides between "\r\n" and "\r" by the byte after it.
            if at + 1 == len(self._buffer) and self._fill():
                search_from = at
                continue
            if self._buffer[at + 1 : at + 2] == b"\n":
                self._terminator = b"\r\n"
                first = self._take(at + 2)
            else:
                self._terminator = b"\r"
                first = self._take(at + 1)
            break

        self._terminator_text = self._terminator.decode("ascii")
        self.version_line = self.strip(first.decode(self._encoding, self._errors))
        return self.version_line

    def read_line(self) -> Optional[str]:
        """Return the next raw line including its terminator, or None at end of stream."""
        if self._terminator is None:
            raise RuntimeError("detect_end_of_line() must be called before read_line()")
        marker = self._terminator[-1:]
        idx = self._scan_for(marker)
        if idx == -1:
            if not self._buffer:
                return None
            return self._take(len(self._buffer)).decode(self._encoding, self._errors)
        return self._take(idx + 1).decode(self._encoding, self._errors)

    def strip(self, line: str) -> str:
        """Remove the detected terminator from the end of *line* when present."""
        if self._terminator_text and line.endswith(self._terminator_text):
            return line[: -len(self._terminator_text)]
        return line

    def split(self, line: str) -> List[str]:
        """Strip the terminator from *line* and split it into columns."""
        return self.strip(line).split(FIELD_SEPARATOR)

    def __iter__(self) -> Iterator[Tuple[str, List[str]]]:
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line, self.split(line)


__all__ = ["DEFAULT_CHUNK_SIZE", "FIELD_SEPARATOR", "TabularReader"]
