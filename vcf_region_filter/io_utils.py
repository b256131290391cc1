"""File opening helpers shared by the scanner, the header reader and the CLI."""

from __future__ import annotations

import gzip
import os
import sys
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, TextIO

GZIP_SUFFIXES = (".gz", ".bgz")
# Lone surrogates from undecodable input bytes are written back as the original bytes.
ENCODE_ERRORS = "surrogateescape"


def is_gzip_path(path: str | os.PathLike[str]) -> bool:
    return os.fspath(path).lower().endswith(GZIP_SUFFIXES)


def open_vcf(path: str | os.PathLike[str]) -> BinaryIO:
    """Open *path* for binary reading, decompressing gzip/BGZF by suffix.

    ``gzip`` reads concatenated members, so BGZF files produced by ``bgzip``
    or ``pysam.tabix_compress`` decode transparently.
    """

    if is_gzip_path(path):
        return gzip.open(path, "rb")  # type: ignore[return-value]
    return open(path, "rb")


@contextmanager
def open_output(path: Optional[str]) -> Iterator[TextIO]:
    """Yield a text stream for *path*; ``None`` or ``-`` means stdout."""

    if path is None or path == "-":
        stream = sys.stdout
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(errors=ENCODE_ERRORS)
        yield stream
        stream.flush()
        return

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    if is_gzip_path(path):
        handle = gzip.open(
            path, "wt", encoding="utf-8", errors=ENCODE_ERRORS, newline=""
        )
    else:
        handle = open(path, "w", encoding="utf-8", errors=ENCODE_ERRORS, newline="")
    try:
        yield handle
    finally:
        handle.close()


__all__ = ["GZIP_SUFFIXES", "is_gzip_path", "open_output", "open_vcf"]
