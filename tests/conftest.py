"""Shared pytest fixtures for the vcf_region_filter test suite."""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

import pytest

from vcf_region_filter.logging_utils import configure_logging, logger

VERSION_LINE = "##fileformat=VCFv4.2"
META_LINES = (
    "##reference=GRCh38",
    "##contig=<ID=1,length=248956422>",
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
)
COLUMN_LINE = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE"


def vcf_record(
    chrom: str,
    pos: int | str,
    ref: str = "A",
    alt: str = "C",
    filter_value: str = "PASS",
    record_id: str = ".",
    sample: str = "0/1",
) -> str:
    """Return one tab-separated VCF data line (without terminator)."""
    return "\t".join(
        [chrom, str(pos), record_id, ref, alt, "50", filter_value, ".", "GT", sample]
    )


def render_vcf(
    records: Iterable[str],
    *,
    version_line: str = VERSION_LINE,
    meta_lines: Sequence[str] = META_LINES,
    column_line: Optional[str] = COLUMN_LINE,
    newline: str = "\n",
) -> str:
    lines = [version_line, *meta_lines]
    if column_line is not None:
        lines.append(column_line)
    lines.extend(records)
    return "".join(line + newline for line in lines)


@pytest.fixture
def write_vcf(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a (gzipped by default) VCF under ``tmp_path``."""

    def _write(name: str, records: Iterable[str] = (), *, compress: bool = True, **kwargs) -> Path:
        text = render_vcf(records, **kwargs)
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if compress:
            with gzip.open(path, "wb") as handle:
                handle.write(text.encode("utf-8", "surrogateescape"))
        else:
            path.write_bytes(text.encode("utf-8", "surrogateescape"))
        return path

    return _write


@pytest.fixture
def write_bed(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a tab-separated interval file under ``tmp_path``."""

    def _write(rows: Iterable[Sequence[object]], name: str = "regions.bed") -> Path:
        path = tmp_path / name
        path.write_text(
            "".join("\t".join(str(col) for col in row) + "\n" for row in rows),
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture(autouse=True)
def _reset_logging(caplog):
    """Route package records to caplog and restore the default console logger.

    The package logger does not propagate, so caplog's root handler would
    otherwise never see its records.
    """
    logger.addHandler(caplog.handler)
    yield
    logger.removeHandler(caplog.handler)
    configure_logging()
