"""Tests for the input and output openers."""

from __future__ import annotations

import gzip
import io
import sys

from vcf_region_filter.io_utils import is_gzip_path, open_output, open_vcf


def test_is_gzip_path():
    assert is_gzip_path("a.vcf.gz")
    assert is_gzip_path("A.VCF.BGZ")
    assert not is_gzip_path("a.vcf")


def test_open_vcf_decompresses_by_suffix(tmp_path):
    path = tmp_path / "a.vcf.gz"
    with gzip.open(path, "wb") as handle:
        handle.write(b"payload\n")

    with open_vcf(str(path)) as handle:
        assert handle.read() == b"payload\n"


def test_open_output_writes_escaped_bytes_to_file(tmp_path):
    path = tmp_path / "nested" / "out.vcf.gz"

    with open_output(str(path)) as handle:
        handle.write("caf\udce9\n")

    with gzip.open(path, "rb") as handle:
        assert handle.read() == b"caf\xe9\n"


def test_open_output_writes_escaped_bytes_to_stdout(monkeypatch):
    raw = io.BytesIO()
    stream = io.TextIOWrapper(raw, encoding="utf-8", newline="")
    monkeypatch.setattr(sys, "stdout", stream)

    with open_output("-") as handle:
        handle.write("caf\udce9\r\n")

    assert handle is stream
    assert raw.getvalue() == b"caf\xe9\r\n"
