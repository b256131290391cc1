"""Tests for argument parsing and the CLI exit paths."""

from __future__ import annotations

import gzip

import pytest

from vcf_region_filter import cli
from vcf_region_filter.pipeline import DEFAULT_MAX_WORKERS, DEFAULT_QUEUE_SIZE

from conftest import COLUMN_LINE, VERSION_LINE, vcf_record


def test_parse_arguments_accepts_original_flag_names():
    args = cli.parse_arguments(["--bedPath", "r.bed", "--vcfGlob", "*.vcf.gz"])

    assert args.bed_path == "r.bed"
    assert args.vcf_glob == "*.vcf.gz"
    assert args.max_workers == DEFAULT_MAX_WORKERS
    assert args.queue_size == DEFAULT_QUEUE_SIZE
    assert args.output is None
    assert args.verbose is False


def test_parse_arguments_supports_optional_flags(tmp_path):
    args = cli.parse_arguments(
        [
            "--bed-path",
            "r.bed",
            "--vcf-glob",
            "x/*.vcf.gz",
            "-o",
            str(tmp_path / "out.vcf"),
            "-j",
            "4",
            "--queue-size",
            "8",
            "--log-file",
            str(tmp_path / "run.log"),
            "-v",
        ]
    )

    assert args.max_workers == 4
    assert args.queue_size == 8
    assert args.verbose is True


@pytest.mark.parametrize("value", ["0", "-2", "many"])
def test_parse_arguments_rejects_bad_worker_counts(value):
    with pytest.raises(SystemExit):
        cli.parse_arguments(["--bedPath", "r.bed", "--vcfGlob", "*", "--workers", value])


def test_main_writes_results_to_stdout(tmp_path, write_bed, write_vcf, capsys):
    bed = write_bed([("1", 100, 200)])
    write_vcf("vcfs/a.vcf.gz", [vcf_record("1", 150), vcf_record("1", 300)])

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--bedPath", str(bed), "--vcfGlob", str(tmp_path / "vcfs" / "*.vcf.gz")])

    assert excinfo.value.code == 0
    captured = capsys.readouterr()
    assert captured.out.startswith(VERSION_LINE + "\n")
    assert COLUMN_LINE in captured.out
    assert vcf_record("1", 150) + "\n" in captured.out
    assert vcf_record("1", 300) not in captured.out
    assert "Saw chr1_150_A_C 1 times" in captured.err


def test_main_writes_gzip_output_and_log_file(tmp_path, write_bed, write_vcf):
    bed = write_bed([("1", 100, 200)])
    write_vcf("vcfs/a.vcf.gz", [vcf_record("1", 150)])
    out_path = tmp_path / "out" / "hits.vcf.gz"
    log_path = tmp_path / "logs" / "run.log"

    status = cli.run(
        cli.parse_arguments(
            [
                "--bedPath",
                str(bed),
                "--vcfGlob",
                str(tmp_path / "vcfs" / "*.vcf.gz"),
                "--output",
                str(out_path),
                "--log-file",
                str(log_path),
            ]
        )
    )

    assert status == 0
    with gzip.open(out_path, "rt", encoding="utf-8") as handle:
        assert vcf_record("1", 150) in handle.read()
    assert "Saw chr1_150_A_C 1 times" in log_path.read_text()


def test_main_reports_missing_bed_path(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--vcfGlob", "*.vcf.gz"])

    assert excinfo.value.code == 1
    assert "ERROR: bedPath required" in capsys.readouterr().err


def test_main_reports_empty_glob(tmp_path, write_bed, capsys):
    bed = write_bed([("1", 100, 200)])

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--bedPath", str(bed), "--vcfGlob", str(tmp_path / "none" / "*.vcf.gz")])

    assert excinfo.value.code == 1
    assert "No VCF files matched" in capsys.readouterr().err


def test_main_reports_format_errors(tmp_path, write_bed, write_vcf, capsys):
    bed = write_bed([("1", 100, 200)])
    write_vcf("vcfs/a.vcf.gz", [vcf_record("1", 150)], version_line="##fileformat=BCFv2")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--bedPath", str(bed), "--vcfGlob", str(tmp_path / "vcfs" / "*.vcf.gz")])

    assert excinfo.value.code == 1
    assert "Not a VCF file" in capsys.readouterr().err


def test_main_passes_non_utf8_bytes_through_unchanged(tmp_path, write_bed, write_vcf):
    bed = write_bed([("1", 100, 400)])
    emitted = vcf_record("1", 150, record_id="caf\udce9")
    skipped = vcf_record("1", 300, filter_value="q10", record_id="caf\udce9")
    write_vcf("vcfs/a.vcf.gz", [emitted, skipped])
    out_path = tmp_path / "hits.vcf"

    status = cli.run(
        cli.parse_arguments(
            [
                "--bedPath",
                str(bed),
                "--vcfGlob",
                str(tmp_path / "vcfs" / "*.vcf.gz"),
                "-o",
                str(out_path),
            ]
        )
    )

    assert status == 0
    data = out_path.read_bytes()
    assert b"1\t150\tcaf\xe9\tA\tC\t50\tPASS\t.\tGT\t0/1\n" in data
    assert b"q10" not in data
