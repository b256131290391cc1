"""Command-line entry point for the vcf_region_filter package."""

from vcf_region_filter.cli import main as _cli_main


def main() -> None:
    """Execute the vcf_region_filter command-line interface."""

    _cli_main()


if __name__ == "__main__":  # pragma: no cover - entry point
    main()
