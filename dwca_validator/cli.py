"""
CLI interface for validating delimited core/extension files
"""

import argparse
import sys
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from dwca_validator.chain_loader import ChainLoader
from dwca_validator.config import settings
from dwca_validator.exceptions import ValidatorError
from dwca_validator.logging_config import configure_logging
from dwca_validator.record import Record
from dwca_validator.result.accumulator import (
    InMemoryResultAccumulator, JsonLinesResultAccumulator, ResultAccumulator
)
from dwca_validator.result.types import EvaluationContext, Severity
from dwca_validator.runner import RunSummary, ValidationRun
from dwca_validator.sources import read_delimited_records

logger = structlog.get_logger(__name__)


def _parse_extension(value: str) -> Tuple[str, str]:
    row_type, sep, path = value.partition("=")
    if not sep or not row_type or not path:
        raise argparse.ArgumentTypeError(f"expected ROWTYPE=PATH, got '{value}'")
    return row_type, path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dwca-validate",
        description="Validate the core and extension files of a Darwin Core archive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a core file
  dwca-validate --config rules.yaml --core occurrence.txt --id-field occurrenceID

  # Core plus one extension, results written as JSON lines
  dwca-validate --config rules.yaml --core occurrence.txt \\
      --extension MeasurementOrFact=measurements.txt --output results.jsonl
        """
    )
    parser.add_argument("--config", required=True, help="YAML chain configuration")
    parser.add_argument("--core", required=True, help="Core data file (delimited, with header)")
    parser.add_argument("--core-row-type", default="Occurrence", help="Row type of the core file")
    parser.add_argument("--id-field", default=None, help="Id column (first column when omitted)")
    parser.add_argument(
        "--extension",
        action="append",
        default=[],
        type=_parse_extension,
        metavar="ROWTYPE=PATH",
        help="Extension data file (can be used multiple times)",
    )
    parser.add_argument("--delimiter", default="\t", help="Field delimiter (default: tab)")
    parser.add_argument("--output", default=None, help="Write results to this JSON lines file")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent contexts")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _print_summary(summary: RunSummary, accumulator: ResultAccumulator) -> None:
    print("\n" + "=" * 60)
    print("VALIDATION RESULTS")
    print("=" * 60)
    for context, outcome in summary.outcomes.items():
        print(f"\n{context}:")
        print(f"  Records: {outcome.records_processed:,}")
        if outcome.criterion_failures:
            print(f"  Criterion failures: {outcome.criterion_failures:,}")
        if outcome.degraded_criteria:
            print(f"  Degraded checks: {', '.join(outcome.degraded_criteria)}")
        if outcome.error:
            print(f"  Error: {outcome.error}")

    print(f"\nValidation results: {summary.validation_results:,}")
    for severity in (Severity.ERROR, Severity.WARNING, Severity.OK):
        print(f"  {severity.name}: {accumulator.count_by_severity(severity):,}")
    print(f"Aggregation results: {summary.aggregation_results:,}")


def run_cli(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level="DEBUG" if args.verbose else settings.log_level)

    try:
        loader = ChainLoader.from_yaml_file(args.config)
    except ValidatorError as e:
        logger.error("Invalid configuration", error=str(e))
        print(f"\n❌ Invalid configuration: {e}")
        return 2

    streams: Dict[EvaluationContext, Iterable[Record]] = {
        EvaluationContext.core(): read_delimited_records(
            args.core, args.core_row_type, id_field=args.id_field, delimiter=args.delimiter
        )
    }
    for row_type, path in args.extension:
        # Extension rows carry the core id in their first column
        streams[EvaluationContext.extension(row_type)] = read_delimited_records(
            path, row_type, delimiter=args.delimiter
        )

    accumulator = JsonLinesResultAccumulator(args.output) if args.output else InMemoryResultAccumulator()
    try:
        with accumulator:
            summary = ValidationRun(loader.build_chain, accumulator, max_workers=args.workers).run(streams)
            _print_summary(summary, accumulator)
            has_errors = accumulator.count_by_severity(Severity.ERROR) > 0
    except (ValidatorError, OSError, KeyError, ValueError) as e:
        logger.error("Validation failed", error=str(e), exc_info=True)
        print(f"\n❌ Validation failed: {e}")
        return 1

    if has_errors or summary.degraded_contexts:
        print("\n⚠️  Archive has validation errors")
        return 1
    print("\n✅ No validation errors found")
    return 0


def main():
    """Main CLI entry point"""
    try:
        sys.exit(run_cli())
    except KeyboardInterrupt:
        print("\n\n⚠️  Validation interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error", error=str(e), exc_info=True)
        print(f"\n❌ Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
