"""
Command line entry point for building the disease/symptom graph document.

Usage:
    convert-disease-symptom \\
        --input data/DiseaseAndSymptoms.csv \\
        --precautions "data/Disease precaution.csv" \\
        --output public/data/disease_symptom_graph.json \\
        --syncToFunction
"""

import argparse
import logging
import sys
from typing import List, Optional

from diseasegraph.core.config import get_settings
from diseasegraph.services.graph_builder import (
    GraphBuildError,
    build_graph_file,
    write_graph,
)

logger = logging.getLogger(__name__)

USAGE = (
    "convert-disease-symptom --input <file> [--precautions <file>] "
    "[--output <path>] [--syncToFunction]"
)


class UsageError(Exception):
    """The command line could not be parsed."""


class ConverterArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports problems instead of exiting with 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = ConverterArgumentParser(
        prog="convert-disease-symptom",
        usage=USAGE,
        allow_abbrev=False,
        description="Build the disease/symptom graph JSON from CSV tables.",
    )
    parser.add_argument("--input", help="disease-symptom CSV (required)")
    parser.add_argument(
        "--precautions", help="optional precautions CSV (Disease,Precaution_1,...)"
    )
    parser.add_argument(
        "--output",
        default=settings.graph_output_path,
        help=f"output JSON path (default: {settings.graph_output_path})",
    )
    parser.add_argument(
        "--syncToFunction",
        dest="sync_to_function",
        action="store_true",
        help=f"also write the graph to {settings.function_graph_path}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the builder; returns the process exit code."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        args, unknown = build_parser().parse_known_args(argv)
    except UsageError as exc:
        print(f"Usage: {USAGE}\n{exc}", file=sys.stderr)
        return 1
    if unknown:
        logger.warning(f"Ignoring unrecognized arguments: {' '.join(unknown)}")

    if not args.input:
        print(f"Usage: {USAGE}", file=sys.stderr)
        return 1

    try:
        document = build_graph_file(args.input, args.precautions)
    except GraphBuildError as exc:
        logger.error(str(exc))
        return 1

    sync_path = get_settings().function_graph_path if args.sync_to_function else None
    try:
        write_graph(document, args.output, sync_path=sync_path)
    except OSError as exc:
        logger.error(f"Could not write graph to {args.output}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
