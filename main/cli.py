"""CLI entry point for the metadata escaper.

Two ways of running:
1. Values on the command line: each value is printed with its escaped form
   and matchers (tab-separated, or JSON with --json).
2. Batch mode (--csv): every row of a CSV is annotated with the requested
   escaped values/matchers and written to --output (or stdout).
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# Ensure parent directory is in path for direct script execution
if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from escaper.core.config import CONTEXT_NAMES, get_batch_config, get_config, get_log_level
from escaper.metadata import build_matchers, transform_for_context
from main import batch

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def create_cli_parser() -> argparse.ArgumentParser:
    """Create argument parser for the escaper CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Metadata Escaper - escape values for headers, cookies and query parameters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Escaped value and every matcher for a single value
  metadata-escaper 'hdr;safe'

  # Only the header matcher, as JSON
  metadata-escaper 'b=o h' --context header --json

  # Annotate every row of a CSV file
  metadata-escaper --csv values.csv --column value --output escaped.csv
        """
    )

    parser.add_argument(
        "values",
        nargs="*",
        help="Metadata values to escape."
    )

    parser.add_argument(
        "--context",
        default="all",
        choices=CONTEXT_NAMES + ["all"],
        help="Transport context to produce output for (default: all)."
    )

    parser.add_argument(
        "--csv",
        dest="csv_file",
        default=None,
        help="CSV file of values to process in batch mode."
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Destination CSV for batch mode (default: stdout)."
    )

    parser.add_argument(
        "--column",
        default=None,
        help="CSV column holding the values (default: batch.value_column from config)."
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of tab-separated text."
    )

    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: general.log_level from config, else INFO)."
    )

    parser.add_argument(
        "--config",
        default="config.json",
        help="Path to JSON config file."
    )

    return parser


def format_value_results(values: Sequence[str], context: str, as_json: bool) -> str:
    """Render escaper results for command-line values.

    Args:
        values: Raw metadata values
        context: Context name, or "all" for the full matcher bundle
        as_json: Emit a JSON array instead of tab-separated lines

    Returns:
        Text to print
    """
    records: List[Dict[str, Any]] = []
    for value in values:
        if context == "all":
            records.append(build_matchers(value).to_dict())
        else:
            output, is_regex = transform_for_context(value, context)
            records.append({"value": value, context: output, "is_regex": is_regex})

    if as_json:
        return json.dumps(records, indent=2, ensure_ascii=False)

    lines = []
    for rec in records:
        if context == "all":
            lines.append("\t".join([
                rec["escaped"],
                rec["header"],
                "regex" if rec["header_is_regex"] else "literal",
                rec["cookie"],
                rec["query"],
            ]))
        else:
            lines.append("\t".join([rec[context], "regex" if rec["is_regex"] else "literal"]))
    return "\n".join(lines)


def run_batch(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Process a CSV file of values; returns the process exit status."""
    batch_cfg = get_batch_config()
    column = args.column or batch_cfg["value_column"]
    if args.context == "all":
        contexts = batch_cfg["contexts"] or CONTEXT_NAMES
    else:
        contexts = [args.context]

    try:
        df = batch.load_values_csv(args.csv_file, column)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Processing %d value(s) from %s", len(df), args.csv_file)
    annotated = batch.annotate_values(
        df,
        value_column=column,
        contexts=contexts,
        include_regex_flags=bool(batch_cfg["include_regex_flags"]),
        skip_empty=bool(batch_cfg["skip_empty"]),
    )

    text = batch.write_values_csv(annotated, args.output)
    if text is not None:
        sys.stdout.write(text)
    return 0


def run_cli(args: argparse.Namespace) -> int:
    """Run the escaper with parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit status
    """
    level = args.log_level or get_log_level()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
    )
    logger = logging.getLogger(__name__)

    if args.csv_file:
        if args.values:
            logger.warning("Ignoring %d positional value(s) in batch mode", len(args.values))
        return run_batch(args, logger)

    if not args.values:
        logger.error("No values given. Pass values as arguments or use --csv FILE.")
        return 1

    print(format_value_results(args.values, args.context, args.json))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point."""
    parser = create_cli_parser()
    args = parser.parse_args(argv)

    # Ensure get_config() reads the same config path
    os.environ["ESCAPER_CONFIG_PATH"] = args.config
    get_config(force_reload=True)

    try:
        status = run_cli(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(0)
    except Exception as e:
        logging.exception("Unexpected error: %s", e)
        print(f"Error: {e}")
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
