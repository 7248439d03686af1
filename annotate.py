#!/usr/bin/env python3

import argparse
import io
import json
import logging
import sys
import time
from typing import Dict

from hoverscope import __version__
from hoverscope.annotator import Annotator
from hoverscope.annotator.pipeline import UNIT_MODES
from hoverscope.annotator.scanner import count_by_category
from hoverscope.catalog import TableStore
from hoverscope.errors import HoverscopeError
from hoverscope.rules_parser import RULES_VERSION, default_rules, parse_file
from hoverscope.sources import refresh


def show_statistics(
    input_matches: int, output_matches: int, category_counts: Dict[str, int]
):
    """Display match statistics."""
    sys.stderr.write("=== Annotation Statistics ===\n")
    sys.stderr.write(f"Raw matches: {input_matches}\n")
    sys.stderr.write(f"Resolved matches: {output_matches}\n")
    sys.stderr.write(
        f"Reduction: {input_matches - output_matches} matches ({((input_matches - output_matches) / input_matches * 100) if input_matches else 0:.1f}%)\n"
    )
    sys.stderr.write("\nRaw matches by category:\n")
    for category, count in sorted(category_counts.items()):
        sys.stderr.write(f"  {category}: {count}\n")
    sys.stderr.write("=============================\n\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Annotate a text file with instrument, survey, simulation and person mentions."
    )
    parser.add_argument("text_file", nargs="?", help="Path to input text file")
    parser.add_argument(
        "--catalog-dir",
        default=None,
        help="Directory holding telescopes.json, surveys.json, simulations.json, sams.json (default: bundled catalogs)",
    )
    parser.add_argument(
        "--remote-url",
        default=None,
        help="Base URL to fetch catalogs from; falls back to local catalogs on failure",
    )
    parser.add_argument(
        "--rules",
        default=None,
        help="Exclusion rules file (default: bundled rules)",
    )
    parser.add_argument(
        "--unit",
        choices=UNIT_MODES,
        default="document",
        help="Scan the whole document at once or one line at a time",
    )
    parser.add_argument(
        "--segments",
        action="store_true",
        help="Emit annotation segments instead of matches",
    )
    parser.add_argument(
        "--no-resolve",
        action="store_true",
        help="Skip overlap resolution and emit raw matches",
    )
    parser.add_argument(
        "--pretty-print",
        action="store_true",
        help="Emit all results in a single pretty-printed JSON array",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all progress updates",
    )
    parser.add_argument(
        "--show-stats",
        action="store_true",
        help="Show match statistics",
    )
    parser.add_argument(
        "--show-timing",
        action="store_true",
        help="Show timing information",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write output to this file (UTF-8, LF line endings). If omitted, output goes to stdout.",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print("Version information:")
        print(f"  hoverscope: {__version__}")
        print(f"  rules: {RULES_VERSION}")
        return 0

    if not args.text_file:
        parser.error("the following arguments are required: text_file")

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s"
    )
    logger = logging.getLogger("hoverscope")

    start_time = time.time()
    try:
        rules = parse_file(args.rules) if args.rules else default_rules()
        store = TableStore()
        table, source = refresh(store, base_url=args.remote_url, data_dir=args.catalog_dir)
    except HoverscopeError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1
    load_time = time.time() - start_time
    logger.info("Using %s catalogs (%s entries)", source, len(table))

    if args.show_timing:
        sys.stderr.write(f"Catalog loading time: {load_time:.3f}s\n")

    with open(args.text_file, "r", encoding="utf-8") as f:
        text = f.read()

    annotate_start = time.time()
    annotator = Annotator(table, rules)

    def _status_callback(idx, total):
        pct = (idx / total * 100) if total else 0
        sys.stderr.write(f"\rAnnotating: {idx}/{total} units ({pct:.1f}%)")
        sys.stderr.flush()

    annotation = annotator.annotate(
        text,
        unit_mode=args.unit,
        resolve_overlaps=not args.no_resolve,
        progress_callback=None if args.quiet else _status_callback,
    )
    if not args.quiet:
        sys.stderr.write("\n")
    annotate_time = time.time() - annotate_start

    if args.show_timing:
        sys.stderr.write(f"Annotation time: {annotate_time:.3f}s\n")

    if args.show_stats:
        show_statistics(
            len(annotation.raw_matches),
            len(annotation.matches),
            count_by_category(annotation.raw_matches),
        )

    if args.segments and not args.no_resolve:
        output = [segment.to_dict() for segment in annotation.segments]
    else:
        output = [match.to_dict() for match in annotation.matches]

    kind = "raw" if args.no_resolve else "resolved"
    sys.stderr.write(f"Found {len(annotation.matches)} {kind} matches using {len(table)} entities\n")

    output_stream = None
    if args.output:
        output_stream = open(args.output, "w", encoding="utf-8", newline="\n")
    else:
        output_stream = sys.stdout

    try:
        if args.pretty_print:
            json.dump(output, output_stream, indent=2)
            output_stream.write("\n")
        else:
            for item in output:
                output_stream.write(json.dumps(item))
                output_stream.write("\n")
    finally:
        if args.output and output_stream is not sys.stdout:
            output_stream.close()
    return 0


if __name__ == "__main__":
    # Ensure UTF-8 encoding for stdout
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
    sys.exit(main())
