#!/usr/bin/env python3
"""
JSON Compare Tool
Command-line entry point: compares two JSON files after canonicalizing them.

Usage:
    python main.py <left.json> <right.json> [--html report.html] [--json report.json] [--normalize-only]

Exit status is 0 when the documents are identical, 1 when they differ and 2
when a file cannot be read or parsed.
"""

import argparse
import logging
import sys

from core.json_normalizer import ParseError, normalize
from core.compare_session import CompareSession
from comparator.report_builder import ReportBuilder
from utils import file_utils

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="JSON Compare: key-order insensitive line diff of two JSON files")
    parser.add_argument("left", help="Left (original) JSON file")
    parser.add_argument("right", help="Right (modified) JSON file")
    parser.add_argument("--html", metavar="OUT", help="Also write a side-by-side HTML report to OUT")
    parser.add_argument("--json", metavar="OUT", help="Also write the diff entries and summary as JSON to OUT")
    parser.add_argument("--normalize-only", action="store_true",
                        help="Print the canonical form of each file instead of a diff")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    """Main execution function."""
    args = build_parser().parse_args(argv)
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        left_text = file_utils.read_file_content(args.left)
        right_text = file_utils.read_file_content(args.right)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        if args.normalize_only:
            print(normalize(left_text, side='left'))
            print(normalize(right_text, side='right'))
            return EXIT_IDENTICAL

        compare_session = CompareSession()
        rendered = compare_session.compare(left_text, right_text)
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(rendered.unified_text)

    builder = ReportBuilder()
    if args.html:
        path = file_utils.normalize_path(args.html)
        file_utils.ensure_directory(path.parent)
        builder.generate_html_report(
            compare_session.result, path, left_name=args.left, right_name=args.right)
        print(f"HTML report written to {path}", file=sys.stderr)
    if args.json:
        path = file_utils.normalize_path(args.json)
        file_utils.ensure_directory(path.parent)
        builder.generate_json_report(compare_session.result, path)
        print(f"JSON report written to {path}", file=sys.stderr)

    return EXIT_IDENTICAL if compare_session.result.is_identical else EXIT_DIFFERENT


if __name__ == "__main__":
    sys.exit(main())
