#!/usr/bin/env python3
"""
Command-line script to run the DOM reduction only (no LLM, no network).

Usage:
    python run_reducer.py page.html
    python run_reducer.py page.html --describe "username field"
    python run_reducer.py page.html --describe "Start Button" --single
    python run_reducer.py page*.html --text -o reduced.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from dom_filter.filtering import DomFilter
from dom_filter.logger import setup_logger
from dom_filter.preprocessor import Preprocessor
from dom_filter.schemas import ReductionSettings


def main():
    parser = argparse.ArgumentParser(
        description="Reduce HTML pages to the part relevant for a locator lookup"
    )
    parser.add_argument("files", nargs="+", help="HTML files to reduce")
    parser.add_argument(
        "--describe", "-d",
        help="Element description; focuses the output on matching elements"
    )
    parser.add_argument(
        "--single",
        action="store_true",
        help="Single best match only (requires --describe)"
    )
    parser.add_argument(
        "--text",
        action="store_true",
        help="Emit plain text instead of markup"
    )
    parser.add_argument(
        "--max-chars",
        type=int,
        default=ReductionSettings().max_output_chars,
        help="Output size cap in characters"
    )
    parser.add_argument("--output", "-o", help="Output JSON file (default: print to stdout)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()
    if args.single and not args.describe:
        parser.error("--single requires --describe")

    # logs share stdout with the result, so stay quiet unless asked
    setup_logger(level=logging.DEBUG if args.verbose else logging.WARNING)

    dom_filter = DomFilter(ReductionSettings(max_output_chars=args.max_chars))
    results = []

    for file_path in args.files:
        file_path = Path(file_path)
        print(f"Reducing: {file_path.name}", file=sys.stderr)

        try:
            html = Preprocessor.decode_bytes(file_path.read_bytes())
        except OSError as e:
            results.append({"file": str(file_path), "status": "error", "error": str(e)})
            print(f"  ✗ Error: {e}", file=sys.stderr)
            continue

        if args.text:
            output = {"text": dom_filter.text(html)}
        else:
            if args.single:
                result = dom_filter.snippet(html, args.describe)
            else:
                result = dom_filter.filter(html, args.describe)
            output = result.model_dump()

        results.append({"file": str(file_path), "status": "success", "input_chars": len(html), **output})
        size = len(output.get("html", output.get("text", "")))
        print(f"  ✓ {len(html)} → {size} chars", file=sys.stderr)

    output_json = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output_json)
        print(f"\nResults saved to: {args.output}", file=sys.stderr)
    else:
        print(output_json)


if __name__ == "__main__":
    main()
