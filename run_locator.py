#!/usr/bin/env python3
"""
Command-line script to ask the LLM for a locator.

Reduces the page, asks the configured provider (LLM_PROVIDER, default
ollama) and prints the locator pair as JSON. Answers are cached in
./locator_cache/ unless --no-cache is given.

Usage:
    python run_locator.py login.html --describe "username field"
    python run_locator.py app.html --describe "Start Button" --provider openai
    python run_locator.py app.html --describe "Save" --force-refresh
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv
load_dotenv()

from dom_filter.exceptions import AdvisorError, LocatorParseError
from dom_filter.llm_client import LLMProvider
from dom_filter.logger import setup_logger
from dom_filter.main import LocatorPipeline


def main():
    parser = argparse.ArgumentParser(
        description="Recommend a Selenium locator for a described element using an LLM"
    )
    parser.add_argument("file", help="HTML file (saved page source)")
    parser.add_argument("--describe", "-d", required=True, help="Element description")
    parser.add_argument(
        "--provider", "-p",
        choices=[p.value for p in LLMProvider],
        help="LLM provider (default: LLM_PROVIDER env var or ollama)"
    )
    parser.add_argument("--no-cache", action="store_true", help="Disable caching entirely")
    parser.add_argument(
        "--force-refresh", "-f",
        action="store_true",
        help="Skip cache and ask the LLM again"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()

    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    provider = LLMProvider(args.provider) if args.provider else None

    try:
        pipeline = LocatorPipeline(provider=provider, use_cache=not args.no_cache)
        pair = pipeline.locate_file(args.file, args.describe, force_refresh=args.force_refresh)
    except AdvisorError as e:
        print(json.dumps(e.to_response(), indent=2), file=sys.stderr)
        sys.exit(1)
    except (LocatorParseError, OSError) as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(pair.to_response(), indent=2))


if __name__ == "__main__":
    main()
