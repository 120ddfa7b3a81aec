#!/usr/bin/env python3
"""
CLI script to regenerate the Alpha Vantage bindings.

Fetches the documentation page (or reads a saved copy with --input), and
rewrites the binding module only when the page changed since the module was
last generated.

Exit status: 0 when the module was regenerated or nothing changed, 1 on any
fetch, sanitization, extraction or generation error.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from apigen.config import Settings
from apigen.exceptions import ApiGenError
from apigen.logger import setup_logger
from apigen.main import ApiGenPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Regenerate API bindings from the documentation page")
    parser.add_argument("--url", help="Documentation page URL")
    parser.add_argument("--input", "-i", help="Read a saved documentation page instead of fetching")
    parser.add_argument("--output", "-o", help="Generated module path")
    parser.add_argument("--force", "-f", action="store_true",
                        help="Regenerate even if the checksum is unchanged")
    parser.add_argument("--dump", action="store_true",
                        help="Print the extracted catalog instead of generating")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env(documentation_url=args.url, output_path=args.output)
    except ValidationError as e:
        print(f"✗ Invalid settings: {e}")
        return 1

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO)
    logger = setup_logger(level=level, log_file=settings.log_file)

    try:
        raw = Path(args.input).read_bytes() if args.input else None
    except OSError as e:
        print(f"✗ Could not read {args.input}: {e}")
        return 1

    pipeline = ApiGenPipeline(settings=settings)

    try:
        if args.dump:
            print(pipeline.extract(raw).describe())
            return 0
        outcome = pipeline.run(raw=raw, force=args.force)
    except ApiGenError as e:
        logger.error(json.dumps(e.to_response(), ensure_ascii=False))
        print(f"✗ {type(e).__name__}: {e}")
        return 1

    if outcome.changed:
        print(f"✓ {outcome.endpoint_count} endpoints in {outcome.category_count} categories "
              f"written to {outcome.output_path}")
    else:
        print("No change to API documentation since previous generation")
    print(f"  Checksum: {outcome.digest}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
