"""
Command line front-end.

    qrbatch records.txt -o out -e .png
    cat records.txt | qrbatch - -o out -w 8 -s 512 -l H
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .config import ERROR_LEVELS, Settings
from .errors import GeneratorBusyError, InvalidInputError, OutputFolderError
from .generator import BatchGenerator
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="qrbatch",
                                     description="Generate one QR code image per line of a record list")
    parser.add_argument("input", help="Record list file ('name payload' or 'payload' per line), '-' for stdin")
    parser.add_argument("-o", "--output", required=True, help="Output folder")
    parser.add_argument("-e", "--ext", default=".png", help="File extension (default .png)")
    parser.add_argument("-w", "--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    parser.add_argument("-s", "--pixel-size", type=int, default=None, help="Image width/height in pixels")
    parser.add_argument("-l", "--level", choices=sorted(ERROR_LEVELS), default=None,
                        help="Error correction level")
    parser.add_argument("--log-dir", default=None, help="Also write a rotating log file here")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser.parse_args(argv)


def _read_records(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    overrides = {}
    if args.workers is not None:
        overrides["worker_count"] = args.workers
    if args.pixel_size is not None:
        overrides["pixel_size"] = args.pixel_size
    if args.level is not None:
        overrides["error_correction"] = args.level
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    configure_logging(level=settings.log_level, log_dir=args.log_dir, run_prefix="qrbatch")

    try:
        records = _read_records(args.input)
    except OSError as e:
        logger.error(f"Could not read {args.input}: {e}")
        return 2

    generator = BatchGenerator(settings)
    try:
        result = generator.generate(records, args.output, args.ext)
    except (InvalidInputError, OutputFolderError, GeneratorBusyError) as e:
        logger.error(str(e))
        return 2

    print(result.summary)
    if result.failed_paths or result.malformed:
        print(f"{len(result.written)} saved, {len(result.failed_paths)} failed, "
              f"{len(result.malformed)} malformed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
