# main.py
"""
Command line entry point for monoicon.
"""
import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence, Tuple

from . import config
from .cache import TieredCache
from .managers import PerformanceMonitor
from .identity import derive_identity
from .processor import IconProcessingError, IconProcessor
from .service import IconService


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Configure and return the application logger.

    The handler setup is idempotent to avoid duplicate handlers when the
    entry point runs more than once in a process (e.g., in tests). A rotating
    file handler limits on-disk log growth while mirroring output to stdout.
    """

    logger = logging.getLogger(config.LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = Path(os.environ.get("MONOICON_LOG_PATH", "monoicon.log")).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


def parse_size(value: str) -> Tuple[int, int]:
    """Parse ``WxH`` (or a single ``N`` for a square) into a size tuple."""
    try:
        if "x" in value.lower():
            width, height = value.lower().split("x", 1)
            size = (int(width), int(height))
        else:
            size = (int(value), int(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid size: {value!r}") from exc
    if size[0] <= 0 or size[1] <= 0:
        raise argparse.ArgumentTypeError(f"Size must be positive: {value!r}")
    return size


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monoicon",
        description="Classify icons and turn coloured ones into white silhouettes.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    parser.add_argument("--stats", action="store_true", help="print cache occupancy on exit")
    commands = parser.add_subparsers(dest="command", required=True)

    classify = commands.add_parser("classify", help="report whether icons are coloured")
    classify.add_argument("paths", nargs="+")

    convert = commands.add_parser("convert", help="convert one icon")
    convert.add_argument("input")
    convert.add_argument("output")
    convert.add_argument("--size", type=parse_size)

    batch = commands.add_parser("batch", help="convert many icons into a directory")
    batch.add_argument("output_dir")
    batch.add_argument("inputs", nargs="+")
    batch.add_argument("--size", type=parse_size)
    batch.add_argument("--workers", type=int, default=4)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(args.verbose)

    cache = TieredCache()
    service = IconService(cache)
    processor = IconProcessor(service, max_workers=getattr(args, "workers", 4))
    status = 0

    if args.command == "classify":
        for path in args.paths:
            try:
                image = processor.load_icon(path)
            except IconProcessingError as e:
                logger.error("%s", e)
                status = 1
                continue
            colored = service.classify(derive_identity(str(path)), image).is_colored
            print(f"{path}: {'colored' if colored else 'monochrome'}")
    elif args.command == "convert":
        try:
            result = processor.process_icon(args.input, args.output, args.size)
        except IconProcessingError as e:
            logger.error("%s", e)
            status = 1
        else:
            state = "converted" if result.is_colored else "kept (already monochrome)"
            print(f"{args.input}: {state} -> {result.output}")
    elif args.command == "batch":
        monitor = PerformanceMonitor(cache)
        monitor.start()
        try:
            results = processor.process_batch(args.inputs, args.output_dir, args.size)
        finally:
            monitor.stop()
        failed = [path for path, ok in results.items() if not ok]
        print(f"Processed {len(results) - len(failed)}/{len(results)} icons")
        status = 1 if failed else 0

    if args.stats:
        for name, stats in service.stats().items():
            print(f"{name}: {stats.size}/{stats.capacity}")

    return status


if __name__ == "__main__":
    sys.exit(main())
