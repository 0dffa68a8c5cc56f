"""Command-line entrypoint: decode one file under the configured limits."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from image_limiter.data_size import size_in_kb, size_in_mb
from image_limiter.image_engine.bounded_decoder import BoundedDecoder
from image_limiter.logger import get_logger
from image_limiter.settings_manager import SettingsManager

EXIT_OK = 0
EXIT_NO_IMAGE = 1
EXIT_UNREADABLE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image_limiter", description="Decode an image under pixel limits")
    parser.add_argument("path", help="Compressed image file")
    parser.add_argument("--short-edge", type=float, help="Maximum short edge in pixels")
    parser.add_argument("--long-edge", type=float, help="Maximum long edge in pixels")
    parser.add_argument("--pixel-limit", type=float, help="Maximum width*height of the result")
    parser.add_argument("--eager", action="store_true", help="Materialize pixels inside the call")
    parser.add_argument("--settings", help="JSON settings file with default limits")
    parser.add_argument("--properties", action="store_true", help="Also print container metadata")
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    return parser


def _apply_cli_logging_options(args: argparse.Namespace) -> None:
    if args.log_level:
        os.environ["IMAGE_LIMITER_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_LIMITER_LOG_CATS"] = args.log_cats


def run(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _apply_cli_logging_options(args)
    logger = get_logger("main")

    settings = SettingsManager(args.settings) if args.settings else None
    short_edge = args.short_edge if args.short_edge is not None else (settings.short_edge if settings else None)
    long_edge = args.long_edge if args.long_edge is not None else (settings.long_edge if settings else None)
    eager = args.eager or (settings.decode_eagerly if settings else False)

    if args.pixel_limit is not None:
        decoder = BoundedDecoder(total_pixel_limit=args.pixel_limit)
    elif settings is not None:
        decoder = BoundedDecoder.from_settings(settings)
    else:
        decoder = BoundedDecoder()

    try:
        data = Path(args.path).read_bytes()
    except OSError as e:
        logger.error("cannot read %s: %s", args.path, e)
        return EXIT_UNREADABLE

    print(f"file: {args.path} ({size_in_kb(data)} KB, {size_in_mb(data)} MB)")
    if args.properties:
        for key, value in sorted(decoder.backend.read_container_properties(data).items()):
            if isinstance(value, (bytes, bytearray)):
                value = f"<{len(value)} bytes>"
            print(f"  {key}: {value}")

    result = decoder.decode(decoder.make_request(data, short_edge, long_edge, eager))
    if result is None:
        print("no image produced")
        return EXIT_NO_IMAGE

    orig, target = result.original_size, result.target_size
    print(f"original: {int(orig.width)}x{int(orig.height)}")
    print(f"target:   {int(target.width)}x{int(target.height)} (limit {decoder.total_pixel_limit:.0f} px)")
    print(f"raster:   {result.raster.width}x{result.raster.height}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(run())
