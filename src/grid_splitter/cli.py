"""
Command-line entry point.

    grid-splitter split photos/ -o out --rows 2 --cols 3
    grid-splitter split a.png b.png -o out --h-lines 0.25,0.6
    grid-splitter split -o out --project album.json
    grid-splitter init-config --rows 3 --cols 3 -o grid.json

Exit codes: 0 all images split, 1 some images failed, 2 fatal error.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from grid_splitter import __version__
from grid_splitter.core.errors import GridSplitterError
from grid_splitter.core.models import ConfigOverrides, ImageSet, SplitConfig, collect_images
from grid_splitter.core.models.split_config import even_positions
from grid_splitter.core.utils.serialization import load_project, load_split_config, save_split_config
from grid_splitter.splitter import BatchExporter, ExportConfig

logger = logging.getLogger("grid_splitter")

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def _parse_lines(text: str) -> List[float]:
    """Parse "0.25,0.6" into positions (argparse type)."""
    if not text.strip():
        return []
    try:
        positions = [float(part) for part in text.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a comma-separated list of numbers: {text!r}")
    for position in positions:
        if not 0.0 <= position <= 1.0:
            raise argparse.ArgumentTypeError(f"line position out of range [0, 1]: {position}")
    return positions


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grid-splitter",
        description="Split images into a grid of JPEG cells.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    split = sub.add_parser("split", help="Split images into grid cells")
    split.add_argument("inputs", nargs="*", type=Path, help="Image files or directories")
    split.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    split.add_argument("--rows", type=_positive_int, help="Evenly spaced rows (default 1)")
    split.add_argument("--cols", type=_positive_int, help="Evenly spaced columns (default 1)")
    split.add_argument("--h-lines", type=_parse_lines, help="Horizontal line positions, e.g. 0.3,0.7")
    split.add_argument("--v-lines", type=_parse_lines, help="Vertical line positions, e.g. 0.5")
    source = split.add_mutually_exclusive_group()
    source.add_argument("--config", type=Path, help="Split config JSON for all images")
    source.add_argument("--project", type=Path, help="Project JSON with images, config and overrides")
    split.add_argument("--quality", type=int, default=75, help="JPEG quality 1-95 (default 75)")
    split.add_argument("--workers", type=_positive_int, help="Worker threads (default: CPU count, max 8)")
    split.add_argument("--keep-stems", action="store_true",
                       help="Do not prefix outputs of sources that share a file name")
    split.add_argument("--timings", type=Path, help="Write phase timings JSON here")

    init = sub.add_parser("init-config", help="Write an evenly spaced split config")
    init.add_argument("--rows", type=_positive_int, default=1)
    init.add_argument("--cols", type=_positive_int, default=1)
    init.add_argument("-o", "--output", type=Path, required=True, help="Config file to write")

    return parser


def _global_config(args: argparse.Namespace) -> SplitConfig:
    """Split config from --rows/--cols with optional explicit line lists."""
    h_lines = args.h_lines if args.h_lines is not None else even_positions(args.rows or 1)
    v_lines = args.v_lines if args.v_lines is not None else even_positions(args.cols or 1)
    return SplitConfig.from_lines(h_lines, v_lines)


def _ignored_grid_flags(args: argparse.Namespace) -> List[str]:
    """Grid flags the chosen config source overrides."""
    if args.project or args.config:
        flags = [("--rows", args.rows), ("--cols", args.cols),
                 ("--h-lines", args.h_lines), ("--v-lines", args.v_lines)]
    else:
        flags = [("--rows", args.rows if args.h_lines is not None else None),
                 ("--cols", args.cols if args.v_lines is not None else None)]
    return [flag for flag, value in flags if value is not None]


def _log_progress(completed: int, total: int) -> None:
    logger.info(f"Progress: {completed}/{total} ({completed * 100 / total:.1f}%)")


def run_split(args: argparse.Namespace) -> int:
    overrides = ConfigOverrides()
    images = ImageSet()

    ignored = _ignored_grid_flags(args)
    if ignored:
        source = "--project" if args.project else "--config" if args.config else "explicit line positions"
        logger.warning(f"Ignoring {', '.join(ignored)}: grid comes from {source}")

    if args.project:
        project = load_project(args.project)
        images = project.images
        global_config = project.global_config
        overrides = project.overrides
    elif args.config:
        global_config = load_split_config(args.config)
    else:
        global_config = _global_config(args)

    images.add(collect_images(args.inputs))
    if not images:
        logger.error("No input images")
        return EXIT_FATAL

    logger.debug(f"Global config: {global_config!r}, overrides for {overrides.indices()}")

    export_config = ExportConfig(
        jpeg_quality=args.quality,
        max_workers=args.workers,
        disambiguate_stems=not args.keep_stems,
        record_timings=args.timings is not None,
    )
    result = BatchExporter(export_config).export(
        images,
        global_config,
        overrides,
        args.output,
        progress=_log_progress,
    )

    if args.timings and result.timings is not None:
        result.timings.save(args.timings)

    for failure in result.errors:
        logger.error(f"  {failure}")
    logger.info(f"Done: {result.processed} processed, {result.failed} failed")
    return EXIT_OK if result.failed == 0 else EXIT_PARTIAL


def run_init_config(args: argparse.Namespace) -> int:
    config = SplitConfig.new(args.rows, args.cols)
    save_split_config(config, args.output)
    logger.info(f"Wrote {args.rows}x{args.cols} config to {args.output}")
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        if args.command == "split":
            return run_split(args)
        return run_init_config(args)
    except (GridSplitterError, OSError, ValueError) as e:
        logger.error(f"Error: {e}")
        return EXIT_FATAL
