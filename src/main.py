"""Main module for the application."""

import argparse
import logging
import sys

from batch.config import BatchConfig
from batch.orchestrator import BatchOrchestrator

logger = logging.getLogger("edge_detector")


def build_parser(defaults: BatchConfig) -> argparse.ArgumentParser:
    """Build the command-line parser.

    Args:
        defaults (BatchConfig): Config whose values become the option defaults.

    Returns:
        argparse.ArgumentParser: Parser for ``edge-detector``.
    """
    parser = argparse.ArgumentParser(
        prog="edge-detector",
        description="Apply a Laplacian edge-detection filter to P6 images.",
    )
    parser.add_argument("files", nargs="+", metavar="filename", help="input P6 image")
    parser.add_argument(
        "-w", "--workers", type=int, default=defaults.num_workers,
        help=f"threads per image (default: {defaults.num_workers})",
    )
    parser.add_argument(
        "-o", "--output-dir", default=defaults.output_dir,
        help="directory for laplacian<i>.ppm outputs (default: current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv=None) -> int:
    """Filter every file named on the command line.

    Args:
        argv (list[str], optional): Arguments, defaults to ``sys.argv[1:]``.

    Returns:
        int: 0 if every image was written, 1 if any failed, 2 on a bad
        environment override.
    """
    try:
        defaults = BatchConfig.from_env()
    except ValueError as exc:
        print(f"edge-detector: {exc}", file=sys.stderr)
        return 2

    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("--workers must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)-16s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
    )

    config = BatchConfig(
        num_workers=args.workers,
        output_prefix=defaults.output_prefix,
        output_dir=args.output_dir,
        extension=defaults.extension,
    )
    report = BatchOrchestrator(config).run(args.files)

    print(report.summary_line())
    if not report.ok:
        logger.error("%d of %d images failed", len(report.failed), len(report.tasks))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
