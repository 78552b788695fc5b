"""Command-line interface for palettegen."""

import argparse
import json
import logging
import sys
from typing import List, Optional

import numpy as np

from palettegen.palette import PaletteEntry, make_entry, random_palette
from palettegen.pipeline import PaletteExtractor
from palettegen.types import PaletteConfig, PaletteError, WHITE


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="palettegen",
        description="Extract a color palette from an image, or generate a random one",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Five dominant colors of a photo
  palettegen photo.jpg

  # Eight colors, reproducible, as JSON
  palettegen photo.jpg -k 8 --seed 7 --format json

  # Random palette
  palettegen --random
        """,
    )

    parser.add_argument("input", nargs="?", help="Input image file path (JPEG/PNG)")

    parser.add_argument(
        "--random",
        action="store_true",
        help="Generate a random palette instead of reading an image",
    )

    parser.add_argument(
        "-k",
        "--colors",
        type=int,
        default=5,
        help="Number of palette colors (default: 5)",
    )

    parser.add_argument(
        "--iterations",
        type=int,
        default=10,
        help="Maximum k-means iterations (default: 10)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible palettes",
    )

    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=1,
        help="Threads for the cluster assignment step (default: 1)",
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-v for info, -vv for debug)",
    )

    return parser


def format_entries(entries: List[PaletteEntry], fmt: str) -> str:
    """Render palette entries for the terminal."""
    if fmt == "json":
        return json.dumps(
            [
                {
                    "hex": entry.hex,
                    "rgb": list(entry.color.as_tuple()),
                    "contrast": "white" if entry.contrast == WHITE else "black",
                }
                for entry in entries
            ],
            indent=2,
        )
    return "\n".join(entry.hex for entry in entries)


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.verbose:
        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if not parsed.random and parsed.input is None:
        print("Error: an input image or --random is required", file=sys.stderr)
        return 1

    try:
        if parsed.random:
            if parsed.colors < 1:
                print(f"Error: --colors must be >= 1, got {parsed.colors}", file=sys.stderr)
                return 1
            rng = np.random.default_rng(parsed.seed)
            colors = random_palette(parsed.colors, rng)
        else:
            config = PaletteConfig(
                n_colors=parsed.colors,
                max_iterations=parsed.iterations,
                seed=parsed.seed,
                n_jobs=parsed.jobs,
            )
            colors = PaletteExtractor(config).extract(parsed.input)

        print(format_entries([make_entry(c) for c in colors], parsed.format))
        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PaletteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
