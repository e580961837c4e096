"""Command-line pattern generator.

    beadboard photo.png -W 40 -H 30 -s 90 -o photo.json --png photo.png
    beadboard --render photo.json -o photo.png
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import patternfile, render
from .config import ConfigManager, choose_multiplier, qr_preset
from .generator import GenerationError, decode_image, generate_dominant_cell_pattern
from .grid import GridSize, color_counts
from .normalize import normalize_grid


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beadboard",
        description="Fuse-bead pattern generator",
    )
    parser.add_argument("input", help="Input image, or a pattern JSON with --render")
    parser.add_argument("-o", "--output", default=None,
                        help="Output path (default: <input>_pattern.json, "
                             "or <input>.png with --render)")
    parser.add_argument("-W", "--width", type=int, default=None,
                        help="Grid width in beads (default: from config, 29)")
    parser.add_argument("-H", "--height", type=int, default=None,
                        help="Grid height in beads (default: from config, 29)")
    parser.add_argument("-s", "--scale", type=int, default=None,
                        help="Image scale in percent of the grid (default: 100)")
    parser.add_argument("-m", "--multiplier", type=int, default=0,
                        help="Samples per cell per axis (0=auto from grid size)")
    parser.add_argument("--offset-x", type=int, default=0,
                        help="Shift the image right by N cells (negative = left)")
    parser.add_argument("--offset-y", type=int, default=0,
                        help="Shift the image down by N cells (negative = up)")
    parser.add_argument("--qr-modules", type=int, default=0,
                        help="Input is a QR code with N modules per side "
                             "(presets scale and multiplier)")
    parser.add_argument("-n", "--normalize", type=float, default=0.0,
                        help="Merge colors closer than this Delta E (0=off)")
    parser.add_argument("--png", default=None,
                        help="Also write a rendered PNG to this path")
    parser.add_argument("-c", "--cell-size", type=int, default=render.CELL_SIZE,
                        help=f"PNG cell size in pixels (default: {render.CELL_SIZE})")
    parser.add_argument("--render", action="store_true",
                        help="Render an existing pattern JSON to PNG")
    parser.add_argument("--config", default=None,
                        help="Config file (default: ~/.beadboard.json)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    return parser


def _render_existing(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else input_path.with_suffix(".png")
    try:
        pf = patternfile.load(input_path)
    except (OSError, patternfile.PatternFileError) as e:
        print(f"Error: {e}")
        return 1
    render.save_png(output_path, pf.pattern, args.cell_size)
    print(f"Saved: {output_path}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.render:
        return _render_existing(args)

    manager = ConfigManager(Path(args.config)) if args.config else ConfigManager()
    config = manager.load()

    input_path = Path(args.input)
    if args.output is None:
        output_path = input_path.parent / f"{input_path.stem}_pattern.json"
    else:
        output_path = Path(args.output)

    try:
        size = GridSize(args.width or config.grid_width, args.height or config.grid_height)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    scale = args.scale if args.scale is not None else config.scale_percent
    multiplier = args.multiplier or choose_multiplier(size, config)
    if args.qr_modules:
        qr_scale, qr_multiplier = qr_preset(args.qr_modules, scale)
        scale = qr_scale if args.scale is None else scale
        multiplier = args.multiplier or qr_multiplier

    # 1. Load image
    print(f"Loading image: {input_path}")
    try:
        img = decode_image(input_path)
    except GenerationError as e:
        print(f"Error: {e}")
        return 1
    print(f"  Image size: {img.width}x{img.height}")

    # 2. Generate
    print(f"Generating {size.width}x{size.height} pattern "
          f"(scale={scale}%, multiplier={multiplier})...")
    pattern = generate_dominant_cell_pattern(
        img, scale, size, multiplier, args.offset_x, args.offset_y)
    print(f"  {len(color_counts(pattern))} unique colors")

    # 3. Normalize
    if args.normalize > 0:
        print(f"Normalizing colors (threshold={args.normalize})...")
        pattern = normalize_grid(pattern, args.normalize)
        print(f"  {len(color_counts(pattern))} unique colors after normalization")

    # 4. Write
    patternfile.save(output_path, size, scale, pattern)
    print(f"Saved: {output_path}")
    if args.png:
        render.save_png(args.png, pattern, args.cell_size)
        print(f"Saved: {args.png}")

    # Summary
    usage = color_counts(pattern)
    total = sum(count for _, count in usage)
    print(f"\nColor usage ({len(usage)} colors, {total} beads total):")
    for color, count in usage:
        print(f"  {color}: {count:4d}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
