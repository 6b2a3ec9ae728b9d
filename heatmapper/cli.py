"""
Command line interface for the heat-map blender.

Blends every PNG below a directory into a single averaged image, adjusts its
saturation and writes it out.

Usage examples
--------------

Blend the current directory into ``blended.png``::

    python -m heatmapper.cli

Blend ``shots/``, boost saturation and pick the output name::

    python -m heatmapper.cli shots 1.8 heat.png

Reuse stored settings, overriding the input directory and saturation::

    python -m heatmapper.cli shots 0.5 --config run.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import HeatMapConfig, load_config, save_config
from .errors import HeatMapperError
from .pipeline import run_pipeline
from .saturation import ClampPolicy

logger = logging.getLogger("heatmapper")


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heatmapper",
        description="Blend multiple images averaged into one image, then adjust saturation.",
    )
    parser.add_argument(
        "input_dir",
        nargs="?",
        type=Path,
        default=None,
        help="Directory to search for images (default: ./).",
    )
    parser.add_argument(
        "saturation",
        nargs="?",
        type=float,
        default=None,
        help="Saturation factor: 0 = grey, 1 = unchanged (default), >1 = boosted.",
    )
    parser.add_argument(
        "output",
        nargs="?",
        type=Path,
        default=None,
        help="Output PNG path (default: blended.png).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON config file; positional arguments and flags override it.",
    )
    parser.add_argument(
        "--clamp",
        choices=[p.value for p in ClampPolicy],
        default=None,
        help="How out-of-range saturated values are stored (default: clip).",
    )
    parser.add_argument(
        "--no-recursive",
        action="store_true",
        help="Only look at files directly inside the input directory.",
    )
    parser.add_argument(
        "--extensions",
        default=None,
        help="Comma-separated file extensions to blend (default: .png).",
    )
    parser.add_argument(
        "--dump-config",
        type=Path,
        help="Write the effective configuration to this JSON file.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def resolve_config(args: argparse.Namespace) -> HeatMapConfig:
    """Merge defaults, an optional config file and explicit CLI arguments."""
    cfg = load_config(args.config) if args.config else HeatMapConfig()

    overrides = {}
    if args.input_dir is not None:
        overrides["input_dir"] = args.input_dir
    if args.saturation is not None:
        overrides["saturation"] = args.saturation
    if args.output is not None:
        overrides["output"] = args.output
    if args.clamp is not None:
        overrides["clamp"] = args.clamp
    if args.no_recursive:
        overrides["recursive"] = False
    if args.extensions is not None:
        overrides["extensions"] = args.extensions

    if not overrides:
        return cfg
    merged = cfg.to_dict()
    merged.update(overrides)
    return HeatMapConfig.from_dict(merged)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)

    try:
        cfg = resolve_config(args)
        if args.dump_config:
            save_config(cfg, args.dump_config)
            logger.info("Configuration written to %s", args.dump_config)
        result = run_pipeline(cfg)
    except (HeatMapperError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info(
        "Done: %d image(s) -> %s", len(result.image_paths), result.output_path,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
