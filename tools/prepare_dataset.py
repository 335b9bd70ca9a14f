#!/usr/bin/env python3
"""Generate an augmented detector dataset from marker images.

Every image under ``<src>/markers`` becomes its own class and is swept
through the augmentation chain (resize, shear, rotate, pad, brightness, blur,
noise). Each variant is written to ``<dst>/positive/<index>.jpg`` with its
label in ``<dst>/positive/<index>.txt``.

Usage:
    Basic run:
        python tools/prepare_dataset.py --src dataset --dst dataset

    Smaller sweep with preview:
        python tools/prepare_dataset.py --minsize 50 --maxsize 150 --stepsize 50 --show

    From a config file with overrides:
        python tools/prepare_dataset.py --config markers.yaml \\
            --opts pipeline.rotate.step=5 save.quality=95
"""

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import torch

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from markergen.configs import Config, get_default_config, load_config, merge_config, parse_overrides
from markergen.data.transforms import DegenerateRangeError, DirectoryCreateError
from markergen.engine import build_driver

logger = logging.getLogger("prepare_dataset")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate an augmented detector dataset from marker images.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--src", type=str, default=None, help="Source folder (default: dataset)")
    parser.add_argument("--dst", type=str, default=None, help="Destination folder (default: dataset)")
    parser.add_argument("--minsize", type=int, default=None, help="Minimum marker size (default: 30)")
    parser.add_argument("--maxsize", type=int, default=None, help="Maximum marker size, exclusive (default: 208)")
    parser.add_argument("--stepsize", type=int, default=None, help="Marker size step (default: 40)")
    parser.add_argument("--show", action="store_true", help="Show intermediate view")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads (default: 0; ignored with --show)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for noise sampling")
    parser.add_argument(
        "--opts",
        nargs="*",
        default=[],
        help="Override config options (format: key=value, e.g., pipeline.rotate.step=5)",
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args(argv)


def set_seed(seed: int) -> None:
    """Set random seeds for reproducibility."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


def build_config(args: argparse.Namespace) -> Config:
    """Layer defaults, config file, explicit flags and ``--opts``."""
    config = load_config(args.config) if args.config else get_default_config()

    flags = {
        "src": args.src,
        "dst": args.dst,
        "minsize": args.minsize,
        "maxsize": args.maxsize,
        "stepsize": args.stepsize,
        "num_workers": args.workers,
        "seed": args.seed,
    }
    config = merge_config(config, {k: v for k, v in flags.items() if v is not None})
    if args.show:
        config.show = True

    if args.opts:
        overrides = parse_overrides(args.opts)
        for key, value in overrides.items():
            logger.info(f"Override: {key} = {value}")
        config = merge_config(config, overrides)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    if config.get("seed") is not None:
        set_seed(config.seed)
        logger.info(f"Random seed: {config.seed}")

    try:
        driver = build_driver(config)
    except DegenerateRangeError as e:
        logger.error(f"Degenerate parameter range: {e}")
        return 2
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Pipeline: {driver.pipeline}")

    try:
        driver.run()
    except DirectoryCreateError as e:
        logger.error(f"Aborting run: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
