"""
Command line entry point.

    hexaboard generate --seed 42 --x 0 --y 0
    hexaboard path --seed 42 --start 0 0 --goal 12 -5
"""

import argparse
import json
import sys
from collections import Counter
from typing import List, Optional, Union

import numpy as np
import structlog
from pydantic import ValidationError

from .config import LandConfig, Settings, configure_logging
from .core.axial import Axial, cartesian
from .core.hydrology import Ocean, RiverOptions, Rivers
from .core.pathfinding import costing_path, walk_cost
from .core.sector_grid import SectorGrid
from .core.subdivision import heights_array

logger = structlog.get_logger()


def _seed(value: str) -> Union[int, str]:
    try:
        return int(value)
    except ValueError:
        return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hexaboard", description="Procedural hexagonal world generation")
    parser.add_argument("--seed", type=_seed, default=0, help="World seed (number or text)")
    parser.add_argument("--sector-radius", type=int, default=17, help="Sector radius, 1 + a power of two")
    parser.add_argument("--view-distance", type=float, default=60.0, help="Generation distance around viewpoints")
    parser.add_argument("--terrain-height", type=float, default=80.0, help="Height normalization range")
    parser.add_argument("--sea-level", type=float, default=0.0, help="Height under which tiles are sea")
    parser.add_argument("--rivers", action="store_true", help="Carve rivers")

    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate the sectors around a point and summarize them")
    generate.add_argument("--x", type=float, default=0.0, help="Viewpoint x")
    generate.add_argument("--y", type=float, default=0.0, help="Viewpoint y")

    path = commands.add_parser("path", help="Find a walking path between two tiles")
    path.add_argument("--start", type=int, nargs=2, metavar=("Q", "R"), required=True)
    path.add_argument("--goal", type=int, nargs=2, metavar=("Q", "R"), required=True)
    path.add_argument("--slope-factor", type=float, default=0.05, help="Walking cost per unit of climb")
    return parser


def build_grid(args: argparse.Namespace) -> SectorGrid:
    config = LandConfig(
        sector_radius=args.sector_radius,
        view_distance=args.view_distance,
        terrain_height=args.terrain_height,
        sea_level=args.sea_level,
        seed=args.seed,
    )
    grid = SectorGrid(config)
    if args.rivers:
        grid.add_part(Rivers(grid, options=RiverOptions()))
    grid.add_part(Ocean(config.sea_level))
    return grid


def summarize(grid: SectorGrid) -> dict:
    """Counters, terrain histogram and height statistics of the generated tiles."""
    tiles = [tile for _, tile in grid.pool.items()]
    heights = heights_array(tiles)
    return {
        "sectors": len(grid),
        "tiles": len(tiles),
        "terrain": dict(sorted(Counter(tile.terrain for tile in tiles).items())),
        "height": {
            "min": float(np.min(heights)),
            "max": float(np.max(heights)),
            "mean": float(np.mean(heights)),
        } if tiles else None,
    }


def run_generate(args: argparse.Namespace) -> int:
    grid = build_grid(args)
    grid.update_views([(args.x, args.y)])
    print(json.dumps(summarize(grid), indent=2))
    return 0


def run_path(args: argparse.Namespace) -> int:
    grid = build_grid(args)
    start, goal = Axial(*args.start), Axial(*args.goal)
    grid.update_views([cartesian(start, grid.config.tile_size), cartesian(goal, grid.config.tile_size)])

    path = costing_path(start, walk_cost(grid, args.slope_factor), lambda key: key == goal)
    result = {
        "start": list(start),
        "goal": list(goal),
        "path": [list(key) for key in path] if path is not None else None,
    }
    print(json.dumps(result))
    if path is None:
        logger.warning("Goal unreachable", start=tuple(start), goal=tuple(goal))
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, configure logging and run a command."""
    args = build_parser().parse_args(argv)
    configure_logging(Settings())
    try:
        if args.command == "generate":
            return run_generate(args)
        return run_path(args)
    except ValidationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
