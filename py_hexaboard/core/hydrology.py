"""
Water land parts: rivers carved from the hills down to the sea, and the sea
itself as an obstacle for walking.

Rivers work across sector borders: sources are picked while tiles are
generated, then each source is routed downhill once the whole batch of
sectors exists, and the carved tiles are attached to the source's sectors.
A source whose route needs tiles of sectors not generated yet is kept and
routed again after the next batch.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog

from .axial import Axial, distance, index_at, neighbors
from .land_parts import LandPart, SectorNotGeneratedError, TileUpdater, WalkSpecification
from .lcg_prng import LcgPRNG
from .pathfinding import costing_path
from .tiles import Tile

logger = structlog.get_logger()


@dataclass
class RiverOptions:
    """River generation options."""
    river_terrain: str = "river"
    min_length: int = 3  # Shorter paths to the sea are not rivers
    min_bank_slope: float = 4.0  # Minimum depth of the bed under its banks
    min_stream_slope: float = 2.0  # Minimum descent between two river tiles
    max_axial_distance: int = 64  # How far from its source a river may go
    sources_per_tile: float = 0.02  # Source probability of a tile at terrain height
    max_sea_neighbors: int = 3  # River mouths with more sea around are cut back


class Rivers(LandPart):
    """Carves river beds from randomly chosen sources down to the sea."""

    def __init__(self, grid, seed=None, options: Optional[RiverOptions] = None):
        """
        Initialize river generation on a sector grid.

        Args:
            grid: Grid whose tiles are read and updated
            seed: Seed of the source choice; defaults to the grid seed
            options: Generation options

        Raises:
            ValueError: If the river terrain is not in the grid catalog
        """
        self.grid = grid
        self.seed = grid.config.seed if seed is None else seed
        self.options = options or RiverOptions()
        if self.options.river_terrain not in grid.catalog:
            raise ValueError(f"River terrain '{self.options.river_terrain}' is not in the terrain catalog")
        self.sea_level = grid.config.sea_level
        self.terrain_height = grid.config.terrain_height
        # Sources waiting for neighbor sectors, in discovery order
        self.pending: Dict[Axial, None] = {}

    def begin_generation(self) -> List[Axial]:
        return []

    def refine_tile(self, tile: Tile, coords: Axial, sources: List[Axial]) -> None:
        # Only even coordinates, so that two sources are never neighbors
        if tile.height < self.sea_level or (int(coords.q) | int(coords.r)) & 1:
            return None
        gen = LcgPRNG(self.seed, "rivers", index_at(coords))
        altitude = (tile.height - self.sea_level) / (self.terrain_height - self.sea_level)
        if gen() < self.options.sources_per_tile * altitude:
            sources.append(coords)
        return None

    def spread_generation(self, update_tile: TileUpdater, sources: List[Axial]) -> None:
        queue = dict(self.pending)
        for source in sources:
            queue.setdefault(source)
        self.pending = {}
        rivers = 0
        for source in queue:
            if self.grid.tile(source) is None:
                continue  # Its sectors were evicted
            try:
                path = self.route(source)
                if path is None:
                    continue
                path = self.trim_mouth(path)
            except SectorNotGeneratedError:
                self.pending[source] = None
                continue
            if len(path) <= self.options.min_length:
                continue
            self.carve(update_tile, path)
            rivers += 1
        if queue:
            logger.info("Rivers generated", sources=len(queue), rivers=rivers, pending=len(self.pending))

    def walk_time_multiplier(self, movement: WalkSpecification) -> Optional[float]:
        return math.nan if movement.on.terrain == self.options.river_terrain else None

    def _tile(self, coords: Axial) -> Tile:
        tile = self.grid.tile(coords)
        if tile is None:
            raise SectorNotGeneratedError(coords)
        return tile

    def route(self, source: Axial) -> Optional[List[Axial]]:
        """
        Path of a river from its source to the sea, or None if none reachable.

        Going up costs the square of the climb, and not following the
        steepest descent costs the height difference with the lowest neighbor.
        Heights from before carving are used so that rivers do not merely
        follow each other.

        Raises:
            SectorNotGeneratedError: If the search reaches a tile that is not
                generated yet
        """
        get = self._tile

        def cost(from_key: Axial, to_key: Axial) -> float:
            if distance(to_key, source) > self.options.max_axial_distance:
                return math.nan
            z_to = get(to_key).ground_height
            lowest = min(get(key).ground_height for key in neighbors(from_key))
            return max(0.0, z_to - get(from_key).ground_height) ** 2 + z_to - lowest

        def is_sea(key: Axial) -> bool:
            return get(key).ground_height < self.sea_level

        return costing_path(source, cost, is_sea)

    def trim_mouth(self, path: List[Axial]) -> List[Axial]:
        """
        Cut the end of a path while it runs into open sea.

        Raises:
            SectorNotGeneratedError: If a neighbor of the mouth is not generated yet
        """
        path = list(path)
        while len(path) > self.options.min_length:
            sea = sum(self._tile(n).height < self.sea_level for n in neighbors(path[-1]))
            if sea <= self.options.max_sea_neighbors:
                break
            path.pop()
        return path

    def carve(self, update_tile: TileUpdater, path: List[Axial]) -> None:
        """
        Turn the tiles of a path into a river bed.

        The bed keeps a minimum depth under its banks and a minimum descent
        toward the mouth. Bank water levels are raised to the mean level of
        the river tiles next to them, never lowered.
        """
        opts = self.options
        get = self.grid.tile
        source = path[0]
        sector_keys = sorted(self.grid.pool.users(source))
        last = get(source)
        last_key = source
        update_tile([], source, terrain=opts.river_terrain, river_height=last.height)

        steps = path[1:]
        mouth_height = get(steps[-1]).height
        bank: Dict[Axial, None] = {}
        for i, key in enumerate(steps):
            tile = get(key)
            following = steps[i + 1] if i + 1 < len(steps) else None
            banks = [n for n in neighbors(key) if n not in (following, last_key) and get(n) is not None]
            for n in banks:
                bank.setdefault(n)
            lowest_bank = min((get(n).height for n in banks), default=tile.height + opts.min_bank_slope)

            remaining = len(steps) - i
            height = min(
                tile.height,
                lowest_bank - opts.min_bank_slope,
                last.height + (mouth_height - last.height) / remaining,
                last.height - opts.min_stream_slope,
            )
            river_height = max(self.sea_level, min(lowest_bank - opts.min_bank_slope / 3, last.river_height))
            changes = dict(terrain=opts.river_terrain, river_height=river_height, height=height)
            if tile.original_height is None:
                changes["original_height"] = tile.height
            update_tile(sector_keys, key, **changes)
            last, last_key = tile, key

        for key in bank:
            levels = []
            for n in neighbors(key):
                tile = get(n)
                if tile is not None and tile.terrain == opts.river_terrain and tile.river_height is not None:
                    levels.append(tile.river_height)
            if not levels:
                continue
            level = sum(levels) / len(levels)
            banked = get(key)
            if banked.river_height is None or banked.river_height < level:
                update_tile(sector_keys, key, river_height=level)
        logger.debug("River carved", source=tuple(source), length=len(path))


class Ocean(LandPart):
    """Makes tiles under sea level impassable for walking."""

    def __init__(self, sea_level: float = 0.0):
        self.sea_level = sea_level

    def walk_time_multiplier(self, movement: WalkSpecification) -> Optional[float]:
        return math.nan if movement.on.height < self.sea_level else None
