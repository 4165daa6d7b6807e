"""
Sector grid ("puzzle" tiling) of an unbounded hexagonal world.

Sectors are hexagons of radius ``R = 1 + 2**scale`` whose centers lie on a
lattice such that adjacent sectors share one border line of tiles. Sectors
are created on demand around viewpoints and evicted once far from all of
them; their tiles live in a shared, reference counted pool.

Mutations (`ensure_sector`, `update_views`, `evict_sector`) are not
thread-safe and must be serialized by the caller.
"""

import math
from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import structlog

from ..config import LandConfig
from ..utils.random import sub_seed
from .axial import SQRT3, Axial, axial_round, cartesian, from_cartesian, hexes_within, index_at
from .land_parts import (
    Diagnostics,
    LandPart,
    SectorListener,
    WalkSpecification,
    compose_walk_time,
    no_diagnostics,
)
from .sector import Sector, SectorStatus
from .subdivision import CornerRule, SubdivisionConfig, SubdivisionGenerator, random_corners
from .terrain import TerrainCatalog, default_catalog
from .tiles import Tile, TilePool

logger = structlog.get_logger()

WorldPos = Tuple[float, float]

_TILE_FIELDS = {f.name for f in fields(Tile)}


def scale_axial(a: Axial, scale: float) -> Axial:
    """Map between sector space and tile space; applying it twice multiplies by 3."""
    return Axial((a.q + 2 * a.r) * scale, (a.q - a.r) * scale)


@dataclass
class ViewUpdate:
    """Outcome of one `SectorGrid.update_views` call."""
    added: List[Axial] = field(default_factory=list)
    removed: List[Axial] = field(default_factory=list)


class SectorGrid:
    """Creates, holds and evicts sectors around moving viewpoints."""

    def __init__(
        self,
        config: Optional[LandConfig] = None,
        catalog: Optional[TerrainCatalog] = None,
        corner_rule: CornerRule = random_corners,
        listener: Optional[SectorListener] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        """
        Initialize an empty grid.

        Args:
            config: Sector radius, view distance, heights and world seed
            catalog: Terrain types; defaults to `default_catalog`
            corner_rule: Anchor tile rule of the subdivision generator
            listener: Rendering side notified of sector and tile changes
            diagnostics: Optional ``(name, value)`` counter sink
        """
        self.config = config or LandConfig()
        self.catalog = catalog or default_catalog(self.config.terrain_height)
        self.generator = SubdivisionGenerator(
            SubdivisionConfig(self.config.scale, self.config.terrain_height),
            self.catalog,
            seed=self.config.seed,
            corner_rule=corner_rule,
        )
        self.listener = listener or SectorListener()
        self.diagnostics = diagnostics or no_diagnostics
        self.pool = TilePool()
        self.parts: List[LandPart] = []
        self._sectors: Dict[Axial, Sector] = {}

    # Geometry -------------------------------------------------------------

    @property
    def sector_radius(self) -> int:
        return self.config.sector_radius

    @property
    def sector_span(self) -> float:
        """World distance between the centers of two adjacent sectors."""
        return 3 * (self.sector_radius - 1) * self.config.tile_size

    def sector_to_tile(self, key: Axial) -> Axial:
        """World tile at the center of a sector."""
        return scale_axial(key, self.sector_radius - 1)

    def tile_to_sector(self, coords: Axial) -> Axial:
        """Key of the sector whose center is nearest to a tile."""
        return axial_round(scale_axial(coords, 1 / (3 * (self.sector_radius - 1))))

    def sector_position(self, key: Axial) -> WorldPos:
        """Cartesian position of a sector center."""
        return cartesian(self.sector_to_tile(key), self.config.tile_size)

    def sectors_in_view(self, viewpoint: WorldPos) -> Iterator[Axial]:
        """Keys of the sectors that may be seen from a viewpoint."""
        reach = self.config.view_distance + self.sector_span
        rings = math.ceil(reach / (self.sector_span * SQRT3 / 2)) + 1
        center_key = self.tile_to_sector(from_cartesian(viewpoint, self.config.tile_size))
        for key in hexes_within(center_key, rings):
            if math.dist(self.sector_position(key), viewpoint) <= reach:
                yield key

    # Access ---------------------------------------------------------------

    @property
    def sectors(self) -> List[Sector]:
        return list(self._sectors.values())

    def __len__(self) -> int:
        return len(self._sectors)

    def __contains__(self, key: object) -> bool:
        return key in self._sectors

    def sector(self, key: Axial) -> Optional[Sector]:
        """Held sector with a given key, or None."""
        return self._sectors.get(key)

    def sector_at(self, coords: Axial) -> Optional[Sector]:
        """A ready sector containing a world tile, or None if it is not generated."""
        for key in sorted(self.pool.users(coords)):
            sector = self._sectors.get(key)
            if sector is not None and sector.status is SectorStatus.READY and sector.contains(coords):
                return sector
        return None

    def tile(self, coords: Axial) -> Optional[Tile]:
        """Generated tile at world coordinates, or None."""
        return self.pool.get(coords)

    def add_part(self, part: LandPart) -> None:
        """Append a generation stage; stages run in insertion order."""
        self.parts.append(part)

    def walk_time_multiplier(self, movement: WalkSpecification) -> float:
        """Terrain factor times the factors of all land parts (NaN if impassable)."""
        terrain = self.catalog.get(movement.on.terrain)
        base = terrain.walk_time_multiplier if terrain is not None else 1.0
        return base * compose_walk_time(self.parts, movement)

    # Mutation -------------------------------------------------------------

    def ensure_sector(self, key: Axial) -> Sector:
        """Return the sector with this key, generating it first if needed."""
        sector = self._sectors.get(key)
        if sector is None:
            self._create_sectors([key])
            sector = self._sectors[key]
        return sector

    def update_views(self, viewpoints: Iterable[Sequence[float]]) -> ViewUpdate:
        """
        Create the sectors seen from the viewpoints and evict the far ones.

        The set of sectors to keep is computed first, then missing sectors are
        created, then sectors farther than ``view_distance + 2 * sector_span``
        from every viewpoint are evicted.

        Args:
            viewpoints: Cartesian positions (only x and y are used)

        Returns:
            Keys of the added and removed sectors
        """
        points = [(float(p[0]), float(p[1])) for p in viewpoints]
        keep: Dict[Axial, None] = {}
        for point in points:
            for key in self.sectors_in_view(point):
                keep.setdefault(key)

        update = ViewUpdate(added=[key for key in keep if key not in self._sectors])
        self._create_sectors(update.added)

        horizon = self.config.view_distance + 2 * self.sector_span
        for key in list(self._sectors):
            if key in keep:
                continue
            position = self.sector_position(key)
            if all(math.dist(position, point) > horizon for point in points):
                self.evict_sector(key)
                update.removed.append(key)

        self.diagnostics("sectors", len(self._sectors))
        self.diagnostics("tiles", len(self.pool))
        logger.info(
            "Views updated",
            viewpoints=len(points),
            added=len(update.added),
            removed=len(update.removed),
            sectors=len(self._sectors),
            tiles=len(self.pool),
        )
        return update

    def evict_sector(self, key: Axial) -> bool:
        """Drop a sector and release its tiles. Returns False if it was not held."""
        sector = self._sectors.pop(key, None)
        if sector is None:
            return False
        freed = sector.free_tiles()
        self.listener.on_sector_removed(sector)
        logger.debug("Sector evicted", key=tuple(key), tiles_freed=freed)
        return True

    def _create_sectors(self, keys: Sequence[Axial]) -> List[Sector]:
        if not keys:
            return []
        generation_infos = [(part, part.begin_generation()) for part in self.parts]
        created = [self._generate_sector(key, generation_infos) for key in keys]
        try:
            for part, info in generation_infos:
                part.spread_generation(self._update_tile, info)
        finally:
            for sector in created:
                self.listener.on_sector_added(sector)
        return created

    def _generate_sector(self, key: Axial, generation_infos) -> Sector:
        center = self.sector_to_tile(key)
        seed = sub_seed(self.config.seed, "key", index_at(key))
        sector = Sector(key, center, self.sector_radius, seed, self.pool)
        tile_keys = sector.tile_keys()
        buffer = [self.pool.get(coords) for coords in tile_keys]
        fresh = [tile is None for tile in buffer]

        sector.status = SectorStatus.GENERATING
        tiles = self.generator.generate(center, buffer)
        for coords, tile, is_fresh in zip(tile_keys, tiles, fresh):
            if not is_fresh:
                self.pool.attach(coords, key)
                continue
            for part, info in generation_infos:
                refined = part.refine_tile(tile, coords, info)
                if refined is not None:
                    tile = refined
            self.pool.add(coords, tile, key)

        sector.status = SectorStatus.READY
        self._sectors[key] = sector
        logger.debug(
            "Sector generated",
            key=tuple(key),
            center=tuple(center),
            reused_tiles=fresh.count(False),
        )
        return sector

    def _update_tile(self, sector_keys: Iterable[Axial], coords: Axial, **changes) -> None:
        """Modify a pooled tile, attach it to sectors and notify the listener."""
        tile = self.pool.get(coords)
        if tile is None:
            raise KeyError(f"No tile generated at {tuple(coords)}")
        for name, value in changes.items():
            if name not in _TILE_FIELDS:
                raise AttributeError(f"Tile has no field '{name}'")
            setattr(tile, name, value)
        for key in sector_keys:
            sector = self._sectors.get(key)
            if sector is not None and self.pool.attach(coords, key):
                sector.attached_tiles.add(coords)
        self.listener.on_tile_invalidated(sorted(self.pool.users(coords)), coords, tile)
