"""
Triangle subdivision terrain generator.

A sector of scale ``k`` is a hexagon of radius ``1 + 2**k`` seen as a fan of
6 triangles around its center. The center and the 6 outer corners are seeded
first, then each triangle is divided into 4 sub-triangles whose sides are
half the sides of the divided one. The new edge midpoints get the average
height of the edge ends plus a noise proportional to the edge length, so
large features are decided first and details last.

Every random draw is keyed by tile seeds or world coordinates, and the two
ends of an edge are always combined in world-coordinate order: an edge
shared by two sectors is generated identically by both.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import structlog

from .axial import HEX_SIDES, ORIGIN, Axial, axial_round, index_at, linear, tile_count
from .lcg_prng import LcgPRNG
from .terrain import TerrainCatalog
from .tiles import Tile

logger = structlog.get_logger()

CornerRule = Callable[[Axial, bool, LcgPRNG, TerrainCatalog, float], Tile]


def random_corners(
    coords: Axial, is_center: bool, gen: LcgPRNG, catalog: TerrainCatalog, terrain_height: float
) -> Tile:
    """Anchor tile with a uniform random height; position independent."""
    height = gen(terrain_height, -0.25 * terrain_height)
    return Tile(height=height, terrain=catalog.terrain_type(height).key, seed=gen())


def island_corners(
    coords: Axial, is_center: bool, gen: LcgPRNG, catalog: TerrainCatalog, terrain_height: float
) -> Tile:
    """Anchor tile of a single island: summit at the center, sunk perimeter."""
    height = terrain_height if is_center else -0.5 * terrain_height
    return Tile(height=height, terrain=catalog.terrain_type(height).key, seed=gen())


@dataclass
class SubdivisionConfig:
    """Configuration for subdivision generation."""

    scale: int  # Recursion depth; the sector radius is 1 + 2**scale
    terrain_height: float = 80.0

    @property
    def radius(self) -> int:
        return 1 + (1 << self.scale)


class GenerationState(Enum):
    """Progress of one sector generation."""

    EMPTY = "empty"
    CORNERS_INITIALIZED = "corners_initialized"
    SUBDIVIDING = "subdividing"
    COMPLETE = "complete"


class Subdivision:
    """
    One run of the generator over one sector tile buffer.

    Tiles already present in the buffer (borders shared with an existing
    sector) are kept and used as parents instead of being regenerated.
    """

    def __init__(self, generator: "SubdivisionGenerator", center: Axial, tiles: List[Optional[Tile]]):
        self.generator = generator
        self.center = center
        self.tiles = tiles
        self.state = GenerationState.EMPTY
        self.depth: Optional[int] = None

    def world(self, local: Axial) -> Axial:
        return linear(local, self.center)

    def init_corners(self, corners: Sequence[Axial]) -> List[Tile]:
        """
        Seed the center tile and the 6 outer corners of the fan.

        Args:
            corners: Local coordinates of the 6 outer corners

        Returns:
            The 7 anchor tiles, center first
        """
        gen = self.generator
        anchors = []
        for local, is_center in [(ORIGIN, True)] + [(corner, False) for corner in corners]:
            hex_index = index_at(local)
            if self.tiles[hex_index] is None:
                coords = self.world(local)
                rng = LcgPRNG(gen.seed, "anchor", index_at(coords))
                self.tiles[hex_index] = gen.corner_rule(coords, is_center, rng, gen.catalog, gen.config.terrain_height)
            anchors.append(self.tiles[hex_index])
        self.state = GenerationState.CORNERS_INITIALIZED
        return anchors

    def divide(self, depth: int, *triangle: Axial) -> None:
        """Fill the edge midpoints of a triangle then recurse in its 4 sub-triangles."""
        if depth == 0:
            return
        self.state = GenerationState.SUBDIVIDING
        self.depth = depth

        points = [index_at(a) for a in triangle]
        mids = [axial_round(linear((0.5, a), (0.5, triangle[(i + 1) % 3]))) for i, a in enumerate(triangle)]
        for i, mid in enumerate(mids):
            mid_index = index_at(mid)
            if self.tiles[mid_index] is None:
                j = (i + 1) % 3
                self.tiles[mid_index] = self.generator.inside_point(
                    self.tiles[points[i]],
                    self.tiles[points[j]],
                    depth,
                    self.world(triangle[i]),
                    self.world(triangle[j]),
                )

        self.divide(depth - 1, *mids)
        for i in range(3):
            self.divide(depth - 1, triangle[i], mids[i], mids[(i + 2) % 3])

    def run(self) -> List[Tile]:
        """Generate every missing tile of the buffer."""
        scale = self.generator.config.scale
        corners = [linear((1 << scale, side)) for side in HEX_SIDES]
        self.init_corners(corners)
        for c in range(6):
            self.divide(scale, corners[c], corners[(c + 1) % 6], ORIGIN)

        missing = [i for i, tile in enumerate(self.tiles) if tile is None]
        if missing:
            raise RuntimeError(f"Subdivision left {len(missing)} tiles unpopulated (first: {missing[0]})")
        self.state = GenerationState.COMPLETE
        return self.tiles


class SubdivisionGenerator:
    """
    Generates the tiles of hexagonal sectors by recursive triangle subdivision.
    """

    def __init__(
        self,
        config: SubdivisionConfig,
        catalog: TerrainCatalog,
        seed: Union[int, str] = 0,
        corner_rule: CornerRule = random_corners,
    ):
        """
        Initialize the generator.

        Args:
            config: Scale and height range
            catalog: Terrain lookup by height
            seed: World seed, used for the anchor tiles
            corner_rule: Builds the center/corner anchor tiles
        """
        if config.scale < 1:
            raise ValueError(f"Subdivision scale must be >= 1, got {config.scale}")
        self.config = config
        self.catalog = catalog
        self.seed = seed
        self.corner_rule = corner_rule

    @property
    def radius(self) -> int:
        return self.config.radius

    @property
    def nbr_tiles(self) -> int:
        """Total amount of tiles in a sector."""
        return tile_count(self.radius)

    def inside_point(self, p1: Tile, p2: Tile, depth: int, c1: Axial, c2: Axial) -> Tile:
        """
        Midpoint tile of an edge.

        Args:
            p1, p2: Tiles at the ends of the edge
            depth: Remaining subdivision depth (the edge is 2**depth tiles long)
            c1, c2: World coordinates of p1 and p2

        Returns:
            New tile; its terrain is recomputed from its height with probability
            depth/scale, else inherited from one of the ends
        """
        if tuple(c2) < tuple(c1):
            p1, p2 = p2, p1
        variance = (self.catalog.variance(p1.terrain) + self.catalog.variance(p2.terrain)) / 2
        rand_scale = ((1 << depth) / self.radius) * self.config.terrain_height * variance
        seed = LcgPRNG(p1.seed, p2.seed)()
        gen = LcgPRNG(seed)
        height = (p1.height + p2.height) / 2 + gen(0.5, -0.5) * rand_scale
        if gen() < depth / self.config.scale:
            terrain = self.catalog.terrain_type(height).key
        else:
            terrain = (p1, p2)[int(gen(2))].terrain
        return Tile(height=height, terrain=terrain, seed=seed)

    def subdivision(self, center: Axial = ORIGIN, tiles: Optional[List[Optional[Tile]]] = None) -> Subdivision:
        """Prepare a generation run for the sector centered at ``center``."""
        if tiles is None:
            tiles = [None] * self.nbr_tiles
        elif len(tiles) != self.nbr_tiles:
            raise ValueError(f"Tile buffer must hold {self.nbr_tiles} tiles, got {len(tiles)}")
        return Subdivision(self, center, tiles)

    def generate(self, center: Axial = ORIGIN, tiles: Optional[List[Optional[Tile]]] = None) -> List[Tile]:
        """
        Generate all the tiles of a sector.

        Args:
            center: World coordinates of the sector center
            tiles: Optional buffer, in `axial_at` order, with already known tiles

        Returns:
            Complete tile list indexed by local tile index
        """
        tiles = self.subdivision(center, tiles).run()
        logger.debug("Sector tiles generated", center=tuple(center), tiles=len(tiles))
        return tiles


def heights_array(tiles: Sequence[Tile]) -> np.ndarray:
    """Heights of a tile list as a float64 array."""
    return np.fromiter((tile.height for tile in tiles), dtype=np.float64, count=len(tiles))
