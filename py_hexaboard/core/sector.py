"""
Sectors: hexagonal chunks of tiles, the unit of generation and eviction.

A sector does not own its tiles: it references them in the world tile pool
by world coordinates, in local `axial_at` order.
"""

from enum import Enum
from typing import Iterator, List, Set, Tuple, Union

import numpy as np

from .axial import Axial, axial_at, distance, linear, tile_count
from .subdivision import heights_array
from .tiles import Tile, TilePool

Triangle = Tuple[int, Tuple[Axial, Axial, Axial]]


class SectorStatus(Enum):
    """Lifecycle of a sector."""

    CREATING = "creating"
    GENERATING = "generating"
    READY = "ready"
    DELETED = "deleted"


def sector_triangles(max_distance: int) -> Iterator[Triangle]:
    """
    Enumerate the triangles joining tile centers of a hexagon of given radius.

    Each triangle is yielded as ``(side, (a, b, c))`` where side 0 triangles
    point down and side 1 triangles point up. A hexagon of radius n has
    6 * n**2 triangles.
    """
    for r in range(-max_distance, max_distance):
        q_from = max(1 - max_distance, -r - max_distance)
        q_to = min(max_distance, -r + max_distance)
        if r < 0:
            yield 0, (Axial(q_to, r), Axial(q_to, r + 1), Axial(q_to - 1, r + 1))
        else:
            yield 1, (Axial(q_from - 1, r), Axial(q_from, r), Axial(q_from - 1, r + 1))
        for q in range(q_from, q_to):
            yield 0, (Axial(q, r), Axial(q, r + 1), Axial(q - 1, r + 1))
            yield 1, (Axial(q, r), Axial(q + 1, r), Axial(q, r + 1))


class Sector:
    """A generated hexagonal chunk of the world."""

    def __init__(self, key: Axial, center: Axial, radius: int, seed: int, pool: TilePool):
        """
        Initialize an empty sector.

        Args:
            key: Coordinates of the sector in sector space
            center: World coordinates of the central tile
            radius: Sector radius (tiles up to distance radius - 1 are included)
            seed: Seed derived for this sector
            pool: World tile pool the tiles are read from
        """
        self.key = key
        self.center = center
        self.radius = radius
        self.seed = seed
        self.status = SectorStatus.CREATING
        # Tiles outside the sector attached to it by spread generation (rivers...)
        self.attached_tiles: Set[Axial] = set()
        self._pool = pool

    @property
    def nbr_tiles(self) -> int:
        return tile_count(self.radius)

    def world_coords(self, local: Union[int, Axial]) -> Axial:
        """World coordinates of a local tile index or local axial."""
        if isinstance(local, int):
            local = axial_at(local)
        return linear(local, self.center)

    def local_coords(self, coords: Axial) -> Axial:
        return Axial(coords.q - self.center.q, coords.r - self.center.r)

    def contains(self, coords: Axial) -> bool:
        """Whether world coordinates fall inside this sector."""
        return distance(coords, self.center) < self.radius

    def tile_keys(self) -> List[Axial]:
        """World coordinates of the sector tiles, in local index order."""
        return [self.world_coords(i) for i in range(self.nbr_tiles)]

    def _check_ready(self) -> None:
        if self.status is not SectorStatus.READY:
            raise RuntimeError(f"Sector {tuple(self.key)} tiles read while {self.status.value}")

    def tile(self, hex_index: int) -> Tile:
        """Tile at a local index."""
        self._check_ready()
        if not 0 <= hex_index < self.nbr_tiles:
            raise IndexError(f"Tile index {hex_index} out of sector range [0, {self.nbr_tiles})")
        return self._pool.get(self.world_coords(hex_index))

    def tile_at(self, coords: Axial) -> Tile:
        """Tile at world coordinates, which must be inside the sector."""
        self._check_ready()
        if not self.contains(coords):
            raise ValueError(f"{tuple(coords)} is not in sector {tuple(self.key)}")
        return self._pool.get(coords)

    @property
    def tiles(self) -> List[Tile]:
        """All tiles, in local index order."""
        self._check_ready()
        return [self._pool.get(coords) for coords in self.tile_keys()]

    def heights(self) -> np.ndarray:
        """Tile heights in local index order."""
        return heights_array(self.tiles)

    def triangles(self) -> Iterator[Triangle]:
        """Render triangles of the sector, in world coordinates."""
        for side, points in sector_triangles(self.radius - 1):
            yield side, tuple(linear(point, self.center) for point in points)

    def free_tiles(self) -> int:
        """
        Release this sector's references in the pool.

        Returns:
            Number of tiles freed (no remaining user)
        """
        freed = 0
        for coords in self.tile_keys():
            freed += self._pool.release(coords, self.key)
        for coords in self.attached_tiles:
            freed += self._pool.release(coords, self.key)
        self.attached_tiles.clear()
        self.status = SectorStatus.DELETED
        return freed

    def __repr__(self) -> str:
        return f"Sector(key={tuple(self.key)}, center={tuple(self.center)}, status={self.status.value})"
