"""
Tile records and the world tile pool.

Sectors share their border tiles, so a tile does not belong to one sector:
the pool keeps every generated tile once, keyed by its world axial
coordinate, together with the set of sectors using it. A tile is freed when
its last user releases it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

from .axial import Axial


@dataclass
class Tile:
    """
    Generated data of one hex tile.

    Attributes:
        height: Altitude of the tile
        terrain: Terrain key (see TerrainCatalog)
        seed: Reproducible seed derived during generation
        content: Per-direction slots owned by external collaborators (roads, resources...)
        river_height: Water surface altitude when a river runs on or next to the tile
        original_height: Height before river carving lowered it
    """

    height: float
    terrain: str
    seed: float
    content: List[Any] = field(default_factory=list)
    river_height: Optional[float] = None
    original_height: Optional[float] = None

    @property
    def ground_height(self) -> float:
        """Height before any carving."""
        return self.height if self.original_height is None else self.original_height


@dataclass
class PoolEntry:
    """A tile and the keys of the sectors using it."""
    tile: Tile
    users: Set[Axial] = field(default_factory=set)


class TilePool:
    """Arena of world tiles with used-by reference counting."""

    def __init__(self):
        self._entries: Dict[Axial, PoolEntry] = {}

    def get(self, coords: Axial) -> Optional[Tile]:
        """Tile at world coordinates, or None if not generated."""
        entry = self._entries.get(coords)
        return entry.tile if entry else None

    def add(self, coords: Axial, tile: Tile, user: Axial) -> Tile:
        """
        Register a tile used by a sector.

        If a tile is already pooled at these coordinates, the existing one is
        kept (first writer wins) and returned.
        """
        entry = self._entries.get(coords)
        if entry is None:
            entry = self._entries[coords] = PoolEntry(tile)
        entry.users.add(user)
        return entry.tile

    def attach(self, coords: Axial, user: Axial) -> bool:
        """Add a user to an existing tile. Returns False if nothing was added."""
        entry = self._entries.get(coords)
        if entry is None:
            raise KeyError(f"No tile generated at {tuple(coords)}")
        if user in entry.users:
            return False
        entry.users.add(user)
        return True

    def release(self, coords: Axial, user: Axial) -> bool:
        """
        Remove a user from a tile; free the tile when no user remains.

        Returns:
            True if the tile was freed
        """
        entry = self._entries.get(coords)
        if entry is None:
            return False
        entry.users.discard(user)
        if not entry.users:
            del self._entries[coords]
            return True
        return False

    def users(self, coords: Axial) -> FrozenSet[Axial]:
        """Keys of the sectors using a tile (empty if not generated)."""
        entry = self._entries.get(coords)
        return frozenset(entry.users) if entry else frozenset()

    def items(self) -> Iterator[Tuple[Axial, Tile]]:
        for coords, entry in self._entries.items():
            yield coords, entry.tile

    def __contains__(self, coords: object) -> bool:
        return coords in self._entries

    def __len__(self) -> int:
        return len(self._entries)
