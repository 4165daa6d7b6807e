"""
Terrain catalog: maps a tile height to a terrain type.

Each terrain type appears from a given height upward; the type retained for a
height is the one with the greatest ``appear_height`` that is still <= the
height. When several types share that threshold, the one inserted last wins.
Heights below every threshold get the lowest type.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class TerrainType:
    """Static description of a terrain."""

    key: str
    appear_height: float
    variance: float = 1.0  # Amplitude factor of the subdivision noise
    walk_time_multiplier: float = 1.0  # Relative time to walk across a tile


class TerrainCatalog:
    """Ordered table of terrain types looked up by height."""

    def __init__(self, terrain_types: Union[Iterable[TerrainType], Mapping[str, TerrainType]]):
        """
        Initialize the catalog.

        Args:
            terrain_types: Terrain types in insertion order, or a mapping whose
                values are the terrain types (the mapping order is kept)
        """
        if isinstance(terrain_types, Mapping):
            terrain_types = terrain_types.values()
        self._types: Dict[str, TerrainType] = {}
        for terrain in terrain_types:
            self._types[terrain.key] = terrain
        if not self._types:
            raise ValueError("A terrain catalog needs at least one terrain type")

        # sorted() is stable: equal thresholds keep their insertion order
        self._sorted: List[TerrainType] = sorted(self._types.values(), key=lambda t: t.appear_height)
        self._thresholds = [t.appear_height for t in self._sorted]

    def terrain_type(self, height: float) -> TerrainType:
        """Terrain appearing at a given height."""
        position = bisect_right(self._thresholds, height)
        if position == 0:
            return self._sorted[0]
        return self._sorted[position - 1]

    def variance(self, key: str) -> float:
        """Subdivision variance of a terrain key."""
        return self._types[key].variance

    def get(self, key: str) -> Optional[TerrainType]:
        return self._types.get(key)

    def __getitem__(self, key: str) -> TerrainType:
        return self._types[key]

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def __iter__(self) -> Iterator[TerrainType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def keys(self) -> List[str]:
        return list(self._types)


def default_catalog(terrain_height: float = 80.0) -> TerrainCatalog:
    """
    Default terrain set scaled to ``terrain_height``.

    ``river`` never appears from height alone (infinite threshold); it is set
    by the river carving pass.
    """
    catalog = TerrainCatalog([
        TerrainType("sand", 0.0, variance=0.1, walk_time_multiplier=1.1),
        TerrainType("grass", 0.4 * terrain_height, variance=0.7, walk_time_multiplier=1.0),
        TerrainType("forest", 0.6 * terrain_height, variance=2.0, walk_time_multiplier=1.3),
        TerrainType("stone", 0.7 * terrain_height, variance=3.0, walk_time_multiplier=1.5),
        TerrainType("snow", 0.8 * terrain_height, variance=1.5, walk_time_multiplier=2.0),
        TerrainType("river", math.inf, variance=0.0, walk_time_multiplier=1.0),
    ])
    logger.debug("Default terrain catalog created", terrain_height=terrain_height, types=len(catalog))
    return catalog
