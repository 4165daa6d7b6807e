"""
Plug-in points of the sector grid.

- LandPart: generation stages composed in sequence by the grid. Each stage
  may prepare a per-pass state, refine freshly generated tiles, spread
  modifications over several sectors once a batch of sectors is generated,
  and weigh walking time.
- SectorListener: the rendering side; told when sectors appear, disappear
  or have tiles modified.
- Diagnostics: optional ``(name, value)`` sink for counters.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from .axial import Axial
from .tiles import Tile

Diagnostics = Callable[[str, Any], None]

# Signature of the callback given to `LandPart.spread_generation`:
# update_tile(sector_keys, coords, **changes)
TileUpdater = Callable[..., None]


class SectorNotGeneratedError(LookupError):
    """A generation stage needed a tile whose sector is not generated yet."""

    def __init__(self, coords: Axial):
        super().__init__(f"No tile generated at {tuple(coords)}")
        self.coords = coords


def no_diagnostics(name: str, value: Any) -> None:
    """Default diagnostics sink: discard everything."""


@dataclass
class WalkSpecification:
    """A one-tile move considered for walking time."""

    on: Tile  # Tile being entered
    coords: Axial
    came_from: Optional[Tile] = None
    direction: Optional[int] = None  # Index in HEX_SIDES of the move, None when standing


class LandPart:
    """
    Base class of generation stages; every hook is optional and defaults to a no-op.
    """

    def begin_generation(self) -> Any:
        """State shared by the refine/spread calls of one generation pass."""
        return None

    def refine_tile(self, tile: Tile, coords: Axial, generation_info: Any) -> Optional[Tile]:
        """Adjust a freshly generated tile; return a replacement or None to keep it."""
        return None

    def spread_generation(self, update_tile: TileUpdater, generation_info: Any) -> None:
        """Apply modifications that can cross sector borders."""

    def walk_time_multiplier(self, movement: WalkSpecification) -> Optional[float]:
        """Factor on walking time, NaN for impassable, None for no opinion."""
        return None


def compose_walk_time(parts: Iterable[LandPart], movement: WalkSpecification) -> float:
    """Product of the walk time multipliers of all parts (NaN short-circuits)."""
    rv = 1.0
    for part in parts:
        multiplier = part.walk_time_multiplier(movement)
        if multiplier is None:
            continue
        rv *= multiplier
        if math.isnan(rv):
            return math.nan
    return rv


class SectorListener:
    """
    Receiver of sector lifecycle events; subclass and override what is needed.
    """

    def on_sector_added(self, sector) -> None:
        pass

    def on_sector_removed(self, sector) -> None:
        pass

    def on_tile_invalidated(self, sector_keys: Sequence[Axial], coords: Axial, tile: Tile) -> None:
        pass
