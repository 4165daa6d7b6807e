"""
Procedural hexagonal world generation: sectors generated on demand around
viewpoints by triangle subdivision, with rivers and walking paths.
"""

__version__ = "0.1.0"

from .config import LandConfig
from .core import (
    Axial,
    LcgPRNG,
    Ocean,
    Rivers,
    SectorGrid,
    SectorListener,
    TerrainCatalog,
    Tile,
    costing_path,
    default_catalog,
    walk_cost,
)

__all__ = ['LandConfig', 'Axial', 'LcgPRNG', 'Ocean', 'Rivers', 'SectorGrid', 'SectorListener',
           'TerrainCatalog', 'Tile', 'costing_path', 'default_catalog', 'walk_cost']
