"""
Core hex world generation functionality.
"""

from .axial import Axial, ORIGIN, HEX_SIDES, axial_at, index_at, distance, neighbors, tile_count
from .lcg_prng import LcgPRNG
from .terrain import TerrainType, TerrainCatalog, default_catalog
from .tiles import Tile, TilePool
from .subdivision import SubdivisionGenerator, SubdivisionConfig, random_corners, island_corners
from .sector import Sector, SectorStatus, sector_triangles
from .land_parts import LandPart, SectorListener, SectorNotGeneratedError, WalkSpecification
from .sector_grid import SectorGrid, ViewUpdate
from .pathfinding import costing_path, walk_cost
from .hydrology import Rivers, RiverOptions, Ocean

__all__ = ['Axial', 'ORIGIN', 'HEX_SIDES', 'axial_at', 'index_at', 'distance', 'neighbors', 'tile_count',
           'LcgPRNG', 'TerrainType', 'TerrainCatalog', 'default_catalog', 'Tile', 'TilePool',
           'SubdivisionGenerator', 'SubdivisionConfig', 'random_corners', 'island_corners',
           'Sector', 'SectorStatus', 'sector_triangles', 'LandPart', 'SectorListener', 'SectorNotGeneratedError',
           'WalkSpecification',
           'SectorGrid', 'ViewUpdate', 'costing_path', 'walk_cost', 'Rivers', 'RiverOptions', 'Ocean']
