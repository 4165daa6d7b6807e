"""Tests for hydrology module."""

import math

import pytest

from py_hexaboard.config import LandConfig
from py_hexaboard.core.axial import HEX_SIDES, ORIGIN, Axial, hexes_within, neighbors
from py_hexaboard.core.hydrology import Ocean, RiverOptions, Rivers
from py_hexaboard.core.land_parts import SectorNotGeneratedError, WalkSpecification
from py_hexaboard.core.sector_grid import SectorGrid
from py_hexaboard.core.terrain import TerrainCatalog, TerrainType, default_catalog
from py_hexaboard.core.tiles import Tile, TilePool


class SlopeLand:
    """Hand made land sloping down toward +q, sea from q = 6."""

    def __init__(self):
        self.config = LandConfig(sea_level=0.0, terrain_height=80.0, seed=5)
        self.catalog = default_catalog(80)
        self.pool = TilePool()
        for coords in hexes_within(ORIGIN, 8):
            height = 10.0 - 2 * coords.q
            self.pool.add(coords, Tile(height=height, terrain=self.catalog.terrain_type(height).key, seed=0.0), ORIGIN)
        self.updates = []

    def tile(self, coords):
        return self.pool.get(coords)

    def unload(self, keep):
        """Free the tiles failing ``keep``; returns them for `reload`."""
        unloaded = {coords: tile for coords, tile in self.pool.items() if not keep(coords)}
        for coords in unloaded:
            self.pool.release(coords, ORIGIN)
        return unloaded

    def reload(self, tiles):
        for coords, tile in tiles.items():
            self.pool.add(coords, tile, ORIGIN)

    def update_tile(self, sector_keys, coords, **changes):
        self.updates.append((list(sector_keys), coords))
        tile = self.pool.get(coords)
        for name, value in changes.items():
            setattr(tile, name, value)


class TestRivers:
    """Test river routing and carving."""

    @pytest.fixture
    def land(self):
        return SlopeLand()

    @pytest.fixture
    def rivers(self, land):
        return Rivers(land)

    def test_missing_river_terrain(self, land):
        """Test that the river terrain must be in the catalog."""
        land.catalog = TerrainCatalog([TerrainType("grass", 0.0)])
        with pytest.raises(ValueError):
            Rivers(land)

    def test_route_follows_the_slope(self, rivers, land):
        """Test that a river goes straight down to the sea."""
        path = rivers.route(ORIGIN)
        assert path[0] == ORIGIN
        assert len(path) == 7
        for a, b in zip(path, path[1:]):
            assert b.q == a.q + 1
        assert land.tile(path[-1]).height < 0

    def test_route_bounded(self, land):
        """Test that rivers do not go further than allowed."""
        rivers = Rivers(land, options=RiverOptions(max_axial_distance=4))
        assert rivers.route(ORIGIN) is None

    def test_carve(self, rivers, land):
        """Test the river bed shape."""
        path = rivers.route(ORIGIN)
        rivers.carve(land.update_tile, path)

        source = land.tile(ORIGIN)
        assert source.terrain == "river"
        assert source.height == 10.0
        assert source.river_height == 10.0
        previous = source
        for coords in path[1:]:
            tile = land.tile(coords)
            assert tile.terrain == "river"
            assert tile.original_height == 10.0 - 2 * coords.q
            assert tile.height <= previous.height - rivers.options.min_stream_slope
            assert tile.river_height >= land.config.sea_level
            previous = tile

        on_path = set(path)
        banks = {n for coords in path[1:] for n in neighbors(coords)} - on_path
        assert any(land.tile(n).river_height is not None for n in banks)
        assert land.updates[0] == ([], ORIGIN)
        assert all(keys == [ORIGIN] for keys, _ in land.updates[1:])

    def test_route_needs_generated_tiles(self, rivers, land):
        """Test that routing through a missing tile is not mistaken for a dead end."""
        land.unload(lambda coords: coords != HEX_SIDES[0])
        with pytest.raises(SectorNotGeneratedError) as info:
            rivers.route(ORIGIN)
        assert info.value.coords == HEX_SIDES[0]

    def test_trim_mouth(self, rivers, land):
        """Test that the river end is cut back while it has four sea neighbors or more."""
        path = rivers.route(ORIGIN)
        assert path[-1].q == 6
        trimmed = rivers.trim_mouth(path)
        assert trimmed == path[:-1]
        assert trimmed[-1].q == 5
        sea = [n for n in neighbors(trimmed[-1]) if land.tile(n).height < land.config.sea_level]
        assert len(sea) == 2

    def test_trim_mouth_keeps_min_length(self, land):
        """Test that trimming never makes a path shorter than the minimum length."""
        rivers = Rivers(land, options=RiverOptions(min_length=7))
        path = rivers.route(ORIGIN)
        assert len(path) == 7
        assert rivers.trim_mouth(path) == path

    def test_carve_only_raises_banks(self, rivers, land):
        """Test that carving never lowers the water level of a bank."""
        path = rivers.route(ORIGIN)
        high, low = sorted(set(neighbors(path[2])) - set(path))[:2]
        land.tile(high).river_height = 1000.0
        land.tile(low).river_height = -1000.0
        rivers.carve(land.update_tile, path)
        assert land.tile(high).river_height == 1000.0
        assert land.tile(low).river_height >= land.config.sea_level
        assert high not in [coords for _, coords in land.updates]

    def test_sources(self, land):
        """Test source selection on land tiles only."""
        sources = []
        always = Rivers(land, options=RiverOptions(sources_per_tile=1e9))
        always.refine_tile(Tile(height=40.0, terrain="grass", seed=0.0), Axial(2, 4), sources)
        always.refine_tile(Tile(height=-1.0, terrain="sand", seed=0.0), Axial(4, 2), sources)
        never = Rivers(land, options=RiverOptions(sources_per_tile=0.0))
        never.refine_tile(Tile(height=40.0, terrain="grass", seed=0.0), Axial(6, 2), sources)
        assert sources == [Axial(2, 4)]

    def test_sources_on_even_coordinates(self, land):
        """Test that tiles with an odd coordinate are never sources."""
        sources = []
        always = Rivers(land, options=RiverOptions(sources_per_tile=1e9))
        grass = Tile(height=40.0, terrain="grass", seed=0.0)
        for coords in [Axial(3, 2), Axial(2, 1), Axial(3, 3), Axial(-1, 0), Axial(0, -2), Axial(-4, 2)]:
            always.refine_tile(grass, coords, sources)
        assert sources == [Axial(0, -2), Axial(-4, 2)]

    def test_spread_generation_skips_short_rivers(self, land):
        """Test that sources next to the sea do not make rivers."""
        rivers = Rivers(land)
        rivers.spread_generation(land.update_tile, [Axial(5, 0)])
        assert land.updates == []
        assert rivers.pending == {}

    def test_spread_generation_defers_sources(self, rivers, land):
        """Test that a source blocked by missing tiles is carved once they exist."""
        unloaded = land.unload(lambda coords: coords.q < 7)
        rivers.spread_generation(land.update_tile, [ORIGIN])
        assert list(rivers.pending) == [ORIGIN]
        assert land.updates == []
        assert land.tile(ORIGIN).terrain != "river"

        land.reload(unloaded)
        rivers.spread_generation(land.update_tile, [])
        assert rivers.pending == {}
        assert land.tile(ORIGIN).terrain == "river"
        assert land.updates[0] == ([], ORIGIN)

    def test_spread_generation_drops_unloaded_sources(self, rivers, land):
        """Test that a deferred source whose tile was freed is forgotten."""
        unloaded = land.unload(lambda coords: coords.q < 7)
        rivers.spread_generation(land.update_tile, [ORIGIN])
        assert ORIGIN in rivers.pending

        land.unload(lambda coords: coords != ORIGIN)
        land.reload(unloaded)
        rivers.spread_generation(land.update_tile, [])
        assert rivers.pending == {}
        assert land.updates == []

    def test_walk_time_multiplier(self, rivers):
        """Test that river tiles cannot be walked on."""
        river = Tile(height=3.0, terrain="river", seed=0.0)
        grass = Tile(height=3.0, terrain="grass", seed=0.0)
        assert math.isnan(rivers.walk_time_multiplier(WalkSpecification(on=river, coords=ORIGIN)))
        assert rivers.walk_time_multiplier(WalkSpecification(on=grass, coords=ORIGIN)) is None


class TestOcean:
    """Test the sea as an obstacle."""

    def test_walk_time_multiplier(self):
        """Test that tiles under sea level cannot be walked on."""
        ocean = Ocean(sea_level=2.0)
        under = Tile(height=1.0, terrain="sand", seed=0.0)
        above = Tile(height=2.0, terrain="sand", seed=0.0)
        assert math.isnan(ocean.walk_time_multiplier(WalkSpecification(on=under, coords=ORIGIN)))
        assert ocean.walk_time_multiplier(WalkSpecification(on=above, coords=ORIGIN)) is None


class TestRiversOnGrid:
    """Test rivers generated with the sector grid."""

    @pytest.fixture
    def grid(self):
        grid = SectorGrid(LandConfig(sector_radius=5, view_distance=10, seed=3))
        grid.add_part(Rivers(grid, options=RiverOptions(sources_per_tile=1.0, max_axial_distance=8)))
        grid.add_part(Ocean(grid.config.sea_level))
        grid.update_views([(0.0, 0.0)])
        return grid

    def test_carved_tiles(self, grid):
        """Test that carving only lowers tiles and marks them as river."""
        for _, tile in grid.pool.items():
            if tile.original_height is not None:
                assert tile.terrain == "river"
                assert tile.height <= tile.original_height
            if tile.terrain == "river":
                assert tile.river_height is not None

    def test_pool_consistent_after_eviction(self, grid):
        """Test that attached river tiles are released with their sectors."""
        grid.update_views([])
        assert len(grid.pool) == 0

    def test_sources_retried_when_neighbors_load(self):
        """Test that sources deferred at a sector border are routed again with each new sector."""

        class RecordingRivers(Rivers):
            def __init__(self, grid, **kwargs):
                super().__init__(grid, **kwargs)
                self.routed = []

            def route(self, source):
                self.routed.append(source)
                return super().route(source)

        deferred_total = 0
        for seed in range(3):
            grid = SectorGrid(LandConfig(sector_radius=9, sea_level=-10.0, seed=seed))
            rivers = RecordingRivers(grid, options=RiverOptions(sources_per_tile=0.5))
            grid.add_part(rivers)
            grid.ensure_sector(ORIGIN)
            deferred = list(rivers.pending)
            deferred_total += len(deferred)

            for side in HEX_SIDES:
                rivers.routed.clear()
                waiting = list(rivers.pending)
                grid.ensure_sector(side)
                assert set(waiting) <= set(rivers.routed)

            for _, tile in grid.pool.items():
                if tile.original_height is not None:
                    assert tile.terrain == "river"
                    assert tile.height <= tile.original_height
        assert deferred_total > 0
