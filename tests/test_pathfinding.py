"""Tests for path finding."""

import math

import pytest

from py_hexaboard.core.axial import HEX_SIDES, ORIGIN, Axial, direction, distance
from py_hexaboard.core.pathfinding import costing_path, walk_cost
from py_hexaboard.core.tiles import Tile


def uniform(from_key, to_key):
    return 1.0


def path_cost(path, cost):
    return sum(cost(a, b) for a, b in zip(path, path[1:]))


class TestCostingPath:
    """Test the label correcting search."""

    def test_start_is_goal(self):
        """Test that a start satisfying the goal is returned alone."""
        assert costing_path(ORIGIN, uniform, lambda key: key == ORIGIN) == [ORIGIN]

    def test_uniform_cost_path_length(self):
        """Test that uniform costs give paths of distance + 1 tiles."""
        start = Axial(2, -1)
        for goal in [Axial(6, -1), Axial(-3, 4), Axial(2, 3), Axial(0, -5)]:
            path = costing_path(start, uniform, lambda key, goal=goal: key == goal)
            assert len(path) == distance(start, goal) + 1
            assert path[0] == start
            assert path[-1] == goal
            for a, b in zip(path, path[1:]):
                assert distance(a, b) == 1

    def test_avoids_expensive_tile(self):
        """Test that the cheapest path goes around a costly tile."""

        def cost(from_key, to_key):
            return 100.0 if to_key == Axial(1, 0) else 1.0

        path = costing_path(ORIGIN, cost, lambda key: key == Axial(2, 0))
        assert path == [ORIGIN, Axial(1, -1), Axial(2, 0)]

    def test_keeps_searching_after_first_goal(self):
        """Test that an expensive goal found first does not end the search."""
        goals = {Axial(1, 0), Axial(3, 0)}

        def cost(from_key, to_key):
            return 50.0 if to_key == Axial(1, 0) else 1.0

        path = costing_path(ORIGIN, cost, lambda key: key in goals)
        assert path[-1] == Axial(3, 0)
        assert len(path) == 5
        assert path_cost(path, cost) == 4.0

    def test_optimal_on_weighted_graph(self):
        """Test that the path is no costlier than the straight line."""

        def cost(from_key, to_key):
            return 1.0 + abs(to_key.r) * 3.0

        goal = Axial(4, -4)
        path = costing_path(ORIGIN, cost, lambda key: key == goal)
        straight = [Axial(i, -i) for i in range(5)]
        assert path_cost(path, cost) <= path_cost(straight, cost)
        # Every row between both ends is entered at least once
        assert path_cost(path, cost) == pytest.approx(4 + 7 + 10 + 13)

    def test_unreachable_goal(self):
        """Test that an unreachable goal gives None."""

        def fenced(from_key, to_key):
            return math.nan if distance(to_key) > 3 else 1.0

        assert costing_path(ORIGIN, fenced, lambda key: key == Axial(10, 0)) is None

    def test_infinite_cost_is_no_edge(self):
        """Test that infinite costs block moves."""

        def fenced(from_key, to_key):
            return math.inf if distance(to_key) > 2 else 1.0

        assert costing_path(ORIGIN, fenced, lambda key: key == Axial(5, 0)) is None

    def test_negative_cost(self):
        """Test that negative costs are refused."""
        with pytest.raises(ValueError):
            costing_path(ORIGIN, lambda a, b: -1.0, lambda key: key == Axial(3, 0))

    def test_zero_cost(self):
        """Test that zero cost terrain still terminates with a shortest path."""
        path = costing_path(ORIGIN, lambda a, b: 0.0, lambda key: key == Axial(3, -1))
        assert len(path) == 4

    def test_diagnostics(self):
        """Test that the visited count is reported."""
        reported = {}
        costing_path(ORIGIN, uniform, lambda key: key == Axial(2, 0), reported.__setitem__)
        assert reported["path.visited"] > 0


class FlatGrid:
    """Minimal grid: tiles in a disc, terrain multiplier read from a table."""

    multipliers = {"grass": 1.0, "forest": 2.0}

    def __init__(self, tiles):
        self.tiles = tiles
        self.movements = []

    def tile(self, coords):
        return self.tiles.get(coords)

    def walk_time_multiplier(self, movement):
        self.movements.append(movement)
        if movement.on.terrain == "water":
            return math.nan
        return self.multipliers[movement.on.terrain]


class TestWalkCost:
    """Test the walking cost function."""

    @pytest.fixture
    def grid(self):
        return FlatGrid({
            ORIGIN: Tile(height=0.0, terrain="grass", seed=0.0),
            HEX_SIDES[0]: Tile(height=10.0, terrain="grass", seed=0.0),
            HEX_SIDES[1]: Tile(height=-10.0, terrain="forest", seed=0.0),
            HEX_SIDES[2]: Tile(height=0.0, terrain="water", seed=0.0),
        })

    def test_slope(self, grid):
        """Test that climbing costs more and descending does not."""
        cost = walk_cost(grid, slope_factor=0.1)
        assert cost(ORIGIN, HEX_SIDES[0]) == pytest.approx(2.0)
        assert cost(HEX_SIDES[0], ORIGIN) == pytest.approx(1.0)
        assert cost(ORIGIN, HEX_SIDES[1]) == pytest.approx(2.0)

    def test_movement_description(self, grid):
        """Test the movement given to the multiplier."""
        walk_cost(grid)(ORIGIN, HEX_SIDES[1])
        movement = grid.movements[-1]
        assert movement.on is grid.tiles[HEX_SIDES[1]]
        assert movement.came_from is grid.tiles[ORIGIN]
        assert movement.direction == direction(ORIGIN, HEX_SIDES[1]) == 1

    def test_impassable(self, grid):
        """Test that missing and impassable tiles are not edges."""
        cost = walk_cost(grid)
        assert math.isnan(cost(ORIGIN, HEX_SIDES[2]))
        assert math.isnan(cost(ORIGIN, HEX_SIDES[4]))
        assert math.isnan(cost(HEX_SIDES[4], ORIGIN))

    def test_path_on_grid(self, grid):
        """Test walking between generated tiles only."""
        path = costing_path(HEX_SIDES[1], walk_cost(grid), lambda key: key == HEX_SIDES[0])
        assert path == [HEX_SIDES[1], HEX_SIDES[0]]
