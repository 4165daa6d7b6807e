"""
Shortest paths over the unbounded hex graph with caller supplied edge costs.

The search knows nothing about terrain: the cost function decides which
moves exist (NaN means no edge) and what they weigh. `walk_cost` builds the
cost function used for walking on a sector grid.
"""

import heapq
import itertools
import math
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from .axial import Axial, direction, neighbors
from .land_parts import Diagnostics, WalkSpecification, no_diagnostics

logger = structlog.get_logger()

CostFunction = Callable[[Axial, Axial], float]
GoalTest = Callable[[Axial], bool]

# Zero cost edges are bumped to this so path costs strictly increase
ZERO_COST_EPSILON = 1e-6

DEFAULT_SLOPE_FACTOR = 0.05


def costing_path(
    start: Axial,
    cost: CostFunction,
    is_goal: GoalTest,
    diagnostics: Optional[Diagnostics] = None,
) -> Optional[List[Axial]]:
    """
    Cheapest path from ``start`` to any tile satisfying ``is_goal``.

    Label correcting Dijkstra: the frontier is explored by ascending
    accumulated cost; a goal reached while expanding is only a candidate and
    the search goes on until no frontier entry can beat it.

    Args:
        start: Starting tile
        cost: ``cost(from, to)`` of moving between two adjacent tiles. NaN or
            infinite means the move is impossible; negative costs are refused.
        is_goal: Predicate of the destination tiles
        diagnostics: Optional ``(name, value)`` sink, receives ``path.visited``

    Returns:
        Tiles from start to the goal, both included, or None if no goal is reachable

    Raises:
        ValueError: If the cost function returns a negative cost
    """
    diagnostics = diagnostics or no_diagnostics
    if is_goal(start):
        return [start]

    # tile -> (predecessor, accumulated cost)
    origins: Dict[Axial, Tuple[Optional[Axial], float]] = {start: (None, 0.0)}
    order = itertools.count()
    frontier: List[Tuple[float, int, Axial]] = [(0.0, next(order), start)]
    found: Optional[Tuple[float, Axial]] = None
    visited = 0

    while frontier:
        current_cost, _, current = frontier[0]
        if found is not None and found[0] <= current_cost:
            break
        heapq.heappop(frontier)
        predecessor, best = origins[current]
        if current_cost > best:
            continue  # Superseded entry
        visited += 1

        for neighbor in neighbors(current):
            if neighbor == predecessor:
                continue
            step = cost(current, neighbor)
            if math.isnan(step):
                continue
            if step < 0:
                raise ValueError(
                    f"Negative cost {step} from {tuple(current)} to {tuple(neighbor)}"
                )
            if math.isinf(step):
                continue
            total = current_cost + (step or ZERO_COST_EPSILON)
            known = origins.get(neighbor)
            if known is not None and known[1] <= total:
                continue
            origins[neighbor] = (current, total)
            if is_goal(neighbor):
                if found is None or total < found[0]:
                    found = (total, neighbor)
            else:
                heapq.heappush(frontier, (total, next(order), neighbor))

    diagnostics("path.visited", visited)
    if found is None:
        logger.debug("No path found", start=tuple(start), visited=visited)
        return None

    path = []
    key: Optional[Axial] = found[1]
    while key is not None:
        path.append(key)
        key = origins[key][0]
    path.reverse()
    logger.debug("Path found", start=tuple(start), goal=tuple(found[1]), cost=found[0], visited=visited)
    return path


def walk_cost(grid, slope_factor: float = DEFAULT_SLOPE_FACTOR) -> CostFunction:
    """
    Cost function of walking on the generated tiles of a sector grid.

    A move costs the walk time multiplier of the entered tile (terrain and
    land parts) scaled up by the climbed height. Moves from or to a tile that
    is not generated, or onto an impassable tile, are NaN.
    """

    def cost(from_key: Axial, to_key: Axial) -> float:
        origin = grid.tile(from_key)
        target = grid.tile(to_key)
        if origin is None or target is None:
            return math.nan
        movement = WalkSpecification(
            on=target,
            coords=to_key,
            came_from=origin,
            direction=direction(from_key, to_key),
        )
        multiplier = grid.walk_time_multiplier(movement)
        if math.isnan(multiplier):
            return math.nan
        climb = max(0.0, target.height - origin.height)
        return multiplier * (1 + slope_factor * climb)

    return cost
