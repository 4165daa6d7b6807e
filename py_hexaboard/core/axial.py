"""
Axial hexagonal coordinates.

This module implements:
- Axial <-> cartesian conversion (pointy-top layout)
- The ring-ordered bijection between a linear tile index and axial
  coordinates of a complete hexagonal board
- Hex distance, neighbors, rotations
- Lerp/round based straight lines between tiles

Reference: https://www.redblobgames.com/grids/hexagons/
"""

import math
from typing import Callable, Iterator, List, NamedTuple, Tuple, Union

SQRT3 = math.sqrt(3.0)

# Offset applied to lerp endpoints so that no interpolated point falls exactly
# on the edge between two hexagons
LERP_EPSILON = 1e-6


class Axial(NamedTuple):
    """Axial coordinate of a hex tile."""
    q: float
    r: float

    @property
    def s(self) -> float:
        """Third cube coordinate."""
        return -self.q - self.r


ORIGIN = Axial(0, 0)

Rotation = Callable[[Axial], Axial]

# Rotations for 0, 60, 120, 180, 240 and 300 degrees
ROTATIONS: List[Rotation] = [
    lambda a: Axial(a.q, a.r),
    lambda a: Axial(a.q + a.r, -a.q),
    lambda a: Axial(a.r, -a.q - a.r),
    lambda a: Axial(-a.q, -a.r),
    lambda a: Axial(-a.q - a.r, a.q),
    lambda a: Axial(-a.r, a.q + a.r),
]

# Unit vectors toward the 6 neighbors; the index is the direction used for
# road slots and triangle winding everywhere
HEX_SIDES: List[Axial] = [rotation(Axial(1, 0)) for rotation in ROTATIONS]

Term = Union[Axial, Tuple[float, Axial]]


def cube(a: Axial) -> Tuple[float, float, float]:
    """Cube coordinates (q, r, s) of an axial."""
    return a.q, a.r, -a.q - a.r


def tile_count(radius: int) -> int:
    """Number of tiles in a complete hexagonal board of given radius."""
    return 0 if radius <= 0 else 3 * radius * (radius - 1) + 1


def puzzle_tile_count(radius: int) -> int:
    """Number of tiles a sector owns alone once sectors share their borders."""
    return 3 * radius**2


def linear(*terms: Term) -> Axial:
    """
    Weighted sum of axial coordinates.

    Args:
        *terms: Either an Axial (coefficient 1) or a ``(coefficient, Axial)`` pair

    Returns:
        Sum of all terms
    """
    q = r = 0
    for term in terms:
        if isinstance(term, Axial):
            coef, a = 1, term
        else:
            coef, a = term
        q += coef * a.q
        r += coef * a.r
    return Axial(q, r)


def axial_at(index: int) -> Axial:
    """
    Axial coordinates of the nth tile of a complete hexagonal board.

    Tiles are numbered ring by ring from the center; each ring is walked
    side by side, starting from direction 0.
    """
    if index < 0:
        raise ValueError(f"Tile index must be non-negative, got {index}")
    if index == 0:
        return ORIGIN
    ring = (3 + math.isqrt(12 * index - 3)) // 6
    while tile_count(ring + 1) <= index:
        ring += 1
    while tile_count(ring) > index:
        ring -= 1
    side_pos = index - tile_count(ring)
    side = side_pos // ring
    return linear((ring, HEX_SIDES[side]), (side_pos % ring, HEX_SIDES[(side + 2) % 6]))


def index_at(a: Axial) -> int:
    """Linear index of a tile in a complete hexagonal board (inverse of `axial_at`)."""
    q, r = int(a.q), int(a.r)
    if q == 0 and r == 0:
        return 0
    s = -q - r
    ring = max(abs(q), abs(r), abs(s))
    side = [q == ring, r == -ring, s == ring, q == -ring, r == ring, s == -ring].index(True)
    offset = (-r, s, -q, r, -s, q)[side]
    return 3 * ring * (ring - 1) + side * ring + offset + 1


def distance(a: Axial, b: Axial = ORIGIN) -> int:
    """Hex (cube) distance between two tiles."""
    dq = a.q - b.q
    dr = a.r - b.r
    return max(abs(dq), abs(dr), abs(dq + dr))


def neighbors(a: Axial) -> List[Axial]:
    """The 6 neighbors of a tile, in `HEX_SIDES` order."""
    return [Axial(a.q + side.q, a.r + side.r) for side in HEX_SIDES]


def direction(a: Axial, b: Axial) -> int:
    """Index in `HEX_SIDES` of the step from ``a`` to its neighbor ``b``, -1 if not adjacent."""
    step = Axial(b.q - a.q, b.r - a.r)
    return HEX_SIDES.index(step) if step in HEX_SIDES else -1


def hexes_within(center: Axial, radius: int) -> Iterator[Axial]:
    """Yield every tile at distance <= radius from center."""
    for dq in range(-radius, radius + 1):
        for dr in range(max(-radius, -dq - radius), min(radius, -dq + radius) + 1):
            yield Axial(center.q + dq, center.r + dr)


def cartesian(a: Axial, size: float = 1.0) -> Tuple[float, float]:
    """Center of a tile in a pointy-top layout where ``size`` is the hexagon radius."""
    x = SQRT3 * size * a.q + SQRT3 / 2 * size * a.r
    y = 1.5 * size * a.r
    return x, y


def from_cartesian(point: Tuple[float, float], size: float = 1.0) -> Axial:
    """Tile containing a cartesian point (inverse of `cartesian` up to rounding)."""
    x, y = point
    r = y / (1.5 * size)
    q = (x - SQRT3 / 2 * size * r) / (SQRT3 * size)
    return axial_round(Axial(q, r))


def lerp(a: Axial, b: Axial, t: float) -> Axial:
    """Linear interpolation between two tiles, nudged off the hexagon edges."""
    q0, q1 = a.q + LERP_EPSILON, b.q + 2 * LERP_EPSILON
    return Axial(q0 + (q1 - q0) * t, a.r + (b.r - a.r) * t)


def _js_round(x: float) -> int:
    return math.floor(x + 0.5)


def axial_round(a: Axial) -> Axial:
    """Nearest tile of a fractional axial coordinate."""
    v = cube(a)
    rq, rr, rs = (_js_round(x) for x in v)
    diff = [abs(rq - v[0]), abs(rr - v[1]), abs(rs - v[2])]
    worst = diff.index(max(diff))
    if worst == 0:
        return Axial(-rr - rs, rr)
    if worst == 1:
        return Axial(rq, -rq - rs)
    return Axial(rq, rr)


def line(a: Axial, b: Axial) -> List[Axial]:
    """Tiles crossed by the straight line from a to b, both included."""
    n = distance(a, b)
    if n == 0:
        return [Axial(a.q, a.r)]
    return [axial_round(lerp(a, b, i / n)) for i in range(n + 1)]


def next_step(a: Axial, b: Axial) -> Axial:
    """First tile to walk on when going straight from a to b."""
    n = distance(a, b)
    if n == 0:
        return Axial(a.q, a.r)
    return axial_round(lerp(a, b, 1 / n))
