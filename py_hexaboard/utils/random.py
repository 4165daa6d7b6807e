"""
Seed mixing utilities.

Every stochastic step of the generation pipeline derives its generator from
a tuple of seeds (world seed, purpose tag, coordinates...). These helpers
turn such tuples into a single 32-bit integer with the same bit-level
behaviour as the JavaScript implementation, so a given seed tuple always
produces the same world. Python's random and NumPy's random must not be
used for generation.
"""

import math
from typing import Union

Seed = Union[int, float, str]

# Increment of the linear congruential generator, also used to spread seeds
LCG_INCREMENT = 1013904223


def to_int32(value: float) -> int:
    """Convert a number to a signed 32-bit integer (JavaScript ToInt32)."""
    if not math.isfinite(value):
        return 0
    n = int(value) & 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def string_to_hash(text: str) -> float:
    """
    Hash a string to a number.

    Classic ``hash * 31 + char`` rolling hash kept in 32 bits, then scaled
    by pi so that it mixes like numeric seeds do.
    """
    h = 0
    for char in text:
        h = to_int32(to_int32(h << 5) - h + ord(char))
    return h * math.pi


def numeric(seed: Seed) -> float:
    """Numeric value of a seed: strings are hashed, numbers scaled by pi."""
    if isinstance(seed, str):
        return string_to_hash(seed)
    return seed * math.pi


def sub_seed(*seeds: Seed) -> int:
    """
    Combine seeds into one deterministic 32-bit value.

    Args:
        *seeds: Numbers and/or strings

    Returns:
        Signed 32-bit integer; 0 for an empty seed list
    """
    acc = 0
    for seed in seeds:
        acc ^= to_int32(numeric(seed) * LCG_INCREMENT)
    return acc
