"""
Linear congruential PRNG used by every generation step.

The generator is keyed by a tuple of seeds (numbers or strings), so that the
same tuple always replays the same sequence. This is what allows sectors to
be dropped and regenerated later instead of being stored.
"""

from typing import Sequence, TypeVar

from ..utils.random import LCG_INCREMENT, Seed, sub_seed

T = TypeVar('T')

# Numerical Recipes constants
LCG_MULTIPLIER = 1664525
LCG_MODULUS = 2**32


class LcgPRNG:
    """
    Seeded linear congruential generator.

    Calling the instance advances the state and returns a float uniformly
    mapped into ``[min_val, max_val)``.
    """

    def __init__(self, *seeds: Seed):
        """Initialize from one or more seeds (numbers or strings)."""
        self.call_count = 0
        self.state = abs(sub_seed(*seeds))

    def __call__(self, max_val: float = 1.0, min_val: float = 0.0) -> float:
        self.call_count += 1
        self.state = (LCG_MULTIPLIER * self.state + LCG_INCREMENT + LCG_MODULUS) % LCG_MODULUS
        return (self.state / LCG_MODULUS) * (max_val - min_val) + min_val

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        return self()

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self(len(seq)))]
