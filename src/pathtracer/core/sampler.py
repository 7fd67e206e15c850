"""Random number generation for Monte Carlo sampling.

This module provides a small linear congruential generator using the constants
of java.util.Random. It is deterministic for a given seed, cheap to copy and
has no hidden global state: each render worker owns its own instance and
passes it explicitly down to the integrator and materials.

A generator must never be shared between threads. The scheduler gives every
worker its own instance and reseeds it per pixel from derive_seed(), which
keeps a frame reproducible regardless of how chunks were distributed.

Example:
    >>> from src.pathtracer.core.sampler import Lcg
    >>> rng = Lcg.from_seed(42)
    >>> value = rng.next_f64()
    >>> 0.0 <= value < 1.0
    True
"""

from __future__ import annotations

import time

# java.util.Random parameters
LCG_MULTIPLIER = 0x5DEECE66D
LCG_INCREMENT = 0xB
LCG_STATE_BITS = 48
LCG_MASK = (1 << LCG_STATE_BITS) - 1

_U32_MASK = 0xFFFF_FFFF
_U64_MASK = 0xFFFF_FFFF_FFFF_FFFF
_F32_BITS = 24
_F64_BITS = 53

# Number of state advances applied after seeding
_WARMUP_DRAWS = 3


def _u64_from_u32s(low: int, high: int) -> int:
    return low | (high << 32)


def _sysnanos() -> int:
    """Return the sub-second nanosecond part of the current time."""
    return time.time_ns() % 1_000_000_000


def derive_seed(base_seed: int, index: int) -> int:
    """Mix a stream index into a base seed.

    Used to give each pixel its own reproducible random stream.
    The mix is a 64-bit splitmix step, so neighbouring indices produce
    unrelated seeds.

    Args:
        base_seed: The render-wide seed.
        index: The stream (linear pixel) index.

    Returns:
        A 64-bit seed.
    """
    z = (base_seed + (index + 1) * 0x9E3779B97F4A7C15) & _U64_MASK
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _U64_MASK
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _U64_MASK
    return z ^ (z >> 31)


class Lcg:
    """A 48-bit linear congruential generator.

    Each draw advances the state as
        state = (state * 0x5DEECE66D + 0xB) mod 2^48
    and returns the upper 32 bits of the state. Booleans, small integers
    and floats are derived from these 32-bit words.

    Attributes:
        state: The current 48-bit generator state.
    """

    __slots__ = ("state",)

    def __init__(self, state: int = 0) -> None:
        self.state = state & LCG_MASK

    @classmethod
    def from_seed(cls, seed: int) -> Lcg:
        """Create a generator from an explicit seed.

        The state is advanced a few times so that small seeds do not produce
        small first draws.
        """
        lcg = cls()
        lcg.reseed(seed)
        return lcg

    @classmethod
    def from_time(cls) -> Lcg:
        """Create a generator seeded from the system clock."""
        return cls.from_seed(_u64_from_u32s(_sysnanos(), _sysnanos()))

    def reseed(self, seed: int) -> None:
        """Reset the state from a seed, as from_seed() does."""
        self.state = seed & LCG_MASK
        for _ in range(_WARMUP_DRAWS):
            self.next_u32()

    def copy(self) -> Lcg:
        """Return an independent generator with the same state."""
        return Lcg(self.state)

    def next_u32(self) -> int:
        """Advance the state and return a 32-bit word."""
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK
        return (self.state >> 16) & _U32_MASK

    def next_bits(self, bits: int) -> int:
        """Return the low bits of the next word.

        Args:
            bits: Number of bits to keep, between 1 and 32.

        Raises:
            ValueError: If bits is outside [1, 32].
        """
        if not 1 <= bits <= 32:
            raise ValueError(f"bits must be in [1, 32], got {bits}")
        return self.next_u32() & ((1 << bits) - 1)

    def next_bool(self) -> bool:
        """Return a uniformly distributed boolean."""
        return (self.next_u32() & 1) == 1

    def next_u64(self) -> int:
        """Return a 64-bit integer built from two words (first word is low)."""
        low = self.next_u32()
        high = self.next_u32()
        return _u64_from_u32s(low, high)

    def next_f32(self) -> float:
        """Return a float in [0, 1) with 24 bits of precision."""
        return (self.next_u32() % (1 << _F32_BITS)) / (1 << _F32_BITS)

    def next_f64(self) -> float:
        """Return a float in [0, 1) with 53 bits of precision."""
        return (self.next_u64() % (1 << _F64_BITS)) / (1 << _F64_BITS)

    def __repr__(self) -> str:
        return f"Lcg(state={self.state:#014x})"
