"""Domain-separated deterministic RNG using xxhash.

The outcome of a draw depends ONLY on
WorldSeed + Domain + Key + Tick + Sequence. Call order must not matter.

Formula: RNG_Value = Hash(WorldSeed, Domain, Key, Tick, Seq)
"""

from __future__ import annotations

import struct

import xxhash

from lairsim.core.enums import Domain


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, key, tick, seq) —
    no internal mutable state. ``seq`` separates several draws made for the
    same key on the same tick.
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, key: int, tick: int, seq: int) -> int:
        payload = struct.pack("<qiqqi", self._seed, domain.value, key, tick, seq)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, key: int, tick: int, seq: int = 0) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, key, tick, seq) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, key: int, tick: int, low: int, high: int, seq: int = 0) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, key, tick, seq)
        return low + int(f * (high - low + 1))

    def next_bool(self, domain: Domain, key: int, tick: int, probability: float = 0.5, seq: int = 0) -> bool:
        """Return True with the given probability."""
        return self.next_float(domain, key, tick, seq) < probability
