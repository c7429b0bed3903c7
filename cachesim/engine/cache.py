from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional

from ..config import CacheConfig
from .address import DecodedAddress
from .policies import ReplacementPolicy, FIFOPolicy


@dataclass
class CacheLine:
    """Represents a single way in a cache set."""
    valid: bool = False
    tag: int = 0
    recency: int = 0


class CacheSet:
    """A fixed number of ways sharing one index."""

    def __init__(self, associativity: int):
        if associativity <= 0:
            raise ValueError("Associativity must be positive.")
        self.lines: List[CacheLine] = [CacheLine() for _ in range(associativity)]

    def __len__(self) -> int:
        return len(self.lines)

    def find_line(self, tag: int) -> Optional[CacheLine]:
        """Finds the valid line holding `tag`, without touching its recency."""
        for line in self.lines:
            if line.valid and line.tag == tag:
                return line
        return None

    def free_way(self) -> Optional[int]:
        """Returns the lowest invalid way, or None when the set is full."""
        for way, line in enumerate(self.lines):
            if not line.valid:
                return way
        return None

    def occupancy(self) -> int:
        return sum(1 for line in self.lines if line.valid)


class Cache:
    """
    Presence-only set-associative cache.
    Holds tags, not data: it answers hit/miss and performs fills, while the
    replacement policy decides which way a fill overwrites.
    """

    def __init__(self, config: CacheConfig, policy: ReplacementPolicy | None = None):
        self.config = config
        self.policy = policy if policy is not None else FIFOPolicy()
        self.sets = [CacheSet(config.associativity) for _ in range(config.num_sets)]

    def lookup(self, decoded: DecodedAddress) -> Optional[CacheLine]:
        """Returns the line matching (index, tag), or None on a miss. Read-only."""
        return self.sets[decoded.index].find_line(decoded.tag)

    def contains(self, decoded: DecodedAddress) -> bool:
        return self.lookup(decoded) is not None

    def insert(self, decoded: DecodedAddress, clock: int) -> Optional[CacheLine]:
        """
        Fills the line for `decoded` into its set.
        Uses the lowest empty way if any, otherwise overwrites the policy's victim.
        Returns a snapshot of the evicted line, or None if nothing was evicted.
        """
        cache_set = self.sets[decoded.index]
        way = cache_set.free_way()
        evicted = None
        if way is None:
            way = self.policy.select_victim(cache_set)
            evicted = replace(cache_set.lines[way])

        line = cache_set.lines[way]
        line.valid = True
        line.tag = decoded.tag
        self.policy.on_insert(line, clock)
        return evicted

    def touch(self, line: CacheLine, clock: int):
        """Records a demand hit on `line` with the replacement policy."""
        self.policy.on_hit(line, clock)

    def occupancy(self) -> int:
        """Number of valid lines across all sets."""
        return sum(s.occupancy() for s in self.sets)
