from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .cache import CacheLine, CacheSet


class ReplacementPolicy:
    """Chooses which way of a full set gets overwritten.

    Lines carry a logical-clock recency stamp. The victim is always the way
    with the smallest stamp; equal stamps go to the lowest way index, so a
    victim exists for every full set.
    """
    name = "base"

    def on_insert(self, line: CacheLine, clock: int):
        line.recency = clock

    def on_hit(self, line: CacheLine, clock: int):
        pass

    def select_victim(self, cache_set: CacheSet) -> int:
        victim = 0
        oldest = cache_set.lines[0].recency
        for way, line in enumerate(cache_set.lines):
            if line.recency < oldest:
                victim, oldest = way, line.recency
        return victim


class FIFOPolicy(ReplacementPolicy):
    """Insertion order: hits never refresh a line, so the oldest fill is evicted."""
    name = "fifo"


class LRUPolicy(ReplacementPolicy):
    """True LRU: every hit moves the line to the most recent position."""
    name = "lru"

    def on_hit(self, line: CacheLine, clock: int):
        line.recency = clock


_POLICIES = {
    FIFOPolicy.name: FIFOPolicy,
    LRUPolicy.name: LRUPolicy,
}


def make_policy(name: str) -> ReplacementPolicy:
    """Returns a replacement policy instance by name."""
    try:
        return _POLICIES[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown or unsupported replacement policy: {name}") from None
