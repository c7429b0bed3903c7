from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Iterable, Dict, Any

from ..config import CacheConfig
from ..engine.address import AddressDecoder
from ..engine.cache import Cache
from ..engine.policies import make_policy
from ..engine.prefetch import NextBlockPrefetcher
from ..trace.parser import Access, AccessKind
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SimStats:
    hits: int = 0
    misses: int = 0
    reads: int = 0
    writes: int = 0
    evictions: int = 0
    prefetches: int = 0
    malformed_lines: int = 0

    @property
    def accesses(self) -> int:
        return self.reads + self.writes

    @property
    def hit_rate(self) -> float:
        return self.hits / self.accesses if self.accesses > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        stats = asdict(self)
        stats["accesses"] = self.accesses
        stats["hit_rate"] = self.hit_rate
        return stats


class CacheSimulator:
    """
    Runs an ordered access sequence through one cache.

    Each access ticks a logical clock, then is decoded and looked up. A hit
    bumps `hits` (and lets the policy refresh recency); a miss fills the
    block, bumps `misses`, and, with prefetching on, fills the following
    block too. A prefetch fill counts as one more miss for the same access.
    """

    def __init__(self, config: CacheConfig):
        self.config = config
        self.decoder = AddressDecoder(config)
        self.cache = Cache(config, make_policy(config.replacement_policy))
        self.prefetcher = NextBlockPrefetcher(config, self.decoder) if config.prefetch else None
        self.clock = 0
        self.stats = SimStats()

    def access(self, access: Access) -> bool:
        """Processes a single access. Returns True on a hit."""
        self.clock += 1
        if access.kind is AccessKind.WRITE:
            self.stats.writes += 1
        else:
            self.stats.reads += 1

        decoded = self.decoder.decode(access.address)
        line = self.cache.lookup(decoded)
        if line is not None:
            self.stats.hits += 1
            self.cache.touch(line, self.clock)
            return True

        evicted = self.cache.insert(decoded, self.clock)
        if evicted is not None:
            self.stats.evictions += 1
            logger.debug(
                f"{self.config.name}: set {decoded.index} evicted tag 0x{evicted.tag:x} "
                f"for tag 0x{decoded.tag:x}"
            )
        self.stats.misses += 1

        if self.prefetcher is not None:
            if self.prefetcher.prefetch(self.cache, access.address, self.clock):
                self.stats.misses += 1
                self.stats.prefetches += 1
                if self.prefetcher.last_evicted is not None:
                    self.stats.evictions += 1
        return False

    def simulate(self, accesses: Iterable[Access]) -> SimStats:
        """Folds every access, in order, into the counters."""
        for access in accesses:
            self.access(access)
        malformed = getattr(accesses, "malformed_lines", 0)
        self.stats.malformed_lines = malformed
        logger.info(
            f"{self.config.name}: processed {self.stats.accesses} accesses "
            f"({self.stats.hits} hits, {self.stats.misses} misses)"
        )
        return self.stats


def run(accesses: Iterable[Access], config: CacheConfig) -> SimStats:
    """
    Simulates `accesses` against a fresh cache built from `config`.

    This is the main entry point for a simulation run; the cache exists
    only for the duration of the call.
    """
    logger.info(f"Running simulation: {config}")
    return CacheSimulator(config).simulate(accesses)
