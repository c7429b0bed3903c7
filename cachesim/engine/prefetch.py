from __future__ import annotations
from ..config import CacheConfig
from ..utils.logging import get_logger
from .address import AddressDecoder
from .cache import Cache, CacheLine

logger = get_logger(__name__)


class NextBlockPrefetcher:
    """Single-block look-ahead: on a miss, fill the block right after it."""

    def __init__(self, config: CacheConfig, decoder: AddressDecoder | None = None):
        self.block_size = config.block_size_bytes
        self.address_mask = (1 << config.address_bits) - 1
        self.decoder = decoder if decoder is not None else AddressDecoder(config)
        self.last_evicted: CacheLine | None = None

    def next_block(self, address: int) -> int:
        return (address + self.block_size) & self.address_mask

    def prefetch(self, cache: Cache, address: int, clock: int) -> bool:
        """Fills the successor block of `address` if absent. Returns True if a fill happened."""
        self.last_evicted = None
        target = self.next_block(address)
        decoded = self.decoder.decode(target)
        if cache.contains(decoded):
            return False
        evicted = cache.insert(decoded, clock)
        self.last_evicted = evicted
        logger.debug(
            f"prefetch: filled block 0x{target:x} (set {decoded.index}, tag 0x{decoded.tag:x})"
            + (f", evicted tag 0x{evicted.tag:x}" if evicted else "")
        )
        return True
