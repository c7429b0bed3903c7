from __future__ import annotations
from typing import NamedTuple
from ..config import CacheConfig


class DecodedAddress(NamedTuple):
    offset: int
    index: int
    tag: int


class AddressDecoder:
    """Splits raw addresses into (offset, index, tag) for a given cache geometry."""

    def __init__(self, config: CacheConfig):
        self.offset_bits = config.offset_bits
        self.index_bits = config.index_bits
        self.address_mask = (1 << config.address_bits) - 1
        self.offset_mask = (1 << self.offset_bits) - 1
        self.index_mask = ((1 << self.index_bits) - 1) << self.offset_bits

    def decode(self, address: int) -> DecodedAddress:
        """Decomposes an address into offset, index, and tag."""
        address &= self.address_mask
        offset = address & self.offset_mask
        index = (address & self.index_mask) >> self.offset_bits
        tag = address >> (self.offset_bits + self.index_bits)
        return DecodedAddress(offset, index, tag)

    def block_address(self, tag: int, index: int) -> int:
        """Reconstructs the block start address from tag and index."""
        return (tag << (self.index_bits + self.offset_bits)) | (index << self.offset_bits)


def decode_address(address: int, config: CacheConfig) -> DecodedAddress:
    return AddressDecoder(config).decode(address)
