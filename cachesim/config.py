from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
import yaml

from .utils.logging import get_logger

logger = get_logger(__name__)

REPLACEMENT_POLICIES = ("fifo", "lru")
MALFORMED_MODES = ("truncate", "skip", "error")


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@dataclass
class CacheConfig:
    """Geometry and run options for a single set-associative cache."""
    name: str = "Cache"
    memory_size_bytes: int = 1024
    block_size_bytes: int = 128
    associativity: int = 4
    prefetch: bool = False
    replacement_policy: str = "fifo"  # fifo (insertion order) or lru
    address_bits: int = 64

    # Trace handling
    on_malformed: str = "truncate"  # truncate, skip, error

    # Reporting
    report_dir: str = ""

    # Derived properties
    num_sets: int = field(init=False)
    offset_bits: int = field(init=False)
    index_bits: int = field(init=False)
    tag_bits: int = field(init=False)

    def __post_init__(self):
        # YAML values arrive untyped
        for name in ("memory_size_bytes", "block_size_bytes", "associativity", "address_bits"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}.")
        if not isinstance(self.prefetch, bool):
            raise ValueError(f"prefetch must be true or false, got {self.prefetch!r}.")
        for name in ("name", "replacement_policy", "on_malformed", "report_dir"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {value!r}.")

        if not self.memory_size_bytes > 0:
            raise ValueError("Memory size must be positive.")
        if not self.block_size_bytes > 0:
            raise ValueError("Block size must be positive.")
        if not self.associativity > 0:
            raise ValueError("Associativity must be positive.")
        if not self.address_bits > 0:
            raise ValueError("Address width must be positive.")

        if not is_power_of_two(self.block_size_bytes):
            raise ValueError("Block size must be a power of two for bitwise address decomposition.")

        set_bytes = self.block_size_bytes * self.associativity
        if self.memory_size_bytes % set_bytes != 0:
            raise ValueError("Memory size must be a multiple of block size * associativity.")

        self.num_sets = self.memory_size_bytes // set_bytes
        if not is_power_of_two(self.num_sets):
            raise ValueError("Number of sets must be a power of two for bitwise address decomposition.")

        self.offset_bits = self.block_size_bytes.bit_length() - 1
        self.index_bits = self.num_sets.bit_length() - 1
        self.tag_bits = self.address_bits - self.offset_bits - self.index_bits
        if self.tag_bits < 0:
            raise ValueError(
                f"Invalid bit configuration: negative tag bits "
                f"(address_bits={self.address_bits}, index_bits={self.index_bits}, "
                f"offset_bits={self.offset_bits})"
            )

        self.replacement_policy = self.replacement_policy.lower()
        if self.replacement_policy not in REPLACEMENT_POLICIES:
            raise ValueError(f"Unknown replacement policy: {self.replacement_policy}")
        if self.on_malformed not in MALFORMED_MODES:
            raise ValueError(f"Unknown malformed-line mode: {self.on_malformed}")

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML file."""
        with open(yaml_path, 'r') as f:
            yaml_config = yaml.safe_load(f) or {}
        if not isinstance(yaml_config, dict):
            raise ValueError(f"Config file {yaml_path} must contain a mapping.")
        settable = {f.name for f in fields(self) if f.init}
        for key, value in yaml_config.items():
            if key in settable:
                setattr(self, key, value)
            else:
                logger.warning(f"Ignoring unknown config key '{key}' in {yaml_path}")

    @classmethod
    def from_args(cls, args) -> CacheConfig:
        """Builds a config from defaults, then the YAML file in args.config, then CLI values."""
        config = cls()

        # 1. Load from YAML config file if provided
        config_file = getattr(args, 'config', None)
        if config_file:
            if Path(config_file).exists():
                config.update_from_yaml(config_file)
            else:
                logger.warning(f"Config file {config_file} not found.")

        # 2. Override with command-line arguments
        settable = {f.name for f in fields(config) if f.init}
        for key, value in vars(args).items():
            if value is not None and key in settable:
                setattr(config, key, value)

        config.__post_init__()
        return config

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.memory_size_bytes} bytes, {self.num_sets} sets of "
            f"{self.associativity} x {self.block_size_bytes}-byte blocks "
            f"(offset={self.offset_bits} index={self.index_bits} tag={self.tag_bits} bits), "
            f"policy={self.replacement_policy}, prefetch={'on' if self.prefetch else 'off'}"
        )
