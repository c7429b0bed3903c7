from pathlib import Path
import pytest
from cachesim.config import CacheConfig


@pytest.fixture
def config():
    """The 1 KiB, 128-byte block, 4-way geometry (2 sets, 7 offset bits, 1 index bit)."""
    return CacheConfig(memory_size_bytes=1024, block_size_bytes=128, associativity=4)


@pytest.fixture
def write_trace(tmp_path: Path):
    """Writes trace lines to a temporary file and returns its path as a string."""
    def _write(*lines: str, name: str = "test.trace") -> str:
        trace_file = tmp_path / name
        trace_file.write_text("".join(line + "\n" for line in lines))
        return str(trace_file)
    return _write
