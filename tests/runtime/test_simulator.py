import pytest
from cachesim.config import CacheConfig
from cachesim.runtime.simulator import CacheSimulator, SimStats, run
from cachesim.trace.parser import Access, AccessKind, TraceParser

def reads(*addresses):
    return [Access(AccessKind.READ, a) for a in addresses]

def test_reference_scenario(config):
    """1 KiB / 128 B / 4-way, R 0x0, R 0x0, R 0x100 -> 1 hit, 2 misses."""
    stats = run(reads(0x0, 0x0, 0x100), config)

    assert (stats.hits, stats.misses) == (1, 2)
    assert stats.accesses == 3
    assert stats.hit_rate == pytest.approx(1 / 3)

def test_repeat_access_is_miss_then_hit(config):
    sim = CacheSimulator(config)
    assert sim.access(Access(AccessKind.READ, 0xABC0)) is False
    assert sim.access(Access(AccessKind.READ, 0xABC0)) is True
    # Same block, different offset
    assert sim.access(Access(AccessKind.READ, 0xABFF)) is True

def test_reads_and_writes_share_lines(config):
    stats = run([Access(AccessKind.WRITE, 0x40), Access(AccessKind.READ, 0x0)], config)

    assert (stats.hits, stats.misses) == (1, 1)
    assert (stats.reads, stats.writes) == (1, 1)

def test_capacity_evicts_first_inserted(config):
    sim = CacheSimulator(config)
    # associativity + 1 distinct tags, all in set 0
    sim.simulate(reads(0x0, 0x100, 0x200, 0x300, 0x400))

    assert not sim.cache.contains(sim.decoder.decode(0x0))
    assert all(sim.cache.contains(sim.decoder.decode(a)) for a in (0x100, 0x200, 0x300, 0x400))
    assert sim.stats.evictions == 1

@pytest.mark.parametrize("policy, hits, misses, evictions", [
    ("fifo", 1, 6, 2),  # the hit on 0x0 does not save it
    ("lru", 2, 5, 1),   # the hit on 0x0 makes 0x80 the victim
])
def test_fifo_and_lru_diverge_after_a_hit(policy, hits, misses, evictions):
    config = CacheConfig(memory_size_bytes=512, block_size_bytes=128, associativity=4,
                         replacement_policy=policy)
    trace = reads(0x0, 0x80, 0x100, 0x180, 0x0, 0x200, 0x0)

    stats = run(trace, config)

    assert (stats.hits, stats.misses, stats.evictions) == (hits, misses, evictions)

def test_prefetch_cold_successor_counts_two_misses():
    config = CacheConfig(prefetch=True)
    sim = CacheSimulator(config)

    sim.access(Access(AccessKind.READ, 0x0))

    assert sim.stats.misses == 2
    assert sim.stats.prefetches == 1
    # the prefetched block is now a hit
    assert sim.access(Access(AccessKind.READ, 0x80)) is True

def test_prefetch_warm_successor_counts_one_miss():
    config = CacheConfig(prefetch=True)
    sim = CacheSimulator(config)
    sim.access(Access(AccessKind.READ, 0x80))  # also prefetches 0x100
    assert sim.stats.misses == 2

    sim.access(Access(AccessKind.READ, 0x0))   # successor 0x80 already cached

    assert sim.stats.misses == 3
    assert sim.stats.prefetches == 1

def test_prefetch_is_not_issued_on_hit():
    sim = CacheSimulator(CacheConfig(prefetch=True))
    sim.simulate(reads(0x0, 0x0, 0x100))

    assert (sim.stats.hits, sim.stats.misses) == (1, 4)
    assert sim.stats.prefetches == 2

def test_prefetch_disabled_by_default(config):
    assert CacheSimulator(config).prefetcher is None

def test_runs_are_deterministic():
    config = CacheConfig(memory_size_bytes=512, block_size_bytes=64, associativity=2, prefetch=True)
    trace = reads(*[(i * 0x1C0) % 0x2000 for i in range(200)])

    first = run(trace, config)
    second = run(trace, config)

    assert first == second

def test_empty_trace(config):
    stats = run([], config)
    assert stats == SimStats()
    assert stats.hit_rate == 0.0

@pytest.mark.parametrize("mode, hits, misses", [
    ("truncate", 0, 1),
    ("skip", 1, 1),
])
def test_malformed_lines_are_counted(config, write_trace, mode, hits, misses):
    path = write_trace("R: 0x0", "not an access", "R: 0x0")

    stats = run(TraceParser(path, on_malformed=mode), config)

    assert (stats.hits, stats.misses) == (hits, misses)
    assert stats.malformed_lines == 1

def test_stats_to_dict(config):
    stats = run(reads(0x0, 0x0), config)
    d = stats.to_dict()
    assert d["hits"] == 1
    assert d["misses"] == 1
    assert d["accesses"] == 2
    assert d["hit_rate"] == 0.5
