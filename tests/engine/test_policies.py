import pytest
from cachesim.engine.cache import CacheLine, CacheSet
from cachesim.engine.policies import FIFOPolicy, LRUPolicy, make_policy

def make_set(*recencies):
    cache_set = CacheSet(len(recencies))
    for tag, (line, recency) in enumerate(zip(cache_set.lines, recencies)):
        line.valid, line.tag, line.recency = True, tag, recency
    return cache_set

def test_make_policy_by_name():
    assert isinstance(make_policy("fifo"), FIFOPolicy)
    assert isinstance(make_policy("LRU"), LRUPolicy)
    with pytest.raises(ValueError, match="Unknown or unsupported replacement policy"):
        make_policy("random")

@pytest.mark.parametrize("policy", [FIFOPolicy(), LRUPolicy()])
def test_victim_is_oldest_line(policy):
    assert policy.select_victim(make_set(4, 2, 7, 3)) == 1
    assert policy.select_victim(make_set(9, 8, 7, 6)) == 3

@pytest.mark.parametrize("policy", [FIFOPolicy(), LRUPolicy()])
def test_victim_ties_go_to_lowest_way(policy):
    assert policy.select_victim(make_set(5, 5, 5, 5)) == 0
    assert policy.select_victim(make_set(3, 1, 2, 1)) == 1

def test_single_way_set_always_evicts_way_zero():
    assert FIFOPolicy().select_victim(make_set(42)) == 0

def test_fifo_hit_keeps_insertion_stamp():
    line = CacheLine(valid=True, tag=1)
    policy = FIFOPolicy()
    policy.on_insert(line, 3)
    policy.on_hit(line, 10)
    assert line.recency == 3

def test_lru_hit_refreshes_stamp():
    line = CacheLine(valid=True, tag=1)
    policy = LRUPolicy()
    policy.on_insert(line, 3)
    policy.on_hit(line, 10)
    assert line.recency == 10
