"""Tests for the frame table and its FIFO / LRU replacement."""

import pytest

from schedsim.memory import FREE, Memory, Page, ReplacementPolicy
from schedsim.models import ConfigurationError, SimulationError


def occupied_keys(memory):
    return [(page.owner_pid, page.page_index) for page in memory.snapshot() if not page.is_free]


class TestMemoryCreation:
    """A new memory is all free frames."""

    def test_all_frames_start_free(self) -> None:
        memory = Memory(5)
        assert len(memory.snapshot()) == 5
        assert all(page.owner_pid == FREE for page in memory.snapshot())
        assert memory.page_faults == 0

    def test_default_capacity_is_fifty(self) -> None:
        assert Memory().capacity == 50

    @pytest.mark.parametrize("capacity", [0, -3])
    def test_capacity_must_be_positive(self, capacity) -> None:
        with pytest.raises(ConfigurationError, match="capacity"):
            Memory(capacity)

    def test_unknown_policy_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="replacement policy"):
            Memory(4, "CLOCK")

    def test_policy_accepts_plain_names(self) -> None:
        assert Memory(4, "LRU").policy is ReplacementPolicy.LRU


class TestReferences:
    """Hits, misses and the fault counter."""

    def test_first_reference_faults_then_hits(self) -> None:
        memory = Memory(4)
        assert memory.reference(1, 0) is False
        assert memory.reference(1, 0) is True
        assert memory.page_faults == 1
        assert memory.is_resident(1, 0)

    def test_free_frames_fill_from_the_front(self) -> None:
        memory = Memory(4)
        memory.reference(3, 0)
        memory.reference(3, 1)
        assert occupied_keys(memory) == [(3, 0), (3, 1)]
        assert memory.snapshot()[2].is_free

    def test_single_frame_ping_pong(self) -> None:
        memory = Memory(1, ReplacementPolicy.FIFO)
        assert memory.reference(1, 0) is False
        assert memory.reference(2, 0) is False
        assert not memory.is_resident(1, 0)
        assert memory.reference(1, 0) is False
        assert memory.page_faults == 3

    def test_fault_counter_moves_by_one_per_miss(self) -> None:
        memory = Memory(3, ReplacementPolicy.LRU)
        faults = memory.page_faults
        for pid, index in [(1, 0), (1, 1), (1, 0), (2, 0), (2, 1), (1, 1), (1, 0)]:
            hit = memory.reference(pid, index)
            assert memory.page_faults == faults + (0 if hit else 1)
            faults = memory.page_faults

    def test_faulting_a_resident_page_is_fatal(self) -> None:
        memory = Memory(2)
        memory.reference(1, 0)
        with pytest.raises(SimulationError, match="already resident"):
            memory.fault(Page(0, 1))


class TestFifoReplacement:
    """The circular pointer evicts in load order."""

    def test_pointer_walks_the_frames(self) -> None:
        memory = Memory(3, ReplacementPolicy.FIFO)
        memory.load_working_set(1, 3)
        memory.reference(2, 0)
        assert memory.snapshot()[0] == Page(0, 2, memory.clock)
        memory.reference(2, 1)
        assert occupied_keys(memory) == [(2, 0), (2, 1), (1, 2)]
        assert memory.fifo_pointer == 2

    def test_pointer_wraps_around(self) -> None:
        memory = Memory(2, ReplacementPolicy.FIFO)
        for index in range(5):
            memory.reference(1, index)
        assert occupied_keys(memory) == [(1, 4), (1, 3)]
        assert memory.fifo_pointer == 1

    def test_hits_do_not_protect_a_page(self) -> None:
        memory = Memory(2, ReplacementPolicy.FIFO)
        memory.reference(1, 0)
        memory.reference(1, 1)
        memory.reference(1, 0)
        memory.reference(2, 0)
        assert not memory.is_resident(1, 0)
        assert memory.is_resident(1, 1)


class TestLruReplacement:
    """Least recently referenced page is evicted."""

    def test_recent_hit_protects_a_page(self) -> None:
        memory = Memory(2, ReplacementPolicy.LRU)
        memory.reference(1, 0)
        memory.reference(1, 1)
        memory.reference(1, 0)
        memory.reference(2, 0)
        assert memory.is_resident(1, 0)
        assert not memory.is_resident(1, 1)
        assert occupied_keys(memory) == [(1, 0), (2, 0)]

    def test_hit_refreshes_last_access(self) -> None:
        memory = Memory(2, ReplacementPolicy.LRU)
        memory.reference(1, 0)
        memory.reference(1, 1)
        memory.reference(1, 0)
        assert memory.snapshot()[0].last_access == 3

    def test_ties_evict_the_lowest_frame(self) -> None:
        memory = Memory(2, ReplacementPolicy.LRU)
        memory.fault(Page(0, 1))
        memory.fault(Page(1, 1))
        assert memory.fault(Page(0, 2)) == 0


class TestWorkingSets:
    """Loading every page of the running process."""

    def test_working_set_faults_only_once(self) -> None:
        memory = Memory(10)
        assert memory.load_working_set(4, 3) == 3
        assert memory.load_working_set(4, 3) == 0
        assert memory.resident_pages(4) == [0, 1, 2]

    @pytest.mark.parametrize("policy", list(ReplacementPolicy))
    def test_oversized_working_set_keeps_the_newest_pages(self, policy) -> None:
        memory = Memory(3, policy)
        assert memory.load_working_set(1, 5) == 5
        assert memory.occupied == 3
        assert memory.resident_pages(1) == [2, 3, 4]

    @pytest.mark.parametrize("policy", list(ReplacementPolicy))
    def test_capacity_and_uniqueness_hold(self, policy) -> None:
        memory = Memory(4, policy)
        for pid, pages in [(1, 3), (2, 2), (1, 3), (3, 4), (2, 2), (1, 1)]:
            memory.load_working_set(pid, pages)
            keys = occupied_keys(memory)
            assert len(keys) <= memory.capacity
            assert len(keys) == len(set(keys)) == memory.occupied

    def test_other_processes_survive_until_space_is_needed(self) -> None:
        memory = Memory(6)
        memory.load_working_set(1, 2)
        memory.load_working_set(2, 3)
        assert memory.resident_pages(1) == [0, 1]
