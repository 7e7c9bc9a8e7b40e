"""Fixed-capacity physical memory with FIFO and LRU page replacement."""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from schedsim.config import MEMORY_SIZE
from schedsim.models import ConfigurationError, SimulationError

logger = logging.getLogger(__name__)

FREE = 0


class ReplacementPolicy(str, Enum):
    FIFO = "FIFO"
    LRU = "LRU"


@dataclass(frozen=True)
class Page:
    """Contents of one frame. ``owner_pid == FREE`` marks an empty frame."""
    page_index: int = 0
    owner_pid: int = FREE
    last_access: int = 0

    @property
    def is_free(self):
        return self.owner_pid == FREE


class Memory:
    """Frame table shared by every process in a run.

    Pages are only ever brought in by a fault and only ever leave when a
    later fault needs their frame.
    """

    def __init__(self, capacity=MEMORY_SIZE, policy=ReplacementPolicy.FIFO):
        if capacity <= 0:
            raise ConfigurationError(f"Memory capacity must be positive, got {capacity}")
        try:
            policy = ReplacementPolicy(policy)
        except ValueError:
            raise ConfigurationError(f"Unknown page replacement policy: {policy!r}") from None
        self.capacity = capacity
        self.policy = policy
        self.frames = [Page() for _ in range(capacity)]
        self.page_faults = 0
        self.clock = 0
        self.fifo_pointer = 0
        # (pid, page_index) -> frame number
        self._resident = {}

    def is_resident(self, pid, page_index):
        return (pid, page_index) in self._resident

    def reference(self, pid, page_index):
        """Touch one page, faulting it in if needed. Returns True on a hit."""
        self.clock += 1
        frame_no = self._resident.get((pid, page_index))
        if frame_no is not None:
            if self.policy is ReplacementPolicy.LRU:
                self.frames[frame_no] = replace(self.frames[frame_no], last_access=self.clock)
            return True
        self.fault(Page(page_index, pid, self.clock))
        return False

    def fault(self, page):
        """Install a missing page and return the frame it now occupies."""
        key = (page.owner_pid, page.page_index)
        if key in self._resident:
            raise SimulationError(f"P{page.owner_pid} page {page.page_index} is already resident")
        self.page_faults += 1

        frame_no = self._free_frame()
        if frame_no is None:
            frame_no = self._select_victim()
            victim = self.frames[frame_no]
            del self._resident[(victim.owner_pid, victim.page_index)]
            logger.debug("Evicting P%d page %d from frame %d (%s)",
                         victim.owner_pid, victim.page_index, frame_no, self.policy.value)

        self.frames[frame_no] = replace(page, last_access=self.clock)
        self._resident[key] = frame_no
        logger.debug("Page fault #%d: P%d page %d -> frame %d",
                     self.page_faults, page.owner_pid, page.page_index, frame_no)
        return frame_no

    def load_working_set(self, pid, page_count):
        """Make pages ``0 .. page_count - 1`` of ``pid`` resident.

        Returns the number of faults this took.
        """
        before = self.page_faults
        for page_index in range(page_count):
            self.reference(pid, page_index)
        return self.page_faults - before

    def _free_frame(self):
        return next((i for i, page in enumerate(self.frames) if page.is_free), None)

    def _select_victim(self):
        if self.policy is ReplacementPolicy.FIFO:
            frame_no = self.fifo_pointer
            self.fifo_pointer = (self.fifo_pointer + 1) % self.capacity
            return frame_no
        # LRU: oldest access wins, lowest frame number on ties
        return min(range(self.capacity), key=lambda i: (self.frames[i].last_access, i))

    # --- Views ---

    def snapshot(self):
        """Current frame table contents, for display."""
        return tuple(self.frames)

    @property
    def occupied(self):
        return len(self._resident)

    def resident_pages(self, pid):
        return sorted(index for owner, index in self._resident if owner == pid)
