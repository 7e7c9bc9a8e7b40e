"""Replays a finished trace one tick at a time and drives memory with it."""

import logging
import time
from dataclasses import dataclass
from typing import Tuple

from schedsim.config import REPLAY_INTERVAL
from schedsim.memory import Page
from schedsim.models import HistoryEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayFrame:
    entry: HistoryEntry
    frames: Tuple[Page, ...]
    page_faults: int


def drive_memory(trace, processes, memory):
    """Load the running process's working set for every tick of ``trace``."""
    page_counts = {p.pid: p.page_count for p in processes}
    for entry in trace:
        if entry.running is not None:
            faults = memory.load_working_set(entry.running, page_counts[entry.running])
            if faults:
                logger.debug("[%03d] P%d caused %d page faults", entry.tick, entry.running, faults)
        yield ReplayFrame(entry, memory.snapshot(), memory.page_faults)


def replay(trace, processes, memory, interval=REPLAY_INTERVAL, sleep=time.sleep, cancelled=None):
    """Like :func:`drive_memory` but paced at one tick per ``interval`` seconds.

    Stops before the next tick as soon as ``cancelled()`` returns True.
    """
    frames = drive_memory(trace, processes, memory)
    for tick in range(len(trace)):
        if tick:
            sleep(interval)
        if cancelled is not None and cancelled():
            logger.info("Replay cancelled at tick %d", tick)
            return
        yield next(frames)
