import matplotlib
import pytest

from schedsim.models import Process

matplotlib.use("Agg")


@pytest.fixture
def two_processes():
    """P1 arrives first and runs long, P2 arrives one tick later."""
    return [Process(1, 0, 5, page_count=2), Process(2, 1, 3, page_count=3)]


def running_sequence(trace):
    """Pid that ran at each tick, None for idle and overhead ticks."""
    return [entry.running for entry in trace]
