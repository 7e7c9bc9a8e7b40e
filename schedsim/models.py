"""Input records, policy variants and trace entries shared by both engines."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


class ConfigurationError(ValueError):
    """Raised when a run is configured with values the engines cannot accept."""


class SimulationError(RuntimeError):
    """Raised when an engine breaks one of its own invariants."""


# --- Process Descriptors ---

@dataclass(frozen=True)
class Process:
    """Immutable description of one schedulable process.

    ``deadline`` is relative to ``arrival_time`` and only matters under EDF.
    """
    pid: int
    arrival_time: int
    service_time: int
    deadline: Optional[int] = None
    page_count: int = 1

    def __post_init__(self):
        if not is_tick(self.pid) or self.pid <= 0:
            raise ConfigurationError(f"P{self.pid}: id must be a positive integer")
        for field_name in ("arrival_time", "service_time", "deadline", "page_count"):
            value = getattr(self, field_name)
            if value is not None and not is_tick(value):
                raise ConfigurationError(f"P{self.pid}: {field_name} must be an integer, got {value!r}")
        if self.arrival_time < 0:
            raise ConfigurationError(f"P{self.pid}: arrival time must be non-negative")
        if self.service_time <= 0:
            raise ConfigurationError(f"P{self.pid}: service time must be positive")
        if self.deadline is not None and self.deadline < 0:
            raise ConfigurationError(f"P{self.pid}: deadline must be non-negative")
        if self.page_count <= 0:
            raise ConfigurationError(f"P{self.pid}: page count must be positive")

    @property
    def absolute_deadline(self):
        if self.deadline is None:
            return None
        return self.arrival_time + self.deadline


# --- Scheduling Policies ---

@dataclass(frozen=True)
class Fifo:
    name = "FIFO"


@dataclass(frozen=True)
class ShortestJobFirst:
    name = "SJF"


@dataclass(frozen=True)
class RoundRobin:
    quantum: int
    overhead: int
    name = "RR"

    def __post_init__(self):
        _check_slice(self.name, self.quantum, self.overhead)


@dataclass(frozen=True)
class EarliestDeadlineFirst:
    quantum: int
    overhead: int
    name = "EDF"

    def __post_init__(self):
        _check_slice(self.name, self.quantum, self.overhead)


Policy = Union[Fifo, ShortestJobFirst, RoundRobin, EarliestDeadlineFirst]

POLICY_NAMES = ("FIFO", "SJF", "RR", "EDF")


def is_tick(value):
    """True for plain integers; bools and floats are not tick counts."""
    return isinstance(value, int) and not isinstance(value, bool)


def _check_slice(name, quantum, overhead):
    if not is_tick(quantum) or quantum <= 0:
        raise ConfigurationError(f"{name} requires a positive integer quantum, got {quantum!r}")
    if not is_tick(overhead) or overhead <= 0:
        raise ConfigurationError(f"{name} requires a positive integer overhead, got {overhead!r}")


def is_preemptive(policy):
    """True for the policies that preempt on quantum expiry."""
    return isinstance(policy, (RoundRobin, EarliestDeadlineFirst))


def make_policy(name, quantum=None, overhead=None):
    """Build a policy from its short name, as selected in the front end."""
    key = name.upper()
    if key == "FIFO":
        return Fifo()
    if key == "SJF":
        return ShortestJobFirst()
    if key == "RR":
        return RoundRobin(quantum, overhead)
    if key == "EDF":
        return EarliestDeadlineFirst(quantum, overhead)
    raise ConfigurationError(f"Unknown scheduling policy: {name!r}")


# --- Trace ---

@dataclass(frozen=True)
class HistoryEntry:
    """CPU occupancy during one tick.

    ``running`` is the pid that executed this tick, ``waiting`` the ready
    queue behind it in order. On overhead ticks nothing runs and
    ``overhead_pid`` names the process whose context switch is being paid.
    """
    tick: int
    running: Optional[int] = None
    waiting: Tuple[int, ...] = ()
    overhead_pid: Optional[int] = None

    @property
    def processes(self):
        """Occupancy list with the running process first."""
        if self.running is None:
            return self.waiting
        return (self.running,) + self.waiting

    @property
    def is_overhead(self):
        return self.overhead_pid is not None

    @property
    def is_idle(self):
        return self.running is None and not self.waiting and self.overhead_pid is None
