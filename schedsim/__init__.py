from schedsim.memory import Memory, Page, ReplacementPolicy
from schedsim.models import (
    ConfigurationError,
    EarliestDeadlineFirst,
    Fifo,
    HistoryEntry,
    Process,
    RoundRobin,
    ShortestJobFirst,
    SimulationError,
    make_policy,
)
from schedsim.scheduler import JobScheduler, simulate

__all__ = [
    "ConfigurationError",
    "EarliestDeadlineFirst",
    "Fifo",
    "HistoryEntry",
    "JobScheduler",
    "Memory",
    "Page",
    "Process",
    "ReplacementPolicy",
    "RoundRobin",
    "ShortestJobFirst",
    "SimulationError",
    "make_policy",
    "simulate",
]
