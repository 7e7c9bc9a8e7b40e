"""Time-stepped single CPU scheduler.

One call to :func:`simulate` runs the whole process set to completion and
returns the per-tick trace. The engine keeps a flat table of working records
keyed by pid; the ready queue, the CPU slot and the context switch slot only
ever hold pids.
"""

import logging
import math
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Optional

from schedsim.models import (
    ConfigurationError,
    EarliestDeadlineFirst,
    Fifo,
    HistoryEntry,
    Process,
    RoundRobin,
    ShortestJobFirst,
    SimulationError,
    is_preemptive,
)
from schedsim.report import average_turnaround, results_dataframe

logger = logging.getLogger(__name__)

POLICY_TYPES = (Fifo, ShortestJobFirst, RoundRobin, EarliestDeadlineFirst)


@dataclass
class Job:
    """Working copy of a process while it is being simulated."""
    process: Process
    order: int
    remaining_time: int
    slice_executed: int = 0
    slice_bound: int = 0
    start_time: Optional[int] = None
    completion_time: Optional[int] = None

    @property
    def pid(self):
        return self.process.pid


def validate(processes, policy):
    """Reject a run before any tick is simulated."""
    if not isinstance(policy, POLICY_TYPES):
        raise ConfigurationError(f"Unsupported scheduling policy: {policy!r}")
    seen = set()
    for process in processes:
        if not isinstance(process, Process):
            raise ConfigurationError(f"Expected a Process, got {process!r}")
        if process.pid in seen:
            raise ConfigurationError(f"Duplicate process id: P{process.pid}")
        seen.add(process.pid)


def tick_limit(processes, policy):
    """Upper bound on the number of ticks any valid run can take."""
    if not processes:
        return 0
    limit = max(p.arrival_time for p in processes) + sum(p.service_time for p in processes)
    if is_preemptive(policy):
        switches = sum(math.ceil(p.service_time / policy.quantum) for p in processes)
        limit += switches * policy.overhead
    return limit + 1


class CpuScheduler:
    """Ready-queue scheduler for one CPU."""

    def __init__(self, processes, policy):
        processes = list(processes)
        validate(processes, policy)
        self.policy = policy
        self.jobs = {p.pid: Job(p, i, p.service_time) for i, p in enumerate(processes)}
        self.arrivals = defaultdict(list)
        for p in processes:
            self.arrivals[p.arrival_time].append(p.pid)
        self.limit = tick_limit(processes, policy)

        # Runtime state
        self.ready = deque()
        self.running = None
        self.switched_out = None
        self.overhead_left = 0
        self.unfinished = len(self.jobs)
        self.history = []

    def run(self):
        """Simulate every tick and return the trace."""
        tick = 0
        while self.unfinished or self.running is not None:
            if tick >= self.limit:
                raise SimulationError(f"Simulation did not finish within {self.limit} ticks")
            self._admit(tick)
            if self.overhead_left > 0:
                self._pay_overhead(tick)
            else:
                if self.running is None and self.ready:
                    self._dispatch(tick)
                if self.running is not None:
                    self._execute(tick)
                else:
                    self.history.append(HistoryEntry(tick))
            tick += 1

        logger.info("Simulated %d processes under %s in %d ticks",
                    len(self.jobs), self.policy.name, len(self.history))
        return tuple(self.history)

    # --- Tick Steps ---

    def _admit(self, tick):
        for pid in self.arrivals.get(tick, ()):
            self.ready.append(pid)

    def _pay_overhead(self, tick):
        self.history.append(HistoryEntry(tick, waiting=tuple(self.ready), overhead_pid=self.switched_out))
        self.overhead_left -= 1
        if self.overhead_left == 0:
            # Re-enters behind everything that arrived during the switch
            self.ready.append(self.switched_out)
            self.switched_out = None

    def _dispatch(self, tick):
        if self.running is not None:
            raise SimulationError(f"P{self.running} is already dispatched at tick {tick}")
        index = self._select(tick)
        pid = self.ready[index]
        del self.ready[index]

        job = self.jobs[pid]
        job.slice_executed = 0
        if is_preemptive(self.policy):
            job.slice_bound = min(job.remaining_time, self.policy.quantum)
        else:
            job.slice_bound = job.remaining_time
        if job.start_time is None:
            job.start_time = tick
        self.running = pid
        logger.debug("[%03d] P%d dispatched (%s)", tick, pid, self.policy.name)

    def _select(self, tick):
        """Index in the ready queue of the next process to dispatch."""
        policy = self.policy
        if isinstance(policy, (Fifo, RoundRobin)):
            return 0
        if isinstance(policy, ShortestJobFirst):
            return min(range(len(self.ready)),
                       key=lambda i: (self.jobs[self.ready[i]].process.service_time, i))
        if isinstance(policy, EarliestDeadlineFirst):
            return min(range(len(self.ready)),
                       key=lambda i: self._deadline_rank(self.jobs[self.ready[i]], tick))
        raise SimulationError(f"No dispatch rule for {policy!r}")

    @staticmethod
    def _deadline_rank(job, tick):
        # Time left until the absolute deadline; no deadline sorts last
        deadline = job.process.absolute_deadline
        slack = math.inf if deadline is None else deadline - tick
        return slack, job.process.arrival_time, job.order

    def _execute(self, tick):
        job = self.jobs[self.running]
        if job.remaining_time <= 0:
            raise SimulationError(f"P{job.pid} executed with no remaining time")
        job.remaining_time -= 1
        job.slice_executed += 1
        self.history.append(HistoryEntry(tick, running=job.pid, waiting=tuple(self.ready)))

        if job.remaining_time == 0:
            job.completion_time = tick + 1
            self.running = None
            self.unfinished -= 1
            logger.debug("[%03d] P%d completed", tick, job.pid)
        elif is_preemptive(self.policy) and job.slice_executed >= job.slice_bound:
            self.overhead_left = self.policy.overhead
            self.switched_out = job.pid
            self.running = None
            logger.debug("[%03d] P%d quantum expired", tick, job.pid)

    # --- Results ---

    def start_times(self):
        """First dispatch tick of every process that has run."""
        return {pid: job.start_time for pid, job in self.jobs.items() if job.start_time is not None}

    def completion_times(self):
        return {pid: job.completion_time for pid, job in self.jobs.items() if job.completion_time is not None}


def simulate(processes, policy):
    """Run ``processes`` under ``policy`` and return the per-tick trace.

    The caller's Process records are never modified. Identical arguments
    always produce an identical trace.
    """
    return CpuScheduler(processes, policy).run()


class JobScheduler:
    """Collects process descriptors from the front end and runs them."""

    def __init__(self):
        self.processes = []
        self.trace = ()
        self.start_times = {}
        self.completion_times = {}

    def add_job(self, pid, arrival_time, service_time, deadline=None, page_count=1):
        self.processes.append(Process(pid, arrival_time, service_time, deadline, page_count))

    def reset(self):
        # Keep job definitions, drop the last run
        self.trace = ()
        self.start_times = {}
        self.completion_times = {}

    def run(self, policy):
        self.reset()
        engine = CpuScheduler(self.processes, policy)
        self.trace = engine.run()
        self.start_times = engine.start_times()
        self.completion_times = engine.completion_times()
        return self.trace

    def get_results_dataframe(self):
        """Get results as a pandas DataFrame for display."""
        return results_dataframe(self.processes, self.trace, self.start_times, self.completion_times)

    def get_average_turnaround(self):
        """Calculate and return the average turnaround time."""
        return average_turnaround(self.processes, self.trace, self.completion_times)
