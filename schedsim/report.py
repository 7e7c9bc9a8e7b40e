"""Turns a trace into the tables, matrices and logs the front end shows."""

from enum import IntEnum

import numpy as np
import pandas as pd

from schedsim.models import EarliestDeadlineFirst


class CellState(IntEnum):
    IDLE = 0
    WAITING = 1
    EXECUTING = 2
    OVERHEAD = 3
    LATE = 4


def is_late(process, tick):
    """True when ``tick`` starts at or after the absolute deadline."""
    deadline = process.absolute_deadline
    return deadline is not None and tick >= deadline


def cell_state(entry, process, policy):
    """State of ``process`` during the tick described by ``entry``."""
    pid = process.pid
    if entry.is_overhead:
        if entry.overhead_pid == pid:
            return CellState.OVERHEAD
        return CellState.WAITING if pid in entry.waiting else CellState.IDLE
    present = entry.running == pid or pid in entry.waiting
    if present and isinstance(policy, EarliestDeadlineFirst) and is_late(process, entry.tick):
        return CellState.LATE
    if entry.running == pid:
        return CellState.EXECUTING
    if pid in entry.waiting:
        return CellState.WAITING
    return CellState.IDLE


def state_matrix(trace, processes, policy):
    """Rows are processes sorted by id, columns are ticks."""
    ordered = sorted(processes, key=lambda p: p.pid)
    matrix = np.zeros((len(ordered), len(trace)), dtype=int)
    for col, entry in enumerate(trace):
        for row, process in enumerate(ordered):
            matrix[row, col] = cell_state(entry, process, policy)
    return matrix


def occupancy_turnaround(trace, processes, policy):
    """Average number of non-idle cells per process."""
    if not processes:
        return 0.0
    matrix = state_matrix(trace, processes, policy)
    return float(np.count_nonzero(matrix != CellState.IDLE)) / len(processes)


# --- Per-process results ---

def start_times(trace):
    starts = {}
    for entry in trace:
        if entry.running is not None:
            starts.setdefault(entry.running, entry.tick)
    return starts


def completion_times(trace):
    """Tick after the last executed tick of every process that ran."""
    completions = {}
    for entry in trace:
        if entry.running is not None:
            completions[entry.running] = entry.tick + 1
    return completions


def average_turnaround(processes, trace, completions=None):
    if completions is None:
        completions = completion_times(trace)
    turnarounds = [completions[p.pid] - p.arrival_time for p in processes if p.pid in completions]
    return sum(turnarounds) / len(turnarounds) if turnarounds else 0


def results_dataframe(processes, trace, starts=None, completions=None):
    """One row per process, sorted by id.

    Start and completion ticks are read off the trace unless the scheduler
    already supplied them.
    """
    if starts is None:
        starts = start_times(trace)
    if completions is None:
        completions = completion_times(trace)
    data = []
    for process in sorted(processes, key=lambda p: p.pid):
        completion = completions.get(process.pid)
        turnaround = completion - process.arrival_time if completion is not None else None
        deadline = process.absolute_deadline
        data.append({
            "Process": f"P{process.pid}",
            "Arrival": process.arrival_time,
            "Service": process.service_time,
            "Deadline": deadline,
            "Pages": process.page_count,
            "Start": starts.get(process.pid),
            "Completion": completion,
            "Turnaround": turnaround,
            "Waiting": turnaround - process.service_time if turnaround is not None else None,
            "Missed deadline": deadline is not None and completion is not None and completion > deadline,
        })
    return pd.DataFrame(data)


def trace_dataframe(trace):
    """One row per tick."""
    return pd.DataFrame([{
        "Tick": entry.tick,
        "Running": f"P{entry.running}" if entry.running is not None else "",
        "Waiting": " ".join(f"P{pid}" for pid in entry.waiting),
        "Overhead": f"P{entry.overhead_pid}" if entry.is_overhead else "",
    } for entry in trace], columns=["Tick", "Running", "Waiting", "Overhead"])


def execution_log(trace):
    """Readable event lines, oldest first."""
    completions = completion_times(trace)
    logs = []
    previous = None
    for entry in trace:
        stamp = f"[{entry.tick:03d}]"
        if entry.is_overhead:
            if previous is None or previous.overhead_pid != entry.overhead_pid:
                logs.append(f"{stamp} P{entry.overhead_pid} quantum expired, context switch")
        elif entry.running is not None:
            if previous is None or previous.running != entry.running:
                logs.append(f"{stamp} P{entry.running} dispatched")
            if completions[entry.running] == entry.tick + 1:
                logs.append(f"[{entry.tick + 1:03d}] P{entry.running} completed")
        elif entry.is_idle and (previous is None or not previous.is_idle):
            logs.append(f"{stamp} CPU idle")
        previous = entry
    return logs
