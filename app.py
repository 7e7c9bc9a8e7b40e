import random

import matplotlib.pyplot as plt
import streamlit as st

from schedsim.charts import draw_gantt_chart, draw_memory_map
from schedsim.config import (
    DEFAULT_OVERHEAD,
    DEFAULT_PAGES,
    DEFAULT_QUANTUM,
    MAX_PROCESSES,
    MEMORY_SIZE,
    REPLAY_INTERVAL,
    configure_logging,
)
from schedsim.memory import Memory, ReplacementPolicy
from schedsim.models import POLICY_NAMES, ConfigurationError, make_policy
from schedsim.replay import replay
from schedsim.report import execution_log, occupancy_turnaround
from schedsim.scheduler import JobScheduler

configure_logging()

# --- Page Setup ---
st.set_page_config(layout="wide", page_title="CPU Scheduling Simulator")
st.markdown("""
    <style>
        .main .block-container {
            padding-left: 1rem;
            padding-right: 1rem;
            max-width: 100%;
        }
    </style>
""", unsafe_allow_html=True)

# --- Title ---
st.title("CPU Scheduling & Memory Simulator")

# --- Algorithm Selection ---
st.sidebar.title("Algorithm Selection")
algo = st.sidebar.radio("CPU Scheduling Algorithm", POLICY_NAMES, format_func={
    "FIFO": "First In, First Out",
    "SJF": "Shortest Job First",
    "RR": "Round Robin",
    "EDF": "Earliest Deadline First",
}.get)
page_algo = st.sidebar.radio("Page Replacement Algorithm", [p.value for p in ReplacementPolicy])
replay_interval = st.sidebar.slider("Seconds per tick", 0.0, 2.0, REPLAY_INTERVAL, 0.1)
st.markdown("---")


# --- Process Inputs ---
def collect_processes():
    needs_slice = algo in ("RR", "EDF")
    col1, col2, col3 = st.columns(3)
    with col1:
        num_jobs = st.number_input("Number of Processes", 1, MAX_PROCESSES, 3, key="num_jobs")
    with col2:
        quantum = st.number_input("Quantum", 1, 20, DEFAULT_QUANTUM, key="quantum", disabled=not needs_slice)
    with col3:
        overhead = st.number_input("Overhead", 1, 20, DEFAULT_OVERHEAD, key="overhead", disabled=not needs_slice)

    if st.button("Randomize Process Times", key="rand"):
        st.session_state.random_jobs = [
            {'arrival': random.randint(0, 5), 'service': random.randint(1, 8),
             'deadline': random.randint(3, 15), 'pages': random.randint(1, 10)}
            for _ in range(num_jobs)
        ]

    scheduler = JobScheduler()
    defaults = st.session_state.get("random_jobs", [])
    for i in range(num_jobs):
        default = defaults[i] if i < len(defaults) else {}
        c1, c2, c3, c4 = st.columns(4)
        with c1:
            arrival = st.number_input(f"Arrival Time for P{i+1}", 0, 100, default.get('arrival', i), key=f"arr_{i}")
        with c2:
            service = st.number_input(f"Service Time for P{i+1}", 1, 100, default.get('service', 3), key=f"svc_{i}")
        with c3:
            deadline = st.number_input(f"Deadline for P{i+1}", 0, 200, default.get('deadline', 10), key=f"dl_{i}",
                                       disabled=algo != "EDF")
        with c4:
            pages = st.number_input(f"Pages for P{i+1}", 1, MEMORY_SIZE, default.get('pages', DEFAULT_PAGES),
                                    key=f"pg_{i}")
        scheduler.add_job(i + 1, int(arrival), int(service), int(deadline) if algo == "EDF" else None, int(pages))

    return scheduler, make_policy(algo, int(quantum), int(overhead)) if needs_slice else make_policy(algo)


def run_simulation(scheduler, policy):
    trace = scheduler.run(policy)
    memory = Memory(MEMORY_SIZE, page_algo)

    st.subheader("Gantt Chart")
    gantt_slot = st.empty()
    st.subheader("Memory")
    memory_slot = st.empty()

    for frame in replay(trace, scheduler.processes, memory, interval=replay_interval):
        tick = frame.entry.tick
        fig = draw_gantt_chart(trace, scheduler.processes, policy, upto=tick)
        gantt_slot.pyplot(fig, use_container_width=True)
        plt.close(fig)
        fig = draw_memory_map(frame.frames, page_faults=frame.page_faults)
        memory_slot.pyplot(fig)
        plt.close(fig)

    st.subheader("Result Table")
    st.dataframe(scheduler.get_results_dataframe(), use_container_width=True)
    st.markdown(f"**Average Turnaround Time:** `{scheduler.get_average_turnaround():.2f}`")
    st.markdown(f"**Average Occupied Cells per Process:** "
                f"`{occupancy_turnaround(trace, scheduler.processes, policy):.2f}`")
    st.markdown(f"**Page Faults:** `{memory.page_faults}`")

    st.subheader("Execution Log")
    st.code("\n".join(execution_log(trace)) or "(empty)")


# --- Run ---
try:
    job_scheduler, selected_policy = collect_processes()
except ConfigurationError as exc:
    st.error(f"Invalid configuration: {exc}")
else:
    if st.button("Run Simulation", key="run"):
        run_simulation(job_scheduler, selected_policy)
