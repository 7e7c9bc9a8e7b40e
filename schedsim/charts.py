import matplotlib.pyplot as plt
import matplotlib.patches as patches

from schedsim.report import CellState, state_matrix

STATE_COLOR = {
    CellState.IDLE: '#6b7280',       # Grey
    CellState.WAITING: '#eab308',    # Yellow
    CellState.EXECUTING: '#22c55e',  # Green
    CellState.OVERHEAD: '#ef4444',   # Red
    CellState.LATE: '#292524',       # Stone
}

STATE_LABEL = {
    CellState.EXECUTING: "Executing",
    CellState.WAITING: "Waiting",
    CellState.IDLE: "Idle",
    CellState.OVERHEAD: "Overhead",
    CellState.LATE: "After deadline",
}

FREE_COLOR = '#9ca3af'


# --- Utility Function for Drawing Gantt Chart ---
def draw_gantt_chart(trace, processes, policy, upto=None):
    """One row per process, one column per tick, up to tick ``upto``."""
    matrix = state_matrix(trace, processes, policy)
    if upto is not None:
        matrix = matrix[:, :upto + 1]
    ordered = sorted(processes, key=lambda p: p.pid)
    ticks = max(len(trace), 1)

    fig, ax = plt.subplots(figsize=(max(8, ticks * 0.4), 1 + len(ordered) * 0.6))
    y_pos = {p.pid: len(ordered) - idx for idx, p in enumerate(ordered)}

    for row, process in enumerate(ordered):
        y = y_pos[process.pid]
        for tick, state in enumerate(matrix[row]):
            ax.barh(y, 1, left=tick, color=STATE_COLOR[CellState(state)], edgecolor='black', linewidth=0.5)

    ax.set_xlim(0, ticks)
    ax.set_ylim(0.4, len(ordered) + 0.6)
    ax.set_yticks(list(y_pos.values()))
    ax.set_yticklabels([f"P{p.pid}" for p in ordered])
    ax.set_xticks(range(0, ticks + 1))
    ax.set_xlabel("Time")
    ax.set_title(f"{policy.name} Gantt Chart")

    handles = [patches.Patch(facecolor=STATE_COLOR[state], edgecolor='black', label=label)
               for state, label in STATE_LABEL.items()]
    ax.legend(handles=handles, loc='upper center', bbox_to_anchor=(0.5, -0.25), ncol=len(handles), fontsize=8)

    plt.tight_layout()
    return fig


def draw_memory_map(frames, columns=10, page_faults=None):
    """Frame grid; occupied frames show their owner and page index."""
    rows = -(-len(frames) // columns)
    fig, ax = plt.subplots(figsize=(columns * 0.6, rows * 0.6 + 0.6))

    for frame_no, page in enumerate(frames):
        row, col = divmod(frame_no, columns)
        y = rows - 1 - row
        color = FREE_COLOR if page.is_free else plt.cm.tab20(page.owner_pid % 20)
        rect = patches.Rectangle((col, y), 0.95, 0.95, edgecolor='black', facecolor=color)
        ax.add_patch(rect)
        if not page.is_free:
            ax.text(col + 0.475, y + 0.475, f"P{page.owner_pid}\n{page.page_index}",
                    ha='center', va='center', fontsize=7)

    ax.set_xlim(0, columns)
    ax.set_ylim(0, rows)
    ax.set_aspect('equal')
    ax.axis('off')
    title = "Memory"
    if page_faults is not None:
        title += f" - {page_faults} page faults"
    ax.set_title(title)

    plt.tight_layout()
    return fig
