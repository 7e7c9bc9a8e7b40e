import logging
import os

# --- Memory ---
MEMORY_SIZE = int(os.environ.get("SCHEDSIM_MEMORY_SIZE", 50))

# --- Replay ---
# Seconds between two replayed ticks
REPLAY_INTERVAL = float(os.environ.get("SCHEDSIM_REPLAY_INTERVAL", 0.5))

# --- Input defaults ---
DEFAULT_QUANTUM = 2
DEFAULT_OVERHEAD = 1
DEFAULT_PAGES = 3
MAX_PROCESSES = 10

# --- Logging ---
LOG_LEVEL = os.environ.get("SCHEDSIM_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level=None):
    """Configure the root logger once for the front end."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
