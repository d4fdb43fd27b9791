"""Building blocks for parallel bulk file transfer over TCP: queues, task pools, file and socket helpers, and a progress display."""

__version__ = "0.0.1"