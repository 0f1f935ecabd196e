"""Demo: event producer, simulator and main entry point."""

from .simulator import generate_raw_event, main, run_main, run_producer, run_simulation

__all__ = [
    "generate_raw_event",
    "main",
    "run_main",
    "run_producer",
    "run_simulation",
]
