"""
Session - Live run management and autoplay.
"""

from .manager import RunNotFoundError, RunSession, SessionManager
from .autoplay import SimResult, SimulationStats, make_policy, play_run, simulate, simulate_run

__all__ = [
    "RunNotFoundError",
    "RunSession",
    "SessionManager",
    "SimResult",
    "SimulationStats",
    "make_policy",
    "play_run",
    "simulate",
    "simulate_run",
]
