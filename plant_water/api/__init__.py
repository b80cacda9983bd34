"""
High-level API for running water transport simulations.
"""

from .simulate import run_simulation, save_result
from .session import SimulationSession

__all__ = [
    "run_simulation",
    "save_result",
    "SimulationSession",
]
