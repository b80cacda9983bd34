"""Interactive simulation session.

A session drives a water model from a render/update loop: every frame the
caller ticks the session, which advances its clock by one time step unless
paused, and reads the per-node water back for display.
"""

import logging
from typing import Optional

import numpy as np

from ..core.graph import Graph
from ..analysis.water_model import WaterModel
from ..config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    Clock, pause and reset handling around a :class:`WaterModel`.

    Parameters
    ----------
    graph : Graph
        Graph to simulate
    config : SimulationConfig, optional
        Session parameters
    """

    def __init__(self, graph: Graph, config: Optional[SimulationConfig] = None):
        self.graph = graph
        self.config = config or SimulationConfig()
        self.model = WaterModel(
            graph,
            self.config.loss_rate,
            self.config.initial_water,
            self.config.dead_edges,
        )
        if self.config.spectral:
            self.model.build()
        self.time = 0.0
        self.frames = 0
        self._paused = False

    @property
    def is_paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def toggle_pause(self) -> None:
        self._paused = not self._paused

    def tick(self) -> float:
        """
        Advance the clock by one time step (unless paused) and evaluate.

        Returns
        -------
        float
            Current session time
        """
        if not self._paused:
            self.time += self.config.time_step
            self.frames += 1
        # A paused tick evaluates at an unchanged time, which is a no-op.
        self.model.evaluate(self.time)
        return self.time

    def reset(self, config: Optional[SimulationConfig] = None) -> None:
        """Re-initialize the model (optionally with new parameters) at t = 0."""
        if config is not None:
            self.config = config
        self.model.initialize(
            self.config.loss_rate,
            self.config.initial_water,
            self.config.dead_edges,
        )
        if self.config.spectral:
            self.model.build()
        self.time = 0.0
        self.frames = 0
        logger.info("Session reset")

    def water(self) -> np.ndarray:
        """Per-node water at the current time."""
        return self.model.water
