"""
Water diffusion model over a vascular graph.

The model integrates ``d(water)/dt = S @ water`` with one of two strategies:

* **stepped** (default): fixed-coefficient BDF6 implicit integration. The
  operator ``I - alpha * dt * S`` is factorized with a sparse LU and reused
  for as long as the step size does not change.
* **spectral**: dense eigendecomposition ``S = V diag(lambda) V^-1``, after
  which ``water(t) = Re(V @ (xi * exp(lambda * t)))`` with
  ``xi = V^-1 @ water0`` for any ``t``.
"""

import copy
import logging
from time import perf_counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

import numpy as np
import scipy.linalg
import scipy.sparse as sp
from scipy.sparse.linalg import splu

from ..core.graph import Graph
from ..core.errors import (
    NullReferenceError,
    IndexOutOfRangeError,
    InvalidParameterError,
    NumericalFailureError,
)
from ..config import PhysicalConstants
from .system import (
    DeadEdges,
    compute_node_properties,
    loss_rate_vector,
    assemble_system_matrix,
    initial_water_distribution,
)

logger = logging.getLogger(__name__)

# Steps shorter than this are "no time has passed"; also the tolerance
# within which two step sizes share a factorization.
STEP_TOLERANCE = 1e-7

# BDF6: y[n+1] - sum_k beta_k y[n+1-k] = alpha * dt * f(y[n+1]).
# Coefficients ordered oldest to newest, matching the history buffer.
BDF6_ALPHA = 60.0 / 147.0
BDF6_BETA = np.array([-10.0, 72.0, -225.0, 400.0, -450.0, 360.0]) / 147.0
HISTORY_LENGTH = len(BDF6_BETA)


class EvaluationMode(Enum):
    """Strategy used to evaluate the model."""
    STEPPED = "stepped"
    SPECTRAL = "spectral"


class ModelState(Enum):
    """Lifecycle of a water model."""
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SPECTRAL_READY = "spectral_ready"
    STEPPED_READY = "stepped_ready"


@dataclass
class SpectralState:
    """Eigendecomposition of the system matrix."""
    eigenvalues: np.ndarray
    eigenvectors: np.ndarray
    xi: np.ndarray


@dataclass
class SteppedState:
    """Cached factorization and history of the BDF6 integrator."""
    step: float
    factorization: object
    history: np.ndarray  # (HISTORY_LENGTH, N), oldest first


class WaterModel:
    """
    Water diffusion model of a plant.

    The model references a :class:`Graph` but never modifies it.

    Parameters
    ----------
    graph : Graph
        Vascular graph to simulate
    loss_rate : float or array-like
        Loss rate of leaf segments, or one loss rate per node
    initial_water : float
        Total amount of initial water
    dead_edges : iterable of (int, int), optional
        Connections that do not let water flow
    constants : PhysicalConstants, optional
        Model constants

    Example
    -------
    >>> model = WaterModel(graph, loss_rate=0.3, initial_water=4.0)
    >>> model.evaluate(0.1)
    >>> model.get_water(graph.root_id)
    """

    def __init__(
        self,
        graph: Graph,
        loss_rate: Union[float, Iterable[float]],
        initial_water: float,
        dead_edges: DeadEdges = None,
        constants: Optional[PhysicalConstants] = None,
    ):
        if graph is None:
            raise NullReferenceError("WaterModel requires a graph")
        if graph.num_nodes == 0:
            raise InvalidParameterError("WaterModel requires a non-empty graph")
        self._graph = graph
        self.constants = constants or PhysicalConstants()

        self._state = ModelState.UNINITIALIZED
        self._mode = EvaluationMode.STEPPED
        self._spectral: Optional[SpectralState] = None
        self._stepped: Optional[SteppedState] = None
        self._last_time = 0.0

        self.initialize(loss_rate, initial_water, dead_edges)

    def __repr__(self) -> str:
        return (
            f"WaterModel(num_nodes={self._graph.num_nodes}, mode={self._mode.value}, "
            f"state={self._state.value}, t={self._last_time:g})"
        )

    @property
    def graph(self) -> Graph:
        """The simulated graph."""
        return self._graph

    @property
    def mode(self) -> EvaluationMode:
        """Active evaluation strategy."""
        return self._mode

    @property
    def state(self) -> ModelState:
        """Lifecycle state."""
        return self._state

    @property
    def system_matrix(self) -> sp.csc_matrix:
        """Sparse system matrix ``S``."""
        return self._S

    @property
    def loss_rates(self) -> np.ndarray:
        """Per-node loss rates."""
        return self._loss_rates.copy()

    @property
    def water0(self) -> np.ndarray:
        """Initial water of every node."""
        return self._water0.copy()

    @property
    def water(self) -> np.ndarray:
        """Water of every node at the last evaluated time."""
        return self._water.copy()

    @property
    def last_evaluation_time(self) -> float:
        """Time of the last evaluation that was not a no-op."""
        return self._last_time

    def _check_node(self, i: int) -> None:
        if not 0 <= i < self._water.size:
            raise IndexOutOfRangeError(
                f"Node ID {i} not in [0, {self._water.size})",
                context={"node_id": i},
            )

    def get_water0(self, i: int) -> float:
        """Initial water at node ``i``."""
        self._check_node(i)
        return float(self._water0[i])

    def get_water(self, i: int) -> float:
        """Water at node ``i`` at the last evaluated time."""
        self._check_node(i)
        return float(self._water[i])

    def total_water(self) -> float:
        """Total water at the last evaluated time."""
        return float(self._water.sum())

    def initialize(
        self,
        loss_rate: Union[float, Iterable[float]],
        initial_water: float,
        dead_edges: DeadEdges = None,
    ) -> None:
        """
        (Re)build the system and reset the model to time 0.

        All derived state is discarded and the model goes back to stepped
        mode.

        Parameters
        ----------
        loss_rate : float or array-like
            Loss rate of leaf segments, or one loss rate per node
        initial_water : float
            Total amount of initial water (>= 0)
        dead_edges : iterable of (int, int), optional
            Connections that do not let water flow
        """
        graph = self._graph
        properties = compute_node_properties(graph, self.constants)
        self._loss_rates = loss_rate_vector(graph, loss_rate)
        self._dead_edges = [tuple(edge) for edge in (dead_edges or ())]
        self._S = assemble_system_matrix(
            graph,
            self._loss_rates,
            self._dead_edges,
            constants=self.constants,
            properties=properties,
        )
        self._water0 = initial_water_distribution(properties.volumes, float(initial_water))
        self._water = self._water0.copy()
        self._last_time = 0.0
        self._spectral = None
        self._stepped = None
        self._mode = EvaluationMode.STEPPED
        self._state = ModelState.INITIALIZED

        logger.info(
            "Initialized water model: %d nodes, total water %g, %d dead edges",
            graph.num_nodes, self._water0.sum(), len(self._dead_edges),
        )

    def build(self) -> None:
        """
        Switch to spectral mode and compute the eigendecomposition of ``S``.

        Cost is O(N^3). Any stepped state is discarded.

        Raises
        ------
        NumericalFailureError
            If the eigendecomposition or the coefficient solve fails
        """
        n = self._S.shape[0]
        logger.info("Generated ODE system has %d variables", n)
        start = perf_counter()

        dense = self._S.toarray()
        try:
            eigenvalues, eigenvectors = scipy.linalg.eig(dense)
        except (np.linalg.LinAlgError, ValueError) as e:
            raise NumericalFailureError(
                f"Eigendecomposition of the {n}x{n} system matrix failed: {e}",
                context={"size": n, "operation": "eigendecomposition"},
            ) from e
        if not (np.all(np.isfinite(eigenvalues)) and np.all(np.isfinite(eigenvectors))):
            raise NumericalFailureError(
                f"Eigendecomposition of the {n}x{n} system matrix is not finite",
                context={"size": n, "operation": "eigendecomposition"},
            )

        try:
            xi = scipy.linalg.solve(eigenvectors, self._water0.astype(complex))
        except (np.linalg.LinAlgError, ValueError) as e:
            raise NumericalFailureError(
                f"Eigenvector matrix of size {n} is singular: {e}",
                context={"size": n, "operation": "eigenvector solve"},
            ) from e

        self._spectral = SpectralState(eigenvalues, eigenvectors, xi)
        self._stepped = None
        self._mode = EvaluationMode.SPECTRAL
        self._state = ModelState.SPECTRAL_READY
        self._water = self._closed_form(self._last_time)

        logger.info("Eigendecomposition took %.3f seconds", perf_counter() - start)

    def evaluate(self, time: float) -> None:
        """
        Evaluate the model at ``time`` and store the result.

        In spectral mode any non-negative time is valid. In stepped mode the
        model advances by ``dt = time - last_evaluation_time``; if ``dt`` is
        below 1e-7 the call does nothing.

        Raises
        ------
        InvalidParameterError
            If ``time`` is negative or not finite
        """
        if not np.isfinite(time) or time < 0.0:
            raise InvalidParameterError(
                f"Evaluation time must be finite and non-negative, got {time}",
                context={"time": time},
            )
        if self._mode is EvaluationMode.SPECTRAL:
            self._water = self._closed_form(time)
            self._last_time = float(time)
        else:
            self._step_to(float(time))

    def _closed_form(self, t: float) -> np.ndarray:
        state = self._spectral
        coefficients = state.xi * np.exp(state.eigenvalues * t)
        return np.real(state.eigenvectors @ coefficients)

    def _factorize(self, dt: float) -> object:
        n = self._S.shape[0]
        operator = (sp.identity(n, format="csc") - (BDF6_ALPHA * dt) * self._S).tocsc()
        try:
            factorization = splu(operator)
        except RuntimeError as e:
            raise NumericalFailureError(
                f"Sparse LU of the {n}x{n} BDF6 operator failed for dt={dt:g}: {e}",
                context={"size": n, "operation": "sparse LU", "step": dt},
            ) from e
        logger.debug("Factorized BDF6 operator for dt=%g", dt)
        return factorization

    def _step_to(self, t: float) -> None:
        dt = t - self._last_time
        if dt < STEP_TOLERANCE:
            return

        state = self._stepped
        if state is None:
            step, factorization = dt, self._factorize(dt)
            history = np.tile(self._water0, (HISTORY_LENGTH, 1))
        else:
            step, factorization = state.step, state.factorization
            if abs(dt - step) > STEP_TOLERANCE:
                step, factorization = dt, self._factorize(dt)
            history = state.history

        history = np.vstack([history[1:], self._water])
        water = factorization.solve(BDF6_BETA @ history)
        if not np.all(np.isfinite(water)):
            raise NumericalFailureError(
                f"BDF6 step to t={t:g} produced non-finite water",
                context={"size": water.size, "operation": "sparse solve", "step": dt},
            )

        # Commit only once the step has succeeded.
        if state is None:
            self._stepped = SteppedState(step, factorization, history)
            self._state = ModelState.STEPPED_READY
        else:
            state.step = step
            state.factorization = factorization
            state.history = history
        self._water = water
        self._last_time = t

    def copy(self) -> "WaterModel":
        """Copy the model; the graph is shared, derived state is copied."""
        clone = copy.copy(self)
        clone._water0 = self._water0.copy()
        clone._water = self._water.copy()
        clone._loss_rates = self._loss_rates.copy()
        clone._dead_edges = list(self._dead_edges)
        clone._S = self._S.copy()
        clone._spectral = copy.deepcopy(self._spectral)
        if self._stepped is not None:
            # SuperLU objects are immutable and can be shared.
            clone._stepped = SteppedState(
                self._stepped.step,
                self._stepped.factorization,
                self._stepped.history.copy(),
            )
        return clone
