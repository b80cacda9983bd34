"""
Assembly of the linear water transport system.

Each segment is treated as a Poiseuille pipe. Adjacent segments exchange
water through a conductance equal to the inverse of their mean flow
resistance, and leaf segments lose water proportionally to their area.
The result is the matrix ``S`` of the ODE ``d(water)/dt = S @ water``.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Set, Tuple, Union

import numpy as np
import scipy.sparse as sp

from ..core.graph import Graph
from ..core.errors import (
    NullReferenceError,
    IndexOutOfRangeError,
    InvalidParameterError,
)
from ..config import PhysicalConstants

logger = logging.getLogger(__name__)

DeadEdges = Optional[Iterable[Tuple[int, int]]]


@dataclass
class NodeProperties:
    """Per-node geometric and hydraulic quantities, indexed by node ID."""
    areas: np.ndarray
    volumes: np.ndarray
    flow_resistance: np.ndarray


def flow_resistance(
    radius: Union[float, np.ndarray],
    length: Union[float, np.ndarray],
    constants: PhysicalConstants = PhysicalConstants(),
) -> Union[float, np.ndarray]:
    """
    Poiseuille flow resistance term of a cylindrical segment.

    R = scale * pi * r^4 / (8 * mu * L)

    with mu in mPa*s and lengths in cm; ``scale`` brings the value to
    (kPa*s)/cm^3.
    """
    return (
        constants.resistance_scale * np.pi * radius ** 4
        / (8.0 * constants.dynamic_viscosity * length)
    )


def compute_node_properties(
    graph: Graph,
    constants: PhysicalConstants = PhysicalConstants(),
) -> NodeProperties:
    """Compute area, volume and flow resistance of every node."""
    radii = np.array([node.radius for node in graph.nodes])
    lengths = np.array([node.length() for node in graph.nodes])
    return NodeProperties(
        areas=lengths * radii,
        volumes=np.pi * radii ** 2 * lengths,
        flow_resistance=flow_resistance(radii, lengths, constants),
    )


def loss_rate_vector(
    graph: Graph,
    loss_rate: Union[float, Iterable[float]],
) -> np.ndarray:
    """
    Expand a loss rate specification to one value per node.

    A scalar applies to leaf segments only; other segments get 0. A vector
    must have one entry per node. Negative values are clamped to 0.
    """
    n = graph.num_nodes
    if np.isscalar(loss_rate):
        rates = np.array(
            [float(loss_rate) if node.is_on_leaf else 0.0 for node in graph.nodes]
        )
    else:
        rates = np.asarray(loss_rate, dtype=float).reshape(-1)
        if rates.shape != (n,):
            raise InvalidParameterError(
                f"Loss rate vector has {rates.size} entries, graph has {n} nodes",
                context={"num_nodes": n, "num_rates": int(rates.size)},
            )
    if not np.all(np.isfinite(rates)):
        raise InvalidParameterError("Loss rates must be finite")
    return np.maximum(rates, 0.0)


def normalize_dead_edges(dead_edges: DeadEdges, num_nodes: int) -> Set[Tuple[int, int]]:
    """Symmetric set of dead (flow-blocking) ordered node pairs."""
    dead: Set[Tuple[int, int]] = set()
    for edge in dead_edges or ():
        try:
            i, j = (int(k) for k in edge)
        except (TypeError, ValueError) as e:
            raise InvalidParameterError(f"Dead edge {edge!r} must be a pair of IDs") from e
        for k in (i, j):
            if not 0 <= k < num_nodes:
                raise IndexOutOfRangeError(
                    f"Dead edge ({i}, {j}) references node {k} not in [0, {num_nodes})",
                    context={"edge": (i, j)},
                )
        dead.add((i, j))
        dead.add((j, i))
    return dead


def assemble_conductance(
    graph: Graph,
    resistance: np.ndarray,
    dead: Set[Tuple[int, int]],
) -> sp.csr_matrix:
    """
    Sparse conductance matrix of the graph.

    ``A[i, j] = 1 / (0.5 * (R[i] + R[j]))`` for every live connection and
    ``A[i, i] = -sum_j A[i, j]``.
    """
    n = graph.num_nodes
    rows, cols, vals = [], [], []
    for node in graph.nodes:
        i = node.id
        total = 0.0
        for j in node.adjacency:
            if (i, j) in dead:
                continue
            conductance = 1.0 / (0.5 * (resistance[i] + resistance[j]))
            rows.append(i)
            cols.append(j)
            vals.append(conductance)
            total += conductance
        if total > 0.0:
            rows.append(i)
            cols.append(i)
            vals.append(-total)
    return sp.coo_matrix((vals, (rows, cols)), shape=(n, n)).tocsr()


def assemble_system_matrix(
    graph: Graph,
    loss_rates: np.ndarray,
    dead_edges: DeadEdges = None,
    constants: PhysicalConstants = PhysicalConstants(),
    properties: Optional[NodeProperties] = None,
) -> sp.csc_matrix:
    """
    Build the system matrix of the water transport ODE.

    S = A @ diag(1 / (k * volume)) - diag(loss_rate * area)

    Parameters
    ----------
    graph : Graph
        Vascular graph (read only)
    loss_rates : ndarray
        Per-node loss rates (>= 0)
    dead_edges : iterable of (int, int), optional
        Connections that do not let water flow
    constants : PhysicalConstants
        Model constants
    properties : NodeProperties, optional
        Precomputed node properties

    Returns
    -------
    S : scipy.sparse.csc_matrix
        N x N system matrix
    """
    if graph is None:
        raise NullReferenceError("System assembly requires a graph")
    if properties is None:
        properties = compute_node_properties(graph, constants)

    dead = normalize_dead_edges(dead_edges, graph.num_nodes)
    A = assemble_conductance(graph, properties.flow_resistance, dead)
    pressure = sp.diags(1.0 / (constants.pressure_constant * properties.volumes))
    loss = sp.diags(loss_rates * properties.areas)
    S = (A @ pressure - loss).tocsc()

    logger.debug(
        "Assembled system matrix %dx%d with %d non-zeros (%d dead edges)",
        S.shape[0], S.shape[1], S.nnz, len(dead) // 2,
    )
    return S


def initial_water_distribution(volumes: np.ndarray, total: float) -> np.ndarray:
    """Volume-proportional water distribution summing to ``total``."""
    if not np.isfinite(total) or total < 0.0:
        raise InvalidParameterError(
            f"Initial water must be a non-negative number, got {total}"
        )
    return volumes * (total / volumes.sum())
