"""
Simulation configuration.

:class:`SimulationConfig` carries the values a control panel supplies to the
simulation (loss rate, initial water, time step, evaluation mode, ...).
:class:`PhysicalConstants` carries the fixed constants of the flow model.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Tuple, Union

from .core.errors import InvalidParameterError, ParseError
from .utils.units import FILE_UNIT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhysicalConstants:
    """Constants of the Poiseuille flow model."""
    # mPa * s, water at room temperature
    dynamic_viscosity: float = 0.9
    # (mPa * s) / cm^3 -> (kPa * s) / cm^3
    resistance_scale: float = 1e6
    # water amount and volume -> pressure
    pressure_constant: float = 11.538249539485484


@dataclass
class SimulationConfig:
    """Parameters of a simulation session."""
    initial_water: float = 4.0
    loss_rate: float = 0.3
    time_step: float = 0.1
    duration: float = 10.0
    spectral: bool = False
    dead_edges: List[Tuple[int, int]] = field(default_factory=list)
    units: str = FILE_UNIT

    def __post_init__(self):
        for name in ("initial_water", "loss_rate", "time_step", "duration"):
            value = float(getattr(self, name))
            if value < 0.0:
                logger.warning("%s = %g is negative, clamping to 0", name, value)
                value = 0.0
            setattr(self, name, value)
        self.dead_edges = [tuple(int(i) for i in edge) for edge in self.dead_edges]
        for edge in self.dead_edges:
            if len(edge) != 2:
                raise InvalidParameterError(f"Dead edge {edge} must have two node IDs")

    @property
    def num_steps(self) -> int:
        """Number of time steps needed to cover ``duration``."""
        if self.time_step <= 0.0:
            return 0
        return int(round(self.duration / self.time_step))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        d = asdict(self)
        d["dead_edges"] = [list(edge) for edge in self.dead_edges]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SimulationConfig":
        """Create from dictionary."""
        known = {f for f in cls.__dataclass_fields__}
        unknown = set(d) - known
        if unknown:
            raise InvalidParameterError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**d)


def load_config(filepath: Union[str, Path]) -> SimulationConfig:
    """Load a :class:`SimulationConfig` from a JSON file."""
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"{filepath}: invalid JSON ({e.msg})", line_number=e.lineno) from e
    return SimulationConfig.from_dict(data)
