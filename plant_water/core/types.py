"""
Geometric primitive helpers for vascular segments.
"""

from typing import Sequence, Union
import numpy as np
from scipy.spatial.transform import Rotation

from .errors import InvalidParameterError


Vector3Like = Union[Sequence[float], np.ndarray]

REFERENCE_AXIS = np.array([0.0, 1.0, 0.0])


def as_vector3(value: Vector3Like, name: str = "vector") -> np.ndarray:
    """
    Convert a 3-sequence to a float numpy array.
    
    Parameters
    ----------
    value : sequence of float or ndarray
        Three coordinates
    name : str
        Parameter name used in the error message
        
    Returns
    -------
    ndarray
        Copy of ``value`` as a float array of shape (3,)
    """
    arr = np.array(value, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise InvalidParameterError(
            f"{name} must have exactly 3 components, got {arr.size}"
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} has non-finite components: {arr}")
    return arr


def rotation_between(source: Vector3Like, target: Vector3Like) -> Rotation:
    """
    Minimal rotation that takes direction ``source`` onto direction ``target``.
    
    Both vectors are normalized first. Opposite vectors are rotated by pi
    around any axis orthogonal to ``source``.
    """
    a = as_vector3(source, "source")
    b = as_vector3(target, "target")
    a /= np.linalg.norm(a)
    b /= np.linalg.norm(b)
    
    dot = float(np.clip(np.dot(a, b), -1.0, 1.0))
    if dot < -1.0 + 1e-12:
        axis = np.cross(a, [1.0, 0.0, 0.0])
        if np.linalg.norm(axis) < 1e-8:
            axis = np.cross(a, [0.0, 0.0, 1.0])
        axis /= np.linalg.norm(axis)
        return Rotation.from_rotvec(np.pi * axis)
    
    # Half-angle quaternion (x, y, z, w)
    quat = np.append(np.cross(a, b), 1.0 + dot)
    return Rotation.from_quat(quat / np.linalg.norm(quat))
