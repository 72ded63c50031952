"""Core data structures for DHM computations."""

from .optics import OpticalParameters, TuningParameters
from .frames import HologramFrame
from .field import (
    check_same_shape,
    as_frame,
    complex_field,
    polar_field,
    intensity,
    amplitude,
    phase,
)

__all__ = [
    # Parameters
    "OpticalParameters",
    "TuningParameters",
    # Frames
    "HologramFrame",
    # Complex fields
    "check_same_shape",
    "as_frame",
    "complex_field",
    "polar_field",
    "intensity",
    "amplitude",
    "phase",
]
