"""Optical operators: apertures, propagation and tilt compensation.

Example:
    >>> from dhmlib.optics import circular_pupil, angular_spectrum
    >>> pupil = circular_pupil((256, 256), radius=40)
    >>> refocused = angular_spectrum(field, 0.633, z=10.0, dx=3.45, dy=3.45)
"""

from .aperture import (
    circular_pupil,
    ApertureMask,
    recenter_offset,
    apply_and_recenter,
    find_sideband,
)
from .propagation import angular_spectrum, AngularSpectrumPropagator
from .tuning import tilt_angles, compensation_field, apply_compensation

__all__ = [
    # Apertures
    "circular_pupil",
    "ApertureMask",
    "recenter_offset",
    "apply_and_recenter",
    "find_sideband",
    # Propagation
    "angular_spectrum",
    "AngularSpectrumPropagator",
    # Tilt compensation
    "tilt_angles",
    "compensation_field",
    "apply_compensation",
]
