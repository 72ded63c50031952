"""Mathematical utilities for Fourier optics and unit handling."""

from .fourier import (
    FFTEngine,
    NumpyFFT,
    SpectralTransform,
    forward,
    inverse,
    center_shift,
    uncenter_shift,
    fourier_meshgrid,
)
from .units import LENGTH_UNITS, to_um, from_um

__all__ = [
    # Fourier utilities
    "FFTEngine",
    "NumpyFFT",
    "SpectralTransform",
    "forward",
    "inverse",
    "center_shift",
    "uncenter_shift",
    "fourier_meshgrid",
    # Units
    "LENGTH_UNITS",
    "to_um",
    "from_um",
]
