"""Complex field helpers.

A complex field is a plain 2D ``numpy.ndarray`` of dtype ``complex128``
with shape ``(ny, nx)``. The helpers here build fields from pairs of
real planes and extract the scalar views used by every stage.
"""

from typing import Optional

import numpy as np

from ..errors import ShapeMismatchError

__all__ = [
    "check_same_shape",
    "as_frame",
    "complex_field",
    "polar_field",
    "intensity",
    "amplitude",
    "phase",
]


def check_same_shape(a: np.ndarray, b: np.ndarray) -> None:
    """Raise ShapeMismatchError unless ``a`` and ``b`` share a shape."""
    if np.shape(a) != np.shape(b):
        raise ShapeMismatchError(
            f"Arrays must have the same dimensions, got {np.shape(a)} and {np.shape(b)}"
        )


def as_frame(samples: np.ndarray) -> np.ndarray:
    """Elevate a 2D sample array (8/16/32-bit or float) to float64.

    Args:
        samples: Raw frame, shape (ny, nx).

    Returns:
        Float64 array. The input is never modified.
    """
    frame = np.asarray(samples)
    if frame.ndim != 2:
        raise ValueError(f"Frames must be 2D, got shape {frame.shape}")
    if np.iscomplexobj(frame):
        raise ValueError("Frames must be real-valued")
    return frame.astype(np.float64)


def complex_field(
    real: Optional[np.ndarray], imag: Optional[np.ndarray] = None
) -> np.ndarray:
    """Build a complex field from real and imaginary planes.

    A missing plane is taken as zero. At least one plane is required.
    """
    if real is None and imag is None:
        raise ValueError("At least one of real or imag must be given")
    if real is not None and imag is not None:
        check_same_shape(real, imag)

    shape = np.shape(real if real is not None else imag)
    field = np.zeros(shape, dtype=np.complex128)
    if real is not None:
        field.real = real
    if imag is not None:
        field.imag = imag
    return field


def polar_field(amp: np.ndarray, pha: np.ndarray) -> np.ndarray:
    """Build a complex field ``amp * exp(i * pha)``."""
    check_same_shape(amp, pha)
    return np.asarray(amp, dtype=np.float64) * np.exp(
        1j * np.asarray(pha, dtype=np.float64)
    )


def intensity(field: np.ndarray) -> np.ndarray:
    """Squared modulus |U|²."""
    return field.real**2 + field.imag**2


def amplitude(field: np.ndarray) -> np.ndarray:
    """Modulus |U|."""
    return np.abs(field)


def phase(field: np.ndarray) -> np.ndarray:
    """Argument of U in (-π, π]."""
    return np.angle(field)
