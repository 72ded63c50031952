"""Linear phase (tilt) compensation.

A residual misalignment of the selected diffraction order leaves a
linear phase ramp on the reconstructed field. It is removed by
multiplying with a unit-amplitude field whose phase is

    φ(i, j) = k * (sin θx * (i - M//2) * dx + sin θy * (j - N//2) * dy) + φ0

with k = 2π/λ. The tilt angles come from spectral shifts given in
pixels: θ = asin(f * λ / (L * pitch)).
"""

from typing import Tuple

import numpy as np

from ..core.field import check_same_shape
from ..errors import IllConditionedTiltError

__all__ = ["tilt_angles", "compensation_field", "apply_compensation"]


def tilt_angles(
    fx: float,
    fy: float,
    wavelength: float,
    shape: Tuple[int, int],
    dx: float,
    dy: float,
) -> Tuple[float, float]:
    """Convert spectral shifts in pixels to tilt angles.

    Args:
        fx: Shift along x (pixels).
        fy: Shift along y (pixels).
        wavelength: Wavelength (μm).
        shape: Frame shape as (ny, nx).
        dx: Pitch along x (μm).
        dy: Pitch along y (μm).

    Returns:
        Tuple (theta_x, theta_y) in radians.

    Raises:
        IllConditionedTiltError: If |f * λ / (L * pitch)| > 1 on either axis.
    """
    ny, nx = shape
    ratio_x = fx * wavelength / (nx * dx)
    ratio_y = fy * wavelength / (ny * dy)
    if abs(ratio_x) > 1:
        raise IllConditionedTiltError("x", ratio_x)
    if abs(ratio_y) > 1:
        raise IllConditionedTiltError("y", ratio_y)
    return float(np.arcsin(ratio_x)), float(np.arcsin(ratio_y))


def compensation_field(
    shape: Tuple[int, int],
    wavelength: float,
    dx: float,
    dy: float,
    fx: float,
    fy: float,
    linear_phase: float = 0.0,
) -> np.ndarray:
    """Build the unit-amplitude tilt compensation field.

    Args:
        shape: Frame shape as (ny, nx).
        wavelength: Wavelength (μm).
        dx: Pitch along x (μm).
        dy: Pitch along y (μm).
        fx: Spectral shift along x (pixels).
        fy: Spectral shift along y (pixels).
        linear_phase: Constant phase offset (rad).

    Returns:
        Complex array of shape (ny, nx) with |value| == 1.

    Raises:
        IllConditionedTiltError: See :func:`tilt_angles`.
    """
    ny, nx = shape
    theta_x, theta_y = tilt_angles(fx, fy, wavelength, shape, dx, dy)
    k = 2 * np.pi / wavelength

    # Integer centre, as the recentring step places DC at (ny//2, nx//2)
    xx = (np.arange(nx) - nx // 2) * dx
    yy = (np.arange(ny) - ny // 2) * dy
    pha = k * (
        np.sin(theta_x) * xx[np.newaxis, :] + np.sin(theta_y) * yy[:, np.newaxis]
    )
    pha = pha + linear_phase
    return np.exp(1j * pha)


def apply_compensation(field: np.ndarray, compensation: np.ndarray) -> np.ndarray:
    """Pointwise product of a field and a compensation field."""
    check_same_shape(field, compensation)
    return field * compensation
