"""Construction of the input object field."""

from typing import Optional, Tuple, Union

import numpy as np

from ..core.field import check_same_shape, complex_field, polar_field
from .parameters import IlluminationParameters, InputKind, InputParameters

__all__ = ["rescale", "build_input_field"]


def rescale(values: np.ndarray, bounds: Tuple[float, float]) -> np.ndarray:
    """Linearly map ``values`` from their own [min, max] onto ``bounds``.

    A constant array maps to the lower bound.
    """
    lo, hi = bounds
    values = np.asarray(values, dtype=np.float64)
    vmin = values.min()
    delta = values.max() - vmin

    scaled = values - vmin
    if delta != 0:
        scaled = scaled / delta
    return scaled * (hi - lo) + lo


def build_input_field(
    kind: InputKind,
    first: Optional[np.ndarray],
    second: Optional[np.ndarray],
    input_params: InputParameters,
    illumination: IlluminationParameters,
    rng: Union[np.random.Generator, int, None] = None,
) -> np.ndarray:
    """Build the complex object field from two real planes.

    Args:
        kind: How to interpret the planes.
            - REAL_IMAGINARY: ``first`` is the real part, ``second`` the
              imaginary part. Missing planes are zero.
            - AMPLITUDE_PHASE: ``first`` is rescaled into
              ``input_params.amp_range`` and ``second`` into
              ``input_params.phase_range``. A missing amplitude plane is
              taken as the maximum amplitude, a missing phase plane as 0.
              Gaussian surface-roughness noise is added to the phase.
        first: First plane, shape (ny, nx), or None.
        second: Second plane, shape (ny, nx), or None.
        input_params: Rescaling ranges.
        illumination: Wavelength and roughness for the noise model.
        rng: Random generator or seed for the roughness noise.

    Returns:
        Complex field of shape (ny, nx).

    Physics:
        h ~ Normal(0, σ), σ = (roughness / 2) * λ / 3
        φ_noise = 2π h / λ
    """
    if first is None and second is None:
        raise ValueError("At least one input plane is required")
    if first is not None and second is not None:
        check_same_shape(first, second)

    if kind is InputKind.REAL_IMAGINARY:
        return complex_field(first, second)

    shape = np.shape(first if first is not None else second)

    if first is not None:
        amp = rescale(first, input_params.amp_range)
    else:
        amp = np.full(shape, input_params.amp_range[1], dtype=np.float64)

    if second is not None:
        pha = rescale(second, input_params.phase_range)
    else:
        pha = np.zeros(shape, dtype=np.float64)

    sigma = illumination.roughness_sigma
    if sigma > 0:
        rng = np.random.default_rng(rng)
        height_error = rng.normal(0.0, sigma, size=shape)
        pha = pha + height_error * 2 * np.pi / illumination.wavelength

    return polar_field(amp, pha)
