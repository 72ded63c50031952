"""Synthetic sample objects and holograms for DHM experiments.

Simple analytic amplitude and phase objects that can be fed to
:class:`dhmlib.synthesis.HologramSynthesizer`, plus a direct off-axis
interference model for exercising reconstruction without running the
full optical train.

Array shapes follow the library convention (ny, nx).
"""

from typing import Optional, Tuple

import numpy as np


def _grid(shape: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
    """Pixel coordinates (y, x) measured from the array centre."""
    ny, nx = shape
    y = np.arange(ny) - (ny - 1) / 2
    x = np.arange(nx) - (nx - 1) / 2
    return np.meshgrid(y, x, indexing="ij")


def phase_sphere(
    shape: Tuple[int, int] = (256, 256),
    radius: float = 60.0,
    peak: float = np.pi / 2,
) -> np.ndarray:
    """Spherical-cap phase object, like a bead or a cell.

    Args:
        shape: (ny, nx) output shape.
        radius: Cap radius in pixels.
        peak: Phase at the centre (rad).

    Returns:
        Phase image (rad), zero outside the cap.

    Example:
        >>> phi = phase_sphere((64, 64), radius=20)
        >>> bool(phi.max() <= np.pi / 2)
        True
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    y, x = _grid(shape)
    rho2 = (x**2 + y**2) / radius**2
    return peak * np.sqrt(np.clip(1.0 - rho2, 0.0, None))


def phase_ramp(
    shape: Tuple[int, int] = (256, 256),
    cycles: Tuple[float, float] = (0.0, 1.0),
) -> np.ndarray:
    """Linear phase ramp with ``cycles`` = (along y, along x) periods per frame."""
    ny, nx = shape
    y, x = np.meshgrid(np.arange(ny), np.arange(nx), indexing="ij")
    return 2 * np.pi * (cycles[0] * y / ny + cycles[1] * x / nx)


def bar_target(
    shape: Tuple[int, int] = (256, 256),
    period: int = 16,
    duty: float = 0.5,
    vertical: bool = True,
) -> np.ndarray:
    """Binary bar pattern, 1 on the bars and 0 between them.

    Args:
        shape: (ny, nx) output shape.
        period: Bar period in pixels.
        duty: Fraction of each period covered by a bar.
        vertical: Bars run along y (vary with x) if True.
    """
    if period < 1:
        raise ValueError(f"period must be at least 1, got {period}")
    if not 0 < duty < 1:
        raise ValueError(f"duty must lie in (0, 1), got {duty}")

    ny, nx = shape
    n = nx if vertical else ny
    profile = ((np.arange(n) % period) < duty * period).astype(np.float64)
    if vertical:
        return np.broadcast_to(profile, shape).copy()
    return np.broadcast_to(profile[:, None], shape).copy()


def off_axis_hologram(
    object_field: np.ndarray,
    carrier: Tuple[float, float] = (0.25, 0.25),
    reference_amplitude: Optional[float] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Interfere a field with a tilted plane wave.

    The reference is ``A exp(2πi (ky y + kx x))`` with ``carrier`` =
    (ky, kx) in cycles per pixel. The order carrying the object field
    (``O`` times the conjugate reference) sits ``ky * ny`` rows and
    ``kx * nx`` columns before the centre of the centred spectrum.

    Args:
        object_field: Complex object field, shape (ny, nx).
        carrier: Reference spatial frequency (cycles/px).
        reference_amplitude: Defaults to the mean object amplitude.

    Returns:
        (hologram, reference): the real intensity pattern and the
        reference wave that produced it.

    Example:
        >>> field = np.exp(1j * phase_sphere((128, 128), radius=30))
        >>> hologram, _ = off_axis_hologram(field, carrier=(0.25, 0.25))
    """
    ny, nx = object_field.shape
    y, x = np.meshgrid(np.arange(ny), np.arange(nx), indexing="ij")
    if reference_amplitude is None:
        reference_amplitude = float(np.abs(object_field).mean())

    reference = reference_amplitude * np.exp(
        2j * np.pi * (carrier[0] * y + carrier[1] * x)
    )
    hologram = np.abs(object_field + reference) ** 2
    return hologram, reference


def add_poisson_noise(
    hologram: np.ndarray,
    peak_photons: float = 1000.0,
    rng: np.random.Generator = None,
) -> np.ndarray:
    """Shot noise on an intensity image.

    Scales the image so its peak equals ``peak_photons``, draws Poisson
    counts, then scales back to the original units.

    Args:
        hologram: Non-negative intensity image.
        peak_photons: Photon count at the peak. Higher values = less
            relative noise.
        rng: NumPy random generator. If None, uses default.
    """
    if rng is None:
        rng = np.random.default_rng()

    clipped = np.maximum(hologram, 0.0)
    peak = clipped.max()
    if peak <= 0:
        return hologram.copy()

    scale = peak_photons / peak
    return rng.poisson(clipped * scale).astype(np.float64) / scale


def add_gaussian_noise(
    hologram: np.ndarray,
    noise_level: float = 0.01,
    rng: np.random.Generator = None,
) -> np.ndarray:
    """Camera read noise with standard deviation ``noise_level * max``.

    Args:
        hologram: Intensity image.
        noise_level: Noise standard deviation relative to the image peak.
        rng: NumPy random generator. If None, uses default.
    """
    if rng is None:
        rng = np.random.default_rng()

    peak = np.abs(hologram).max()
    if peak <= 0:
        return hologram.copy()
    return hologram + noise_level * peak * rng.standard_normal(hologram.shape)
