"""Pupils and spectral filter windows.

Two kinds of aperture appear in the DHM pipeline:

- the circular pupil of the objective, a hard low-pass filter applied in
  the back focal plane during hologram synthesis;
- the user-selected spectral window (rectangle with an optional
  per-pixel mask) that isolates one diffraction order of a recorded
  hologram before it is moved onto the optical axis.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from scipy import ndimage

__all__ = [
    "circular_pupil",
    "ApertureMask",
    "recenter_offset",
    "apply_and_recenter",
    "find_sideband",
]


def circular_pupil(shape: Tuple[int, int], radius: float) -> np.ndarray:
    """Create a binary circular pupil.

    Pixels whose distance to the array centre, ``(n - 1) / 2`` along each
    axis, is at most ``radius`` are set.

    Args:
        shape: Array shape as (ny, nx).
        radius: Pupil radius in pixels.

    Returns:
        Boolean array of shape (ny, nx).

    Example:
        >>> int(circular_pupil((4, 4), 1.0).sum())
        4
    """
    ny, nx = shape
    yy = np.arange(ny) - (ny - 1) / 2.0
    xx = np.arange(nx) - (nx - 1) / 2.0
    rr = np.sqrt(yy[:, np.newaxis] ** 2 + xx[np.newaxis, :] ** 2)
    return rr <= radius


@dataclass(frozen=True)
class ApertureMask:
    """Rectangular spectral window with an optional per-pixel mask.

    Attributes:
        x: Column of the rectangle's top-left corner.
        y: Row of the rectangle's top-left corner.
        width: Rectangle width (columns).
        height: Rectangle height (rows).
        mask: Optional array of shape (height, width). Boolean or integer
            masks select pixels (non-zero = keep); floating-point masks
            are graded weights. ``None`` keeps the whole rectangle.
    """

    x: int
    y: int
    width: int
    height: int
    mask: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Aperture size must be positive, got {self.width}x{self.height}"
            )
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Aperture origin must be non-negative, got ({self.x}, {self.y})")
        if self.mask is not None:
            mask = np.asarray(self.mask)
            if mask.shape != (self.height, self.width):
                raise ValueError(
                    f"Mask shape {mask.shape} does not match aperture "
                    f"({self.height}, {self.width})"
                )
            object.__setattr__(self, "mask", mask)

    @classmethod
    def from_selection(
        cls,
        x: int,
        y: int,
        width: int,
        height: int,
        mask: Optional[np.ndarray] = None,
    ) -> "ApertureMask":
        """Record a user-drawn selection on the centred spectrum."""
        return cls(int(x), int(y), int(width), int(height), mask)

    @classmethod
    def centered_on(
        cls, center: Tuple[int, int], radius: int, shape: Tuple[int, int]
    ) -> "ApertureMask":
        """Circular selection of ``radius`` pixels around a spectral peak.

        The bounding rectangle is ``2 * radius`` wide so that
        :func:`apply_and_recenter` lands the peak exactly on
        ``(ny // 2, nx // 2)`` for even frame sizes.

        Args:
            center: Peak position as (row, col).
            radius: Radius in pixels.
            shape: Shape (ny, nx) of the spectrum it will be applied to.
        """
        row, col = center
        size = 2 * int(radius)
        yy, xx = np.mgrid[0:size, 0:size]
        mask = (yy - radius) ** 2 + (xx - radius) ** 2 <= radius**2
        aperture = cls(int(col) - int(radius), int(row) - int(radius), size, size, mask)
        aperture.validate(shape)
        return aperture

    @property
    def is_graded(self) -> bool:
        """True for floating-point (weighting) masks."""
        return self.mask is not None and np.issubdtype(self.mask.dtype, np.floating)

    def validate(self, shape: Tuple[int, int]) -> None:
        """Check that the rectangle lies within a field of ``shape``."""
        ny, nx = shape
        if self.x + self.width > nx or self.y + self.height > ny:
            raise ValueError(
                f"Aperture ({self.x}, {self.y}, {self.width}, {self.height}) "
                f"exceeds field of shape {shape}"
            )

    def window(self) -> np.ndarray:
        """Weights applied inside the rectangle, shape (height, width)."""
        if self.mask is None:
            return np.ones((self.height, self.width))
        if self.is_graded:
            return self.mask.astype(np.float64)
        return (self.mask != 0).astype(np.float64)


def _half(n: int) -> int:
    # Integer division truncating toward zero
    return int(n / 2)


def recenter_offset(shape: Tuple[int, int], aperture: ApertureMask) -> Tuple[int, int]:
    """Offset (a, b) added to (column, row) indices when recentring.

    ``a = (M - width - 2x) / 2`` and ``b = (N - height - 2y) / 2`` with
    integer division truncating toward zero.
    """
    ny, nx = shape
    a = _half(nx - aperture.width - 2 * aperture.x)
    b = _half(ny - aperture.height - 2 * aperture.y)
    return a, b


def apply_and_recenter(spectrum: np.ndarray, aperture: ApertureMask) -> np.ndarray:
    """Copy the windowed part of a centred spectrum onto the optical axis.

    Samples inside the aperture rectangle are copied, weighted by the
    aperture mask, into a zero-filled array of the same size, displaced
    by :func:`recenter_offset` so that the rectangle ends up centred.
    Everything else is zero. Destination pixels falling outside the
    array are dropped.

    Args:
        spectrum: Centred complex spectrum, shape (ny, nx).
        aperture: Spectral window.

    Returns:
        New complex array of shape (ny, nx).
    """
    aperture.validate(spectrum.shape)
    ny, nx = spectrum.shape
    a, b = recenter_offset(spectrum.shape, aperture)

    block = spectrum[
        aperture.y : aperture.y + aperture.height,
        aperture.x : aperture.x + aperture.width,
    ] * aperture.window()

    # Destination rectangle, clipped to the array
    r0, c0 = aperture.y + b, aperture.x + a
    r_lo, r_hi = max(r0, 0), min(r0 + aperture.height, ny)
    c_lo, c_hi = max(c0, 0), min(c0 + aperture.width, nx)

    out = np.zeros(spectrum.shape, dtype=np.complex128)
    if r_lo < r_hi and c_lo < c_hi:
        out[r_lo:r_hi, c_lo:c_hi] = block[r_lo - r0 : r_hi - r0, c_lo - c0 : c_hi - c0]
    return out


def find_sideband(
    spectrum: np.ndarray, exclude_radius: float, smooth: float = 0.0
) -> Tuple[int, int]:
    """Locate the strongest off-axis order of a centred hologram spectrum.

    The zero order is excluded by ignoring a disc of ``exclude_radius``
    pixels around the centre. Real holograms have twin orders of equal
    magnitude; the first one in raster order is returned.

    Args:
        spectrum: Centred spectrum (complex or modulus), shape (ny, nx).
        exclude_radius: Radius of the ignored central disc (pixels).
        smooth: Gaussian blur sigma (pixels) applied to the modulus before
            the search, to suppress isolated noise spikes. 0 disables it.

    Returns:
        Peak position as (row, col).
    """
    ny, nx = np.shape(spectrum)
    magnitude = np.abs(spectrum).astype(np.float64)
    if smooth > 0:
        magnitude = ndimage.gaussian_filter(magnitude, smooth)
    yy = np.arange(ny)[:, np.newaxis] - ny // 2
    xx = np.arange(nx)[np.newaxis, :] - nx // 2
    magnitude[yy**2 + xx**2 <= exclude_radius**2] = 0.0
    row, col = np.unravel_index(np.argmax(magnitude), magnitude.shape)
    return int(row), int(col)
