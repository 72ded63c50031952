"""Fourier transform utilities.

The 2D transform primitive is supplied by an engine object. NumPy's
``numpy.fft`` is the default engine; a PyTorch engine lives in
:mod:`dhmlib.backends.torch_fft`.

Conventions used throughout the library:
    - ``forward`` is unnormalized (energy scales by M·N).
    - ``inverse(normalize=True)`` divides by M·N so that
      ``inverse(forward(x)) == x``.
    - ``center_shift`` moves the zero frequency to the array centre.
"""

from typing import Optional, Protocol, Tuple, Union

import numpy as np
from numpy.fft import fftfreq

__all__ = [
    "FFTEngine",
    "NumpyFFT",
    "SpectralTransform",
    "forward",
    "inverse",
    "center_shift",
    "uncenter_shift",
    "fourier_meshgrid",
]


class FFTEngine(Protocol):
    """Complex 2D FFT primitive over the last two axes."""

    def fft2(self, field: np.ndarray) -> np.ndarray:
        """Unnormalized forward transform."""
        ...

    def ifft2(self, field: np.ndarray) -> np.ndarray:
        """Inverse transform normalized by 1/(M·N)."""
        ...


class NumpyFFT:
    """FFT engine backed by ``numpy.fft``."""

    def fft2(self, field: np.ndarray) -> np.ndarray:
        return np.fft.fft2(field, axes=(-2, -1))

    def ifft2(self, field: np.ndarray) -> np.ndarray:
        return np.fft.ifft2(field, axes=(-2, -1))

    def __repr__(self) -> str:
        return "NumpyFFT()"


class SpectralTransform:
    """Forward/inverse 2D transforms bound to an FFT engine.

    Every method returns a new array; inputs are never modified.

    Args:
        engine: FFT primitive. Defaults to :class:`NumpyFFT`.

    Example:
        ```python
        st = SpectralTransform()
        spectrum = st.center_shift(st.forward(field))
        back = st.inverse(st.uncenter_shift(spectrum))
        ```
    """

    def __init__(self, engine: Optional[FFTEngine] = None):
        self.engine = engine if engine is not None else NumpyFFT()

    def forward(self, field: np.ndarray) -> np.ndarray:
        """Unnormalized 2D forward FFT."""
        return self.engine.fft2(np.asarray(field, dtype=np.complex128))

    def inverse(self, field: np.ndarray, normalize: bool = True) -> np.ndarray:
        """2D inverse FFT.

        Args:
            field: Complex spectrum, DC at corner.
            normalize: If True (default), divide by M·N so that
                ``inverse(forward(x)) == x``. If False, the result is
                scaled by M·N relative to that.
        """
        out = self.engine.ifft2(np.asarray(field, dtype=np.complex128))
        if not normalize:
            ny, nx = out.shape[-2:]
            out = out * (ny * nx)
        return out

    @staticmethod
    def center_shift(field: np.ndarray) -> np.ndarray:
        """Swap quadrants so that the zero frequency is at the centre."""
        return np.fft.fftshift(field, axes=(-2, -1))

    @staticmethod
    def uncenter_shift(field: np.ndarray) -> np.ndarray:
        """Exact inverse of :meth:`center_shift` for any size."""
        return np.fft.ifftshift(field, axes=(-2, -1))

    def __repr__(self) -> str:
        return f"SpectralTransform(engine={self.engine!r})"


_default = SpectralTransform()


def forward(field: np.ndarray) -> np.ndarray:
    """Unnormalized 2D forward FFT with the default engine."""
    return _default.forward(field)


def inverse(field: np.ndarray, normalize: bool = True) -> np.ndarray:
    """2D inverse FFT with the default engine."""
    return _default.inverse(field, normalize=normalize)


def center_shift(field: np.ndarray) -> np.ndarray:
    """Move the zero frequency to the array centre."""
    return SpectralTransform.center_shift(field)


def uncenter_shift(field: np.ndarray) -> np.ndarray:
    """Move the zero frequency from the centre back to the corner."""
    return SpectralTransform.uncenter_shift(field)


def fourier_meshgrid(
    shape: Tuple[int, int], spacing: Union[float, Tuple[float, float]] = 1.0
) -> Tuple[np.ndarray, np.ndarray]:
    """Spatial-frequency grids of a frame, DC at the corner.

    Args:
        shape: Frame shape (ny, nx).
        spacing: Sample pitch (dy, dx) in μm, or one value for both axes.

    Returns:
        Tuple (fy, fx) of read-only arrays of shape (ny, nx), in 1/μm.
    """
    ny, nx = shape
    if np.isscalar(spacing):
        dy = dx = float(spacing)
    else:
        dy, dx = spacing
    fy = fftfreq(ny, d=dy)[:, np.newaxis]
    fx = fftfreq(nx, d=dx)[np.newaxis, :]
    return np.broadcast_to(fy, (ny, nx)), np.broadcast_to(fx, (ny, nx))
