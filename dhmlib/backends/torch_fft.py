"""PyTorch FFT engine.

Drop-in :class:`~dhmlib.utils.fourier.FFTEngine` that swaps the 2D
transform primitive for ``torch.fft`` and hands NumPy arrays back to the
pipeline. Transforms run on host tensors. Requires PyTorch, import
explicitly:

    >>> from dhmlib.backends.torch_fft import TorchFFT
    >>> from dhmlib.utils.fourier import SpectralTransform
    >>> st = SpectralTransform(TorchFFT())
"""

import numpy as np
import torch

__all__ = ["TorchFFT"]


class TorchFFT:
    """FFT engine backed by ``torch.fft``.

    Args:
        dtype: Complex dtype used for the transform. Default complex128.
        verbose: If True, print engine info on creation. Default False.
    """

    def __init__(self, dtype: torch.dtype = torch.complex128, verbose: bool = False):
        if not dtype.is_complex:
            raise ValueError(f"dtype must be complex, got {dtype}")
        self.dtype = dtype

        if verbose:
            print(f"Torch FFT engine: dtype={dtype}")

    def _to_tensor(self, field: np.ndarray) -> torch.Tensor:
        return torch.from_numpy(np.ascontiguousarray(field)).to(dtype=self.dtype)

    @staticmethod
    def _to_numpy(tensor: torch.Tensor) -> np.ndarray:
        return tensor.numpy().astype(np.complex128, copy=False)

    def fft2(self, field: np.ndarray) -> np.ndarray:
        """Unnormalized forward transform over the last two axes."""
        return self._to_numpy(torch.fft.fft2(self._to_tensor(field)))

    def ifft2(self, field: np.ndarray) -> np.ndarray:
        """Inverse transform normalized by 1/(M·N)."""
        return self._to_numpy(torch.fft.ifft2(self._to_tensor(field)))

    def __repr__(self) -> str:
        return f"TorchFFT(dtype={self.dtype})"
