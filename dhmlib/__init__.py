"""dhmlib - Digital holographic microscopy simulation and reconstruction.

A library for synthesizing off-axis digital holograms through a
telecentric microscope model, and for reconstructing recorded holograms
live by Fourier filtering, angular spectrum refocusing and tilt
compensation.

The library is organized into these modules:

- **synthesis**: Hologram synthesis through objective, pupil and tube lens
- **reconstruction**: Per-frame reconstruction, commands and the live worker
- **optics**: Apertures, angular spectrum propagation, tilt compensation
- **utils**: Spectral transform and unit conversion
- **config**: Persisted user settings

Example:
    >>> import numpy as np
    >>> from dhmlib import OpticalParameters, TuningParameters
    >>> from dhmlib.optics import ApertureMask
    >>> from dhmlib.reconstruction import ReconstructionMode, ReconstructionState
    >>> from dhmlib.reconstruction import reconstruct
    >>>
    >>> # Recording system: 633nm, 3.45um camera pixels, 40x objective
    >>> optics = OpticalParameters(
    ...     wavelength=0.633,
    ...     dx=3.45,
    ...     dy=3.45,
    ...     magnification=40.0,
    ...     na=0.65,
    ... )
    >>>
    >>> # Select one diffraction order and refocus by 5um
    >>> state = ReconstructionState(
    ...     optics=optics,
    ...     tuning=TuningParameters(z=5.0),
    ...     mode=ReconstructionMode.PHASE,
    ...     aperture=ApertureMask.from_selection(300, 120, 96, 96),
    ... )
    >>> phase = reconstruct(hologram, state).data
"""

__version__ = "0.1.0"

# =============================================================================
# Core - Parameters, frames and complex-field helpers
# =============================================================================
from .core import (
    OpticalParameters,
    TuningParameters,
    HologramFrame,
    complex_field,
    polar_field,
    intensity,
    amplitude,
    phase,
)

# =============================================================================
# Errors
# =============================================================================
from .errors import (
    DHMError,
    ShapeMismatchError,
    IllConditionedTiltError,
    FilterRequiredError,
)

# =============================================================================
# Utils Module - Spectral transform and units
# =============================================================================
from .utils import (
    SpectralTransform,
    NumpyFFT,
    fourier_meshgrid,
    to_um,
    from_um,
)

# =============================================================================
# Optics Module - Apertures, propagation and tilt compensation
# =============================================================================
from .optics import (
    circular_pupil,
    ApertureMask,
    angular_spectrum,
    AngularSpectrumPropagator,
    tilt_angles,
    compensation_field,
)

# =============================================================================
# Torch backend - Import explicitly (requires PyTorch)
# =============================================================================
# Note: the PyTorch FFT engine requires PyTorch, import explicitly:
#   from dhmlib.backends.torch_fft import TorchFFT

__all__ = [
    # Version
    "__version__",
    # Core data structures
    "OpticalParameters",
    "TuningParameters",
    "HologramFrame",
    "complex_field",
    "polar_field",
    "intensity",
    "amplitude",
    "phase",
    # Errors
    "DHMError",
    "ShapeMismatchError",
    "IllConditionedTiltError",
    "FilterRequiredError",
    # Spectral transform and units
    "SpectralTransform",
    "NumpyFFT",
    "fourier_meshgrid",
    "to_um",
    "from_um",
    # Optics
    "circular_pupil",
    "ApertureMask",
    "angular_spectrum",
    "AngularSpectrumPropagator",
    "tilt_angles",
    "compensation_field",
]
