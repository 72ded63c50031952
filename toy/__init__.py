"""Synthetic test objects for digital holographic microscopy.

Example:
    >>> import numpy as np
    >>> from toy import phase_sphere, off_axis_hologram, add_poisson_noise
    >>> from dhmlib import OpticalParameters
    >>> from dhmlib.optics import ApertureMask
    >>> from dhmlib.reconstruction import ReconstructionMode, ReconstructionState, reconstruct
    >>>
    >>> # Bead-like phase object recorded off-axis
    >>> field = np.exp(1j * phase_sphere((256, 256), radius=50))
    >>> hologram, _ = off_axis_hologram(field, carrier=(0.25, 0.25))
    >>> hologram = add_poisson_noise(hologram, peak_photons=5000)
    >>>
    >>> # Filter the object order at (64, 64) and reconstruct the phase
    >>> state = ReconstructionState(
    ...     optics=OpticalParameters(wavelength=0.633, dx=3.45, dy=3.45),
    ...     mode=ReconstructionMode.PHASE,
    ...     aperture=ApertureMask.centered_on((64, 64), 40, (256, 256)),
    ... )
    >>> phi = reconstruct(hologram, state).data
"""

from .samples import (
    phase_sphere,
    phase_ramp,
    bar_target,
    off_axis_hologram,
    add_poisson_noise,
    add_gaussian_noise,
)

__all__ = [
    "phase_sphere",
    "phase_ramp",
    "bar_target",
    "off_axis_hologram",
    "add_poisson_noise",
    "add_gaussian_noise",
]
