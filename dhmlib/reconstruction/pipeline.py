"""Per-frame off-axis hologram reconstruction.

For every frame:

1. the real frame is elevated to float and turned into a complex field;
2. its spectrum is computed and centred;
3. unless the spectrum itself is requested, the committed spectral
   window is applied and moved onto the optical axis, transformed back
   and propagated by the refocus distance;
4. for phase output, an optional tilt compensation is applied;
5. the requested scalar view is extracted.

Numerical results are never rescaled here; display remapping lives in
:mod:`dhmlib.reconstruction.display`.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple, Union

import numpy as np

from ..core.field import amplitude, as_frame, complex_field, intensity, phase
from ..core.frames import HologramFrame
from ..core.optics import OpticalParameters, TuningParameters
from ..optics.aperture import ApertureMask, apply_and_recenter
from ..optics.propagation import AngularSpectrumPropagator
from ..optics.tuning import apply_compensation, compensation_field
from ..utils.fourier import SpectralTransform

__all__ = [
    "ReconstructionMode",
    "ReconstructionOutput",
    "ReconstructionState",
    "centered_spectrum",
    "reconstruct_field",
    "reconstruct",
]

logger = logging.getLogger(__name__)

Frame = Union[np.ndarray, HologramFrame]


class ReconstructionMode(enum.Enum):
    """Displayable reconstruction outputs."""

    SPECTRUM = "spectrum"
    INTENSITY = "intensity"
    AMPLITUDE = "amplitude"
    PHASE = "phase"

    @property
    def needs_filter(self) -> bool:
        """True for modes that require a committed spectral window."""
        return self is not ReconstructionMode.SPECTRUM

    @property
    def unit(self) -> str:
        return "rad" if self is ReconstructionMode.PHASE else "adim"


@dataclass(frozen=True)
class ReconstructionOutput:
    """One reconstructed view of a frame.

    Attributes:
        kind: Which view this is.
        data: Real array, shape (ny, nx).
        spacing: Sample-plane pitch as (dy, dx) in μm, or None for the
            spectrum, which has no spatial calibration.
        unit: Value unit: "rad" for phase, "adim" otherwise.
    """

    kind: ReconstructionMode
    data: np.ndarray = field(repr=False)
    spacing: Optional[Tuple[float, float]]
    unit: str


@dataclass(frozen=True)
class ReconstructionState:
    """Everything a frame reconstruction depends on.

    Replaced wholesale when the user commits new settings; see
    :mod:`dhmlib.reconstruction.commands`.

    Attributes:
        optics: Recording system parameters.
        tuning: Refocus distance and tilt compensation.
        mode: Requested output view.
        aperture: Committed spectral window, or None before the first
            filter has been set.
        log_scale: Logarithmic display of magnitudes.
    """

    optics: OpticalParameters
    tuning: TuningParameters = TuningParameters()
    mode: ReconstructionMode = ReconstructionMode.SPECTRUM
    aperture: Optional[ApertureMask] = None
    log_scale: bool = True

    @property
    def filtered(self) -> bool:
        """True once a spectral window has been committed."""
        return self.aperture is not None

    def enabled_modes(self) -> FrozenSet[ReconstructionMode]:
        """Modes that can currently be selected."""
        if self.filtered:
            return frozenset(ReconstructionMode)
        return frozenset({ReconstructionMode.SPECTRUM})


def frame_samples(frame: Frame) -> np.ndarray:
    if isinstance(frame, HologramFrame):
        frame = frame.data
    return as_frame(frame)


def centered_spectrum(
    frame: Frame, transform: Optional[SpectralTransform] = None
) -> np.ndarray:
    """Centred complex spectrum of a real frame."""
    st = transform if transform is not None else SpectralTransform()
    return st.center_shift(st.forward(complex_field(frame_samples(frame))))


def reconstruct_field(
    spectrum: np.ndarray,
    aperture: ApertureMask,
    optics: OpticalParameters,
    tuning: TuningParameters,
    transform: Optional[SpectralTransform] = None,
    propagator: Optional[AngularSpectrumPropagator] = None,
) -> np.ndarray:
    """Filter, recentre, back-transform and propagate a centred spectrum.

    Args:
        spectrum: Centred spectrum of the hologram. Not modified.
        aperture: Spectral window selecting one diffraction order.
        optics: Recording system parameters (wavelength and frame pitch).
        tuning: Only ``tuning.z`` is used here.
        transform: Spectral transform. Defaults to NumPy FFT.
        propagator: Cached propagator; rebuilt if it does not match.

    Returns:
        Complex object field at distance ``tuning.z``.
    """
    st = transform if transform is not None else SpectralTransform()
    shape = spectrum.shape

    filtered = apply_and_recenter(spectrum, aperture)
    object_field = st.inverse(st.uncenter_shift(filtered), normalize=True)

    if propagator is None or not propagator.matches(
        shape, optics.wavelength, optics.dx, optics.dy
    ):
        propagator = AngularSpectrumPropagator(
            shape, optics.wavelength, optics.dx, optics.dy, st
        )
    return propagator(object_field, tuning.z)


def reconstruct(
    frame: Frame,
    state: ReconstructionState,
    transform: Optional[SpectralTransform] = None,
    propagator: Optional[AngularSpectrumPropagator] = None,
) -> ReconstructionOutput:
    """Reconstruct one frame.

    Filtered modes requested before any filter has been committed fall
    back to the spectrum view and log a warning.

    Args:
        frame: Real hologram, shape (ny, nx), any numeric dtype.
        state: Reconstruction state.
        transform: Spectral transform. Defaults to NumPy FFT.
        propagator: Optional cached propagator for this frame geometry.

    Returns:
        ReconstructionOutput of the requested (or fallback) kind.

    Raises:
        IllConditionedTiltError: Phase mode with tilt tuning that cannot
            be converted to angles for this frame.

    Example:
        >>> state = ReconstructionState(
        ...     optics=OpticalParameters(wavelength=0.633, dx=3.45, dy=3.45),
        ...     mode=ReconstructionMode.PHASE,
        ...     aperture=ApertureMask.from_selection(100, 100, 64, 64),
        ... )
        >>> out = reconstruct(hologram, state)
    """
    st = transform if transform is not None else SpectralTransform()
    spectrum = centered_spectrum(frame, st)

    mode = state.mode
    if mode.needs_filter and state.aperture is None:
        logger.warning("No filter selected; showing the spectrum")
        mode = ReconstructionMode.SPECTRUM

    if mode is ReconstructionMode.SPECTRUM:
        return ReconstructionOutput(mode, amplitude(spectrum), None, mode.unit)

    optics, tuning = state.optics, state.tuning
    object_field = reconstruct_field(spectrum, state.aperture, optics, tuning, st, propagator)

    if mode is ReconstructionMode.PHASE:
        if tuning.is_tilted:
            compensation = compensation_field(
                object_field.shape,
                optics.wavelength,
                optics.dx,
                optics.dy,
                tuning.fx,
                tuning.fy,
                tuning.linear_phase,
            )
            object_field = apply_compensation(object_field, compensation)
        data = phase(object_field)
    elif mode is ReconstructionMode.INTENSITY:
        data = intensity(object_field)
    else:
        data = amplitude(object_field)

    return ReconstructionOutput(mode, data, optics.image_spacing, mode.unit)
