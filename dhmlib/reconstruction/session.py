"""Ownership of the live reconstruction state.

A :class:`ReconstructionSession` owns one :class:`ReconstructionState`.
Other threads submit commands; the session applies them atomically
between frames, on the thread that runs :meth:`process`, so a frame is
always reconstructed against one consistent state.
"""

import logging
import queue
from dataclasses import replace
from typing import FrozenSet, List, Optional, Tuple

import numpy as np

from ..core.optics import OpticalParameters, TuningParameters
from ..errors import FilterRequiredError, IllConditionedTiltError
from ..optics.propagation import AngularSpectrumPropagator
from ..optics.tuning import tilt_angles
from ..utils.fourier import SpectralTransform
from .commands import Command, SetFilter, SetOptics, SetTuning, apply_command
from .display import DisplayImage, log_scale, to_display
from .pipeline import (
    Frame,
    ReconstructionMode,
    ReconstructionOutput,
    ReconstructionState,
    frame_samples,
    centered_spectrum,
    reconstruct,
)

__all__ = ["ReconstructionSession"]

logger = logging.getLogger(__name__)


class ReconstructionSession:
    """Pipeline owner for live reconstruction.

    Args:
        optics: Recording system parameters.
        tuning: Initial tuning. Defaults to no refocus and no tilt.
        mode: Initial view. Only SPECTRUM is available until a filter
            has been set.
        log_scale: Initial logarithmic display setting.
        transform: Spectral transform shared by every frame.

    Example:
        ```python
        session = ReconstructionSession(optics)
        session.submit(SetFilter(ApertureMask.from_selection(40, 40, 48, 48)))
        session.submit(SetMode(ReconstructionMode.PHASE))
        output = session.process(frame)
        ```
    """

    def __init__(
        self,
        optics: OpticalParameters,
        tuning: Optional[TuningParameters] = None,
        mode: ReconstructionMode = ReconstructionMode.SPECTRUM,
        log_scale: bool = True,
        transform: Optional[SpectralTransform] = None,
    ):
        if mode.needs_filter:
            raise FilterRequiredError(f"{mode.value} reconstruction requires a spectral filter")

        self._state = ReconstructionState(
            optics=optics,
            tuning=tuning if tuning is not None else TuningParameters(),
            mode=mode,
            log_scale=log_scale,
        )
        self.transform = transform if transform is not None else SpectralTransform()
        self._commands: "queue.Queue[Command]" = queue.Queue()
        self._propagator: Optional[AngularSpectrumPropagator] = None
        self._shape: Optional[Tuple[int, int]] = None

    @property
    def state(self) -> ReconstructionState:
        """Current state. Immutable; replaced as commands are applied."""
        return self._state

    def enabled_modes(self) -> FrozenSet[ReconstructionMode]:
        return self._state.enabled_modes()

    def submit(self, command: Command) -> None:
        """Queue a command. Safe to call from any thread."""
        self._commands.put(command)

    def _check_tuning(self, state: ReconstructionState) -> None:
        # Tilt angles can only be checked once the frame size is known
        if self._shape is None or not state.tuning.is_tilted:
            return
        optics = state.optics
        tilt_angles(
            state.tuning.fx, state.tuning.fy, optics.wavelength,
            self._shape, optics.dx, optics.dy,
        )

    def _check_aperture(self, state: ReconstructionState) -> None:
        if self._shape is not None and state.aperture is not None:
            state.aperture.validate(self._shape)

    def apply_pending(self) -> List[Command]:
        """Apply every queued command in order.

        Rejected commands are logged and leave the state unchanged.

        Returns:
            The commands that were applied.
        """
        applied = []
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                break

            try:
                new_state = apply_command(self._state, command)
                if isinstance(command, (SetTuning, SetOptics)):
                    self._check_tuning(new_state)
                elif isinstance(command, SetFilter):
                    self._check_aperture(new_state)
            except (FilterRequiredError, ValueError) as exc:
                logger.warning("Rejected %r: %s", command, exc)
                continue

            self._state = new_state
            applied.append(command)
            logger.debug("Applied %r", command)
        return applied

    def _get_propagator(self, shape: Tuple[int, int]) -> AngularSpectrumPropagator:
        optics = self._state.optics
        if self._propagator is None or not self._propagator.matches(
            shape, optics.wavelength, optics.dx, optics.dy
        ):
            self._propagator = AngularSpectrumPropagator(
                shape, optics.wavelength, optics.dx, optics.dy, self.transform
            )
        return self._propagator

    def filter_spectrum(self, frame: Frame) -> np.ndarray:
        """Log-scaled spectrum modulus on which a new filter is drawn."""
        return log_scale(np.abs(centered_spectrum(frame, self.transform)))

    def process(self, frame: Frame) -> ReconstructionOutput:
        """Apply pending commands, then reconstruct ``frame``.

        Commands are checked against the size of ``frame``. A committed
        filter that does not fit the frame is reported and the spectrum is
        shown instead. A tilt that is ill-conditioned for this frame is
        reported and the phase is shown without tilt compensation.
        """
        samples = frame_samples(frame)
        self._shape = samples.shape
        self.apply_pending()

        state = self._state
        if state.mode.needs_filter:
            try:
                self._check_aperture(state)
            except ValueError as exc:
                logger.warning("%s; showing the spectrum", exc)
                state = replace(state, mode=ReconstructionMode.SPECTRUM)
        propagator = self._get_propagator(samples.shape)

        try:
            return reconstruct(samples, state, self.transform, propagator)
        except IllConditionedTiltError as exc:
            logger.warning("%s; phase shown without tilt compensation", exc)
            untilted = replace(state, tuning=TuningParameters(z=state.tuning.z))
            return reconstruct(samples, untilted, self.transform, propagator)

    def render(self, output: ReconstructionOutput) -> DisplayImage:
        """8-bit rendering of ``output`` with the current log setting."""
        return to_display(output, log=self._state.log_scale)
