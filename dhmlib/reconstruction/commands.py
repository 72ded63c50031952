"""Commands that change the reconstruction state.

User actions are expressed as small immutable messages. The pipeline
owner applies them between frames with :func:`apply_command`, which
returns a new state and never mutates the old one.
"""

from dataclasses import dataclass, replace
from typing import Union

from ..core.optics import OpticalParameters, TuningParameters
from ..errors import FilterRequiredError
from ..optics.aperture import ApertureMask
from .pipeline import ReconstructionMode, ReconstructionState

__all__ = [
    "SetFilter",
    "SetTuning",
    "SetMode",
    "SetOptics",
    "SetLogScale",
    "StepFocus",
    "Command",
    "apply_command",
]

# Focus step of the +/- refocus controls (μm)
FOCUS_STEP = 10.0


@dataclass(frozen=True)
class SetFilter:
    """Commit a new spectral window; enables the filtered modes."""

    aperture: ApertureMask


@dataclass(frozen=True)
class SetTuning:
    """Replace refocus distance and tilt compensation."""

    tuning: TuningParameters


@dataclass(frozen=True)
class SetMode:
    """Select the displayed view."""

    mode: ReconstructionMode


@dataclass(frozen=True)
class SetOptics:
    """Replace the recording system parameters."""

    optics: OpticalParameters


@dataclass(frozen=True)
class SetLogScale:
    """Toggle logarithmic display of magnitudes."""

    enabled: bool


@dataclass(frozen=True)
class StepFocus:
    """Move the refocus distance by ``direction * step`` μm."""

    direction: int = 1
    step: float = FOCUS_STEP


Command = Union[SetFilter, SetTuning, SetMode, SetOptics, SetLogScale, StepFocus]


def apply_command(state: ReconstructionState, command: Command) -> ReconstructionState:
    """Return the state that results from ``command``.

    Raises:
        FilterRequiredError: ``SetMode`` to a filtered mode before any
            filter has been committed.
        TypeError: Unknown command.
    """
    if isinstance(command, SetFilter):
        return replace(state, aperture=command.aperture)
    if isinstance(command, SetTuning):
        return replace(state, tuning=command.tuning)
    if isinstance(command, SetMode):
        if command.mode not in state.enabled_modes():
            raise FilterRequiredError(
                f"{command.mode.value} reconstruction requires a spectral filter"
            )
        return replace(state, mode=command.mode)
    if isinstance(command, SetOptics):
        return replace(state, optics=command.optics)
    if isinstance(command, SetLogScale):
        return replace(state, log_scale=command.enabled)
    if isinstance(command, StepFocus):
        return replace(state, tuning=state.tuning.refocused(command.direction * command.step))
    raise TypeError(f"Unknown command: {command!r}")
