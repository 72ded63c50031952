"""Live reconstruction of off-axis holograms.

Frames are reconstructed by Fourier filtering of one diffraction order,
optional refocusing by angular spectrum propagation and optional tilt
compensation of the phase.

Example:
    ```python
    from dhmlib import OpticalParameters
    from dhmlib.optics import ApertureMask
    from dhmlib.reconstruction import (
        LiveWorker, ReconstructionMode, ReconstructionSession, SetFilter, SetMode,
    )

    optics = OpticalParameters(wavelength=0.633, dx=3.45, dy=3.45, magnification=40)
    session = ReconstructionSession(optics)
    session.submit(SetFilter(ApertureMask.from_selection(300, 120, 96, 96)))
    session.submit(SetMode(ReconstructionMode.PHASE))

    worker = LiveWorker(session, camera.latest_frame)
    worker.start()
    ```
"""

from .pipeline import (
    ReconstructionMode,
    ReconstructionOutput,
    ReconstructionState,
    centered_spectrum,
    reconstruct_field,
    reconstruct,
)
from .commands import (
    FOCUS_STEP,
    SetFilter,
    SetTuning,
    SetMode,
    SetOptics,
    SetLogScale,
    StepFocus,
    Command,
    apply_command,
)
from .display import DisplayImage, log_scale, to_display
from .session import ReconstructionSession
from .live import LatestSlot, LiveWorker

__all__ = [
    # Pipeline
    "ReconstructionMode",
    "ReconstructionOutput",
    "ReconstructionState",
    "centered_spectrum",
    "reconstruct_field",
    "reconstruct",
    # Commands
    "FOCUS_STEP",
    "SetFilter",
    "SetTuning",
    "SetMode",
    "SetOptics",
    "SetLogScale",
    "StepFocus",
    "Command",
    "apply_command",
    # Display
    "DisplayImage",
    "log_scale",
    "to_display",
    # Live
    "ReconstructionSession",
    "LatestSlot",
    "LiveWorker",
]
