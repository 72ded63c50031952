"""Exception types raised by dhmlib.

Parameter validation raises plain ``ValueError`` from dataclass
``__post_init__``; the types below cover the failures that callers are
expected to tell apart.
"""

__all__ = [
    "DHMError",
    "ShapeMismatchError",
    "IllConditionedTiltError",
    "FilterRequiredError",
]


class DHMError(Exception):
    """Base class for dhmlib errors."""


class ShapeMismatchError(DHMError, ValueError):
    """Two arrays that must be combined do not share a shape."""


class IllConditionedTiltError(DHMError, ValueError):
    """Tilt tuning maps outside the domain of arcsin.

    Attributes:
        axis: "x" or "y".
        ratio: The offending value of f * wavelength / (L * pitch).
    """

    def __init__(self, axis: str, ratio: float):
        self.axis = axis
        self.ratio = ratio
        super().__init__(
            f"Tilt along {axis} is ill-conditioned: |f*wavelength/(L*pitch)| = "
            f"{abs(ratio):.4g} > 1"
        )


class FilterRequiredError(DHMError, RuntimeError):
    """A filtered reconstruction mode was requested before a filter was set."""
