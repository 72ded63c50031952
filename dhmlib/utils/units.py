"""Length unit conversion.

All lengths are handled internally in micrometers. User-facing values
(wavelength in nm, focal lengths in mm, ...) are converted once at the
configuration boundary.
"""

__all__ = ["LENGTH_UNITS", "to_um", "from_um"]

# Micrometers per unit
LENGTH_UNITS = {
    "nm": 1e-3,
    "um": 1.0,
    "µm": 1.0,
    "mm": 1e3,
    "cm": 1e4,
    "m": 1e6,
}


def _factor(unit: str) -> float:
    try:
        return LENGTH_UNITS[unit]
    except KeyError:
        raise ValueError(
            f"Unknown length unit: {unit!r}. Use one of {sorted(LENGTH_UNITS)}."
        ) from None


def to_um(value: float, unit: str) -> float:
    """Convert ``value`` expressed in ``unit`` to micrometers.

    Example:
        >>> to_um(200, "mm")
        200000.0
    """
    return value * _factor(unit)


def from_um(value: float, unit: str) -> float:
    """Convert ``value`` in micrometers to ``unit``."""
    return value / _factor(unit)
