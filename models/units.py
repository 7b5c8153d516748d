"""Length unit conversion table."""

from __future__ import annotations

# Millimetres per unit
UNIT_TO_MM: dict[str, float] = {
    'mm': 1.0,
    'cm': 10.0,
    'm': 1000.0,
    'in': 25.4,
    'ft': 304.8,
    'yd': 914.4,
}


def convert_length(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a length between two supported units.

    Args:
        value: Length in ``from_unit``
        from_unit: Source unit key (see UNIT_TO_MM)
        to_unit: Target unit key

    Returns:
        Length in ``to_unit``

    Raises:
        ValueError: If either unit is not supported
    """
    try:
        return value * UNIT_TO_MM[from_unit] / UNIT_TO_MM[to_unit]
    except KeyError as e:
        raise ValueError(
            f"Unsupported unit {e.args[0]!r}. "
            f"Supported units: {', '.join(UNIT_TO_MM)}"
        ) from e
