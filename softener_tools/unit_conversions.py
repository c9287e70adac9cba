"""
Unit Conversion Module for the Water Softener Sizer

Centralizes field parsing and unit conversions to ensure consistency.
Provides functions for converting hardness between concentration units,
compensating hardness for iron and manganese, and converting bed area to
an equivalent vessel diameter.
"""

from enum import Enum
from typing import Any, Optional
import math
from .core_config import CONFIG


class HardnessUnit(str, Enum):
    """Supported hardness units"""
    PPM_AS_CACO3 = "ppm_as_caco3"  # mg/L (ppm) as CaCO3
    GPG = "gpg"  # Grains per gallon

    @property
    def label(self) -> str:
        return HARDNESS_UNIT_LABELS[self]


HARDNESS_UNIT_LABELS = {
    HardnessUnit.PPM_AS_CACO3: "mg/L (ppm) as CaCO₃",
    HardnessUnit.GPG: "grains per gallon (gpg)",
}

# Accepted spellings, compared case-insensitively
_HARDNESS_UNIT_ALIASES = {
    "ppm_as_caco3": HardnessUnit.PPM_AS_CACO3,
    "ppm": HardnessUnit.PPM_AS_CACO3,
    "mg/l": HardnessUnit.PPM_AS_CACO3,
    "mg/l (ppm) as caco₃": HardnessUnit.PPM_AS_CACO3,
    "mg/l (ppm) as caco3": HardnessUnit.PPM_AS_CACO3,
    "gpg": HardnessUnit.GPG,
    "grains per gallon": HardnessUnit.GPG,
    "grains per gallon (gpg)": HardnessUnit.GPG,
}


def parse_hardness_unit(value: Any) -> HardnessUnit:
    """
    Resolve a hardness unit from its code or form label.

    Args:
        value: HardnessUnit, code ('ppm_as_caco3', 'gpg') or form label

    Returns:
        Matching HardnessUnit

    Raises:
        ValueError: If the unit is not recognized
    """
    if isinstance(value, HardnessUnit):
        return value
    if isinstance(value, str):
        unit = _HARDNESS_UNIT_ALIASES.get(value.strip().lower())
        if unit is not None:
            return unit
    raise ValueError(
        f"Unknown hardness unit: {value!r}. Known units: {[u.value for u in HardnessUnit]}"
    )


def parse_input_number(value: Any) -> Optional[float]:
    """
    Parse a raw form field into a number.

    A blank string means "not entered" and is kept distinct from zero.
    Anything that does not parse to a finite number is also treated as
    not entered.

    Args:
        value: Raw field value (string, number or None)

    Returns:
        Parsed float, or None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        # float() accepts digit separators, form fields do not
        if text == "" or "_" in text:
            return None
        try:
            parsed = float(text)
        except ValueError:
            return None
    elif isinstance(value, (int, float)):
        parsed = float(value)
    else:
        return None

    return parsed if math.isfinite(parsed) else None


def is_positive(value: Optional[float]) -> bool:
    """True iff value is entered and strictly greater than zero."""
    return value is not None and value > 0


def hardness_to_gpg(value: float, unit: HardnessUnit) -> float:
    """
    Convert hardness to grains per gallon.

    Args:
        value: Hardness value in the given unit
        unit: Source unit

    Returns:
        Hardness in grains per gallon
    """
    if unit == HardnessUnit.PPM_AS_CACO3:
        return value / CONFIG.PPM_PER_GPG
    elif unit == HardnessUnit.GPG:
        return value
    else:
        raise ValueError(f"Unknown hardness unit: {unit}")


def gpg_to_ppm(gpg: float) -> float:
    """Convert grains per gallon to mg/L (ppm) as CaCO3."""
    return gpg * CONFIG.PPM_PER_GPG


def calculate_compensated_hardness(hardness_gpg: float, iron_ppm: float, manganese_ppm: float) -> float:
    """
    Add the iron and manganese load to hardness.

    Iron and manganese consume exchange capacity, so each ppm is counted
    as CONFIG.IRON_MANGANESE_HARDNESS_FACTOR grains per gallon of hardness.

    Args:
        hardness_gpg: Hardness in grains per gallon
        iron_ppm: Iron concentration in ppm
        manganese_ppm: Manganese concentration in ppm

    Returns:
        Compensated hardness in grains per gallon
    """
    return hardness_gpg + CONFIG.IRON_MANGANESE_HARDNESS_FACTOR * (iron_ppm + manganese_ppm)


def calculate_diameter_from_area(area: float) -> float:
    """
    Diameter of the circle with the given area (same length unit).

    Args:
        area: Cross-sectional area, e.g. ft²

    Returns:
        Diameter, e.g. ft
    """
    return 2 * math.sqrt(area / math.pi)


def feet_to_inches(feet: float) -> float:
    """Convert feet to inches."""
    return feet * CONFIG.INCHES_PER_FOOT


# Validation function
def validate_conversions():
    """
    Validate unit conversion functions.
    Called on module import to ensure correctness.
    """
    assert abs(hardness_to_gpg(171, HardnessUnit.PPM_AS_CACO3) - 10) < 1e-9, "ppm to gpg conversion error"
    assert hardness_to_gpg(12.5, HardnessUnit.GPG) == 12.5, "gpg passthrough error"
    assert abs(gpg_to_ppm(10) - 171) < 1e-9, "gpg to ppm conversion error"
    assert abs(calculate_diameter_from_area(math.pi) - 2) < 1e-9, "Diameter calculation error"
    assert parse_input_number("") is None and parse_input_number("0") == 0.0, "Field parsing error"


# Run validation on import
validate_conversions()
