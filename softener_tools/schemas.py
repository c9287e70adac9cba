"""
Schemas for the Water Softener Sizer

Immutable pydantic models for the sizing input record (the form snapshot)
and the result record produced by the twelve-step sizing calculation.
Field names are snake_case; the camelCase names used by form-state
collaborators are accepted as aliases.
"""

from typing import Any, Dict, List, Mapping, Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .core_config import CONFIG
from .exceptions import InvalidSizingInputError, StepNotFoundError
from .unit_conversions import HardnessUnit, parse_hardness_unit, parse_input_number

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    "hardness_value",
    "iron_ppm",
    "manganese_ppm",
    "gallons_per_day",
    "days_between_regen",
    "reserve_percent",
    "override_capacity_value",
    "salt_dissolution_factor",
    "peak_flow_gpm",
    "service_loading_rate",
    "backwash_rate",
)


class SizingInput(BaseModel):
    """
    Input record for softener sizing.

    Numeric fields accept raw form strings. A blank or non-numeric string
    parses to None ("not entered"), which is distinct from zero. Defaults
    match the reset state of the sizing form.

    Example:
        {
            "hardness_value": "300",
            "hardness_units": "ppm_as_caco3",
            "gallons_per_day": "10000",
            "days_between_regen": "2",
            "peak_flow_gpm": "50"
        }
    """
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    hardness_value: Optional[float] = Field(None, description="Raw hardness value")
    hardness_units: HardnessUnit = Field(
        HardnessUnit(CONFIG.DEFAULT_HARDNESS_UNITS),
        description="Hardness units: ppm_as_caco3 or gpg"
    )
    use_compensation: bool = Field(False, description="Include iron and manganese in design hardness")
    iron_ppm: Optional[float] = Field(CONFIG.DEFAULT_IRON_PPM, description="Iron (Fe), ppm")
    manganese_ppm: Optional[float] = Field(CONFIG.DEFAULT_MANGANESE_PPM, description="Manganese (Mn), ppm")
    gallons_per_day: Optional[float] = Field(None, description="Total water use, gallons per day")
    days_between_regen: Optional[float] = Field(None, description="Target days between regenerations")
    reserve_percent: Optional[float] = Field(
        CONFIG.DEFAULT_RESERVE_PERCENT,
        description="Reserve capacity, percent of required capacity"
    )
    salt_dose: int = Field(CONFIG.DEFAULT_SALT_DOSE, description="Salt dose, lbs NaCl per ft³ of resin")
    override_capacity: bool = Field(False, description="Use a manual capacity instead of the salt dose table")
    override_capacity_value: Optional[float] = Field(None, description="Manual capacity, grains per ft³")
    salt_dissolution_factor: Optional[float] = Field(
        CONFIG.DEFAULT_SALT_DISSOLUTION_FACTOR,
        description="Pounds of salt dissolved per gallon of water"
    )
    peak_flow_gpm: Optional[float] = Field(None, description="Peak flow rate, gpm")
    service_loading_rate: Optional[float] = Field(
        CONFIG.DEFAULT_SERVICE_LOADING_RATE,
        description="Service loading rate, gpm/ft² of bed area"
    )
    backwash_rate: Optional[float] = Field(CONFIG.DEFAULT_BACKWASH_RATE, description="Backwash rate, gpm/ft²")

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _parse_number(cls, value: Any) -> Optional[float]:
        return parse_input_number(value)

    @field_validator("hardness_units", mode="before")
    @classmethod
    def _parse_units(cls, value: Any) -> HardnessUnit:
        return parse_hardness_unit(value)

    @field_validator("salt_dose")
    @classmethod
    def _check_salt_dose(cls, value: int) -> int:
        if value not in CONFIG.CAPACITY_BY_SALT_DOSE:
            raise ValueError(f"Salt dose must be one of {list(CONFIG.SALT_DOSES)} lbs/ft³")
        return value

    @classmethod
    def defaults(cls) -> "SizingInput":
        """Input record in the form's reset state."""
        return cls()

    def with_updates(self, **fields: Any) -> "SizingInput":
        """
        Return a new record with some fields replaced and re-parsed.

        Accepts snake_case or camelCase field names. The current record is
        left unchanged.
        """
        data = self.model_dump()
        for key, value in fields.items():
            data[resolve_field_name(key)] = value
        return type(self).model_validate(data)


def resolve_field_name(key: str) -> str:
    """snake_case field name for a field name or its camelCase alias."""
    if key in SizingInput.model_fields:
        return key
    for name, info in SizingInput.model_fields.items():
        if info.alias == key:
            return name
    # Let validation report it as an unknown field
    return key


def build_sizing_input(raw: Any) -> SizingInput:
    """
    Build an input record from raw field values.

    Args:
        raw: Mapping of field name (snake_case or camelCase) to raw value,
            or an existing SizingInput

    Returns:
        Validated SizingInput

    Raises:
        InvalidSizingInputError: If the mapping has unknown fields or
            invalid enumerated values
    """
    if isinstance(raw, SizingInput):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidSizingInputError(
            f"Sizing input must be an object, got {type(raw).__name__}",
            hint="Pass field values as a JSON object, e.g. {\"hardness_value\": \"300\"}"
        )

    try:
        return SizingInput.model_validate(dict(raw))
    except ValidationError as e:
        error = invalid_input_error(e, "Invalid sizing input")
        logger.warning(f"Rejected sizing input: {error.details}")
        raise error from e


def invalid_input_error(error: ValidationError, message: str, **kwargs: Any) -> InvalidSizingInputError:
    """Convert a pydantic ValidationError, splitting unknown fields from invalid ones."""
    invalid_fields: Dict[str, str] = {}
    unknown_fields: List[str] = []
    for err in error.errors():
        name = ".".join(str(part) for part in err["loc"])
        if err["type"] == "extra_forbidden":
            unknown_fields.append(name)
        else:
            invalid_fields[name] = err["msg"]
    return InvalidSizingInputError(
        message,
        invalid_fields=invalid_fields or None,
        unknown_fields=unknown_fields or None,
        **kwargs
    )


class StepResult(BaseModel):
    """Outcome of one sizing step: a value, a blocking message, or neither."""
    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1, description="Step number")
    value: Optional[float] = Field(None, description="Computed value, None when not computable")
    message: Optional[str] = Field(None, description="Blocking message, if any")

    @property
    def is_blocked(self) -> bool:
        return self.message is not None


class TankDiameterResult(StepResult):
    """Tank diameter step; value is the diameter in feet."""
    diameter_in: Optional[float] = Field(None, description="Diameter in inches")

    @property
    def diameter_ft(self) -> Optional[float]:
        return self.value


STEP_FIELDS = (
    "hardness_gpg",
    "design_hardness_gpg",
    "grains_per_day",
    "required_grains_per_run",
    "design_grains_per_run",
    "capacity_per_ft3",
    "resin_ft3",
    "salt_lbs_per_regen",
    "brine_water_gallons",
    "bed_area_ft2",
    "tank_diameter",
    "backwash_flow_gpm",
)


class SizingResult(BaseModel):
    """Result record for one sizing calculation."""
    model_config = ConfigDict(frozen=True)

    required_input_missing: bool = Field(..., description="A required input is blank or not positive")
    reserve_too_high: bool = Field(..., description="Reserve capacity is 100% or more")
    service_loading_error: Optional[str] = Field(None, description="Service loading rate error")

    hardness_gpg: StepResult = Field(..., description="Step 1: hardness, gpg")
    design_hardness_gpg: StepResult = Field(..., description="Step 2: design hardness, gpg")
    grains_per_day: StepResult = Field(..., description="Step 3: daily hardness load, grains/day")
    required_grains_per_run: StepResult = Field(..., description="Step 4: required capacity per run, grains")
    design_grains_per_run: StepResult = Field(..., description="Step 5: design grains per run with reserve")
    capacity_per_ft3: StepResult = Field(..., description="Step 6: working capacity, grains/ft³")
    resin_ft3: StepResult = Field(..., description="Step 7: required resin volume, ft³")
    salt_lbs_per_regen: StepResult = Field(..., description="Step 8: salt per regeneration, lbs")
    brine_water_gallons: StepResult = Field(..., description="Step 9: brine refill water, gallons")
    bed_area_ft2: StepResult = Field(..., description="Step 10: required bed area, ft²")
    tank_diameter: TankDiameterResult = Field(..., description="Step 11: minimum tank diameter")
    backwash_flow_gpm: StepResult = Field(..., description="Step 12: backwash flow, gpm")

    def steps(self) -> List[StepResult]:
        """All twelve step results in calculation order."""
        return [getattr(self, name) for name in STEP_FIELDS]

    def step(self, number: int) -> StepResult:
        """
        Get a step result by its 1-based number.

        Raises:
            StepNotFoundError: If number is outside 1..12
        """
        if isinstance(number, bool) or not isinstance(number, int) or not 1 <= number <= len(STEP_FIELDS):
            raise StepNotFoundError(number, len(STEP_FIELDS))
        return getattr(self, STEP_FIELDS[number - 1])

    @property
    def blocking_messages(self) -> Dict[int, str]:
        """Step number to message for every blocked step."""
        return {step.number: step.message for step in self.steps() if step.message is not None}
