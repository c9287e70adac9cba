"""
Water Softener Sizing Calculator

Converts raw hardness and demand inputs into resin volume, salt demand,
brine refill water, and vessel/backwash sizing through twelve ordered steps.
Each step consumes only the outputs of earlier steps.

Invalid or missing inputs never raise. A step that cannot be computed
returns no value, optionally with a blocking message that explains what
is missing; dependent steps inherit the block.

Two gates are evaluated once per calculation:
- reserve too high (>= 100%) blocks steps 5 through 9
- a non-positive service loading rate blocks steps 10 through 12
"""

import logging
from typing import Optional

from .core_config import CONFIG
from .schemas import SizingInput, SizingResult, StepResult, TankDiameterResult
from .unit_conversions import (
    calculate_compensated_hardness,
    calculate_diameter_from_area,
    feet_to_inches,
    hardness_to_gpg,
    is_positive,
)

logger = logging.getLogger(__name__)


def _effective_ppm(value: Optional[float]) -> float:
    # Blank counts as 0, negatives clamp to 0
    return max(0.0, value if value is not None else 0.0)


def is_required_input_missing(inputs: SizingInput) -> bool:
    """True when any input needed for a complete sizing is blank or not positive."""
    return not (
        is_positive(inputs.hardness_value)
        and is_positive(inputs.gallons_per_day)
        and is_positive(inputs.days_between_regen)
        and is_positive(inputs.salt_dose)
        and is_positive(inputs.peak_flow_gpm)
        and is_positive(inputs.service_loading_rate)
    )


def is_reserve_too_high(inputs: SizingInput) -> bool:
    """True when reserve capacity is entered at or above the reserve limit."""
    return inputs.reserve_percent is not None and inputs.reserve_percent >= CONFIG.RESERVE_LIMIT_PERCENT


def get_service_loading_error(inputs: SizingInput) -> Optional[str]:
    """Error message when service loading rate is entered but not positive."""
    rate = inputs.service_loading_rate
    if rate is not None and rate <= 0:
        return CONFIG.SERVICE_LOADING_MESSAGE
    return None


def compute_sizing(inputs: SizingInput) -> SizingResult:
    """
    Run the twelve-step softener sizing calculation.

    Pure function: the same input record always yields an equal result
    record, and the input is not modified.

    Args:
        inputs: Parsed input record

    Returns:
        SizingResult with one StepResult per step and the global flags
    """
    required_input_missing = is_required_input_missing(inputs)
    reserve_too_high = is_reserve_too_high(inputs)
    service_loading_error = get_service_loading_error(inputs)
    reserve_block = CONFIG.RESERVE_BLOCK_MESSAGE if reserve_too_high else None

    if reserve_too_high:
        logger.info(f"Reserve capacity {inputs.reserve_percent}% blocks steps 5-9")
    if service_loading_error:
        logger.info(f"Service loading rate {inputs.service_loading_rate} blocks steps 10-12")

    # Step 1: hardness in grains per gallon
    step1 = None
    if is_positive(inputs.hardness_value):
        step1 = hardness_to_gpg(inputs.hardness_value, inputs.hardness_units)

    # Step 2: design hardness, optionally compensated for iron and manganese
    step2 = None
    if step1 is not None:
        if inputs.use_compensation:
            step2 = calculate_compensated_hardness(
                step1,
                _effective_ppm(inputs.iron_ppm),
                _effective_ppm(inputs.manganese_ppm),
            )
        else:
            step2 = step1

    # Step 3: daily hardness load
    step3 = None
    if step2 is not None and is_positive(inputs.gallons_per_day):
        step3 = step2 * inputs.gallons_per_day

    # Step 4: required grains per run before reserve
    step4 = None
    if step3 is not None and is_positive(inputs.days_between_regen):
        step4 = step3 * inputs.days_between_regen

    # Step 5: design grains per run with reserve
    step5 = None
    step5_message = reserve_block
    if reserve_block is None and step4 is not None:
        if inputs.reserve_percent is None:
            step5_message = CONFIG.RESERVE_MISSING_MESSAGE
        elif inputs.reserve_percent < 0:
            step5_message = CONFIG.RESERVE_NEGATIVE_MESSAGE
        else:
            step5 = step4 / (1 - inputs.reserve_percent / 100)

    # Step 6: working capacity per ft³ of resin
    step6 = None
    step6_message = reserve_block
    if reserve_block is None:
        if inputs.override_capacity:
            if is_positive(inputs.override_capacity_value):
                step6 = inputs.override_capacity_value
            else:
                step6_message = CONFIG.OVERRIDE_CAPACITY_MESSAGE
        else:
            step6 = CONFIG.get_working_capacity(inputs.salt_dose)

    # Step 7: required resin volume
    step7 = None
    step7_message = reserve_block
    if reserve_block is None:
        if step5 is not None and step6 is not None:
            step7 = step5 / step6
        else:
            step7_message = CONFIG.RESIN_INCOMPLETE_MESSAGE

    # Step 8: salt per regeneration
    step8 = None
    step8_message = reserve_block
    if reserve_block is None:
        if step7 is not None:
            step8 = step7 * inputs.salt_dose
        else:
            step8_message = CONFIG.SALT_INCOMPLETE_MESSAGE

    # Step 9: brine refill water
    step9 = None
    step9_message = reserve_block
    if reserve_block is None:
        if step8 is None:
            step9_message = CONFIG.BRINE_INCOMPLETE_MESSAGE
        elif is_positive(inputs.salt_dissolution_factor):
            step9 = step8 / inputs.salt_dissolution_factor
        else:
            step9_message = CONFIG.DISSOLUTION_FACTOR_MESSAGE

    # Step 10: bed area from peak flow (independent of the reserve gate)
    step10 = None
    step10_message = None
    if not is_positive(inputs.peak_flow_gpm):
        step10_message = CONFIG.PEAK_FLOW_MESSAGE
    elif not is_positive(inputs.service_loading_rate):
        step10_message = CONFIG.SERVICE_LOADING_MESSAGE
    else:
        step10 = inputs.peak_flow_gpm / inputs.service_loading_rate

    # Step 11: equivalent circular tank diameter
    diameter_ft = None
    diameter_in = None
    step11_message = step10_message
    if step10 is not None:
        diameter_ft = calculate_diameter_from_area(step10)
        diameter_in = feet_to_inches(diameter_ft)

    # Step 12: backwash flow
    step12 = None
    step12_message = step10_message
    if step10 is not None:
        if is_positive(inputs.backwash_rate):
            step12 = step10 * inputs.backwash_rate
        else:
            step12_message = CONFIG.BACKWASH_RATE_MESSAGE

    result = SizingResult(
        required_input_missing=required_input_missing,
        reserve_too_high=reserve_too_high,
        service_loading_error=service_loading_error,
        hardness_gpg=StepResult(number=1, value=step1),
        design_hardness_gpg=StepResult(number=2, value=step2),
        grains_per_day=StepResult(number=3, value=step3),
        required_grains_per_run=StepResult(number=4, value=step4),
        design_grains_per_run=StepResult(number=5, value=step5, message=step5_message),
        capacity_per_ft3=StepResult(number=6, value=step6, message=step6_message),
        resin_ft3=StepResult(number=7, value=step7, message=step7_message),
        salt_lbs_per_regen=StepResult(number=8, value=step8, message=step8_message),
        brine_water_gallons=StepResult(number=9, value=step9, message=step9_message),
        bed_area_ft2=StepResult(number=10, value=step10, message=step10_message),
        tank_diameter=TankDiameterResult(
            number=11, value=diameter_ft, diameter_in=diameter_in, message=step11_message
        ),
        backwash_flow_gpm=StepResult(number=12, value=step12, message=step12_message),
    )

    for step in result.steps():
        logger.debug(f"Step {step.number}: value={step.value}, message={step.message}")

    if step7 is not None:
        logger.info(
            f"Sizing complete: resin {step7:.2f} ft³, "
            f"salt {step8:.2f} lbs/regeneration"
        )

    return result
