"""
Sizing Report Generator

Turns a SizingResult into text for presentation collaborators:
- a catalog of the twelve steps (title, formula, explanation, display unit)
- per-step display lines (formatted value or blocking message)
- status notices (ready to calculate, reserve and service loading blocks)
- the plain-text summary used for clipboard export
- a JSON or Markdown report for the MCP server and CLI
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional, Union
import logging
import math

from .core_config import CONFIG
from .mcp_types import ResponseFormat, format_as_markdown
from .schemas import SizingInput, SizingResult, StepResult, TankDiameterResult

logger = logging.getLogger(__name__)

SUMMARY_TITLE = "Industrial Water Softener Sizer Summary"


@dataclass(frozen=True)
class StepDefinition:
    """Display metadata for one sizing step."""
    number: int
    title: str
    formula: str
    explanation: str
    unit: str
    decimals: int = CONFIG.DEFAULT_DECIMALS


STEP_DEFINITIONS = (
    StepDefinition(
        number=1,
        title="Step 1 - Convert Hardness to Grains per Gallon",
        formula=(
            "If hardness is entered as milligrams per liter as CaCO₃: hardness in grains per gallon = "
            "hardness value ÷ 17.1. If hardness is already in grains per gallon: hardness in grains "
            "per gallon = hardness value."
        ),
        explanation=(
            "This converts the hardness to grains per gallon so every later step is in one consistent "
            "unit. Softener capacity ratings are commonly expressed in grains, so grains per gallon "
            "makes the sizing math straightforward and comparable."
        ),
        unit="grains per gallon",
    ),
    StepDefinition(
        number=2,
        title="Step 2 - Determine Design Hardness (Compensated or Not)",
        formula=(
            "When compensation is off: design hardness = hardness in grains per gallon. When "
            "compensation is on: design hardness = hardness in grains per gallon + 4 × (iron in ppm "
            "+ manganese in ppm)."
        ),
        explanation=(
            "Iron and manganese can consume exchange capacity and cause the resin bed to exhaust "
            "earlier than hardness-only calculations predict. Compensation adds a conservative load "
            "so the design is less likely to leak hardness before regeneration."
        ),
        unit="grains per gallon",
    ),
    StepDefinition(
        number=3,
        title="Step 3 - Daily Hardness Load (grains per day)",
        formula="Daily hardness load = design hardness × gallons per day.",
        explanation=(
            "This value is the total ion-exchange workload the softener must handle every day. It "
            "links water chemistry and water volume into one operating demand number."
        ),
        unit="grains per day",
        decimals=0,
    ),
    StepDefinition(
        number=4,
        title="Step 4 - Required Capacity Per Run (before reserve)",
        formula="Required capacity per run = daily hardness load × target days between regenerations.",
        explanation=(
            "This is the theoretical capacity needed for the selected regeneration interval with no "
            "safety margin. It establishes the baseline run length requirement before adding reserve."
        ),
        unit="grains",
        decimals=0,
    ),
    StepDefinition(
        number=5,
        title="Step 5 - Add Reserve (design grains per run)",
        formula=(
            "Reserve fraction = reserve capacity percent ÷ 100. Design grains per run = required "
            "grains per run ÷ (1 − reserve fraction)."
        ),
        explanation=(
            "Reserve capacity keeps the bed from operating right at the edge of exhaustion. This "
            "buffer reduces the chance of surprise hardness breakthrough during flow spikes or "
            "schedule drift."
        ),
        unit="grains",
        decimals=0,
    ),
    StepDefinition(
        number=6,
        title="Step 6 - Determine Working Capacity per Cubic Foot of Resin",
        formula=(
            "When override is off: use the built-in capacity table for the selected salt dose. When "
            "override is on: use the manually entered capacity per cubic foot."
        ),
        explanation=(
            "Working capacity per cubic foot depends strongly on salt dose. Higher salt dose usually "
            "recovers more capacity, but it increases salt use and operating cost."
        ),
        unit="grains per cubic foot",
        decimals=0,
    ),
    StepDefinition(
        number=7,
        title="Step 7 - Required Resin Volume (cubic feet)",
        formula="Required resin volume = design grains per run ÷ working capacity per cubic foot.",
        explanation=(
            "This is the amount of resin required to carry the design grain load each run. More "
            "resin means more exchange sites available before exhaustion."
        ),
        unit="ft³",
    ),
    StepDefinition(
        number=8,
        title="Step 8 - Salt Required Per Regeneration (pounds)",
        formula="Salt required per regeneration = resin volume × salt dose.",
        explanation=(
            "This estimates how much salt each regeneration event will consume. It is a key "
            "operating metric for salt delivery planning and ongoing cost tracking."
        ),
        unit="pounds",
    ),
    StepDefinition(
        number=9,
        title="Step 9 - Estimated Brine Refill Water (gallons)",
        formula="Estimated brine refill water = salt required per regeneration ÷ salt dissolution factor.",
        explanation=(
            "This provides a practical estimate of refill water needed to dissolve regeneration salt. "
            "It helps size refill settings and confirms the brine system can support expected "
            "regeneration demand."
        ),
        unit="gallons",
    ),
    StepDefinition(
        number=10,
        title="Step 10 - Required Bed Area (square feet) from Peak Flow",
        formula="Required bed area = peak flow rate ÷ service loading rate.",
        explanation=(
            "This checks whether bed surface area is large enough for the expected peak service flow. "
            "Keeping loading rate in range lowers the risk of channeling and hardness leakage."
        ),
        unit="ft²",
    ),
    StepDefinition(
        number=11,
        title="Step 11 - Minimum Tank Diameter Estimate (inches)",
        formula=(
            "Tank diameter in feet = 2 × square root of (bed area ÷ pi). Tank diameter in inches = "
            "tank diameter in feet × 12."
        ),
        explanation=(
            "This converts required flow area into an equivalent circular vessel diameter. Treat it "
            "as a first-pass diameter before checking standard vessel sizes and bed depth limits."
        ),
        unit="feet",
    ),
    StepDefinition(
        number=12,
        title="Step 12 - Backwash Flow Requirement (gallons per minute)",
        formula="Backwash flow requirement = bed area × backwash rate.",
        explanation=(
            "Backwash reclassifies and cleans the resin bed after service. This flow requirement must "
            "be supported by the water source and drain system so cleaning is effective."
        ),
        unit="gallons per minute",
    ),
)


def get_step_definition(number: int) -> StepDefinition:
    """Step definition by 1-based number."""
    for definition in STEP_DEFINITIONS:
        if definition.number == number:
            return definition
    raise KeyError(f"No step definition for step {number}")


def format_number(value: float, decimals: int = CONFIG.DEFAULT_DECIMALS) -> str:
    """
    Format a number with thousands separators and at most `decimals` places.

    Trailing zeros are dropped (1500 -> "1,500", 17.5 -> "17.5") and halves
    round away from zero. Values that overflowed render as "∞" or "-∞".
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"

    with localcontext() as ctx:
        # Enough digits for any finite float
        ctx.prec = 400
        rounded = Decimal(value).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
        text = format(rounded, ",f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def format_result(value: Optional[float], unit: str, decimals: int = CONFIG.DEFAULT_DECIMALS) -> str:
    """Format a value with its unit, or the empty marker when there is no value."""
    if value is None:
        return CONFIG.EMPTY_RESULT
    return f"{format_number(value, decimals)} {unit}"


def render_step(step: StepResult) -> str:
    """
    Display line for one step: its blocking message, formatted value, or
    the empty marker.
    """
    if step.message:
        return step.message

    definition = get_step_definition(step.number)
    if isinstance(step, TankDiameterResult):
        if step.diameter_ft is None or step.diameter_in is None:
            return CONFIG.EMPTY_RESULT
        return (
            f"{format_number(step.diameter_ft, definition.decimals)} feet "
            f"({format_number(step.diameter_in, definition.decimals)} inches)"
        )
    return format_result(step.value, definition.unit, definition.decimals)


def status_notices(result: SizingResult) -> List[str]:
    """Notices shown above the results, in display order."""
    notices = []
    if result.required_input_missing:
        notices.append(f"{CONFIG.READY_TO_CALCULATE_TITLE}: {CONFIG.READY_TO_CALCULATE_MESSAGE}")
    if result.reserve_too_high:
        notices.append(CONFIG.RESERVE_BANNER_MESSAGE)
    if result.service_loading_error:
        notices.append(result.service_loading_error)
    return notices


def build_summary_text(result: SizingResult) -> str:
    """
    Plain-text summary of the key sizing values, one per line.

    Used as the clipboard export format.
    """
    lines = [
        SUMMARY_TITLE,
        f"Design hardness: {format_result(result.design_hardness_gpg.value, 'grains per gallon')}",
        f"Resin volume: {format_result(result.resin_ft3.value, 'ft³')}",
        f"Salt per regeneration: {format_result(result.salt_lbs_per_regen.value, 'pounds')}",
        f"Estimated brine refill water: {format_result(result.brine_water_gallons.value, 'gallons')}",
        f"Minimum tank diameter estimate: {format_result(result.tank_diameter.diameter_in, 'in')}",
        f"Required backwash flow: {format_result(result.backwash_flow_gpm.value, 'gallons per minute')}",
    ]
    return "\n".join(lines)


def _report_status(result: SizingResult) -> str:
    if result.required_input_missing:
        return "incomplete"
    if result.blocking_messages:
        return "blocked"
    return "complete"


def _steps_table_markdown(result: SizingResult) -> str:
    lines = [
        "## Sizing Steps",
        "",
        "| Step | Result |",
        "|------|--------|",
    ]
    for step in result.steps():
        definition = get_step_definition(step.number)
        lines.append(f"| {definition.title} | {render_step(step)} |")
    return "\n".join(lines)


def build_report(
    result: SizingResult,
    response_format: Union[ResponseFormat, str] = ResponseFormat.JSON,
    inputs: Optional[SizingInput] = None
) -> Union[Dict[str, Any], str]:
    """
    Build a sizing report.

    Args:
        result: Sizing result to report
        response_format: 'json' for a dictionary, 'markdown' for a document
        inputs: Input record to echo in the report (optional)

    Returns:
        Dictionary (JSON format) or markdown string
    """
    response_format = ResponseFormat(response_format)
    notices = status_notices(result)
    summary = build_summary_text(result)

    if response_format == ResponseFormat.MARKDOWN:
        sections = [f"# {SUMMARY_TITLE}", ""]
        if notices:
            sections.extend(f"> {notice}" for notice in notices)
            sections.append("")
        sections.append(_steps_table_markdown(result))
        sections.append("")
        sections.append("## Summary")
        sections.append("")
        sections.append("```")
        sections.append(summary)
        sections.append("```")
        if inputs is not None:
            sections.append("")
            sections.append(format_as_markdown(inputs.model_dump(mode="json"), title="Inputs", level=2))
        logger.debug(f"Built markdown report with {len(notices)} notices")
        return "\n".join(sections)

    report: Dict[str, Any] = {
        "status": _report_status(result),
        "notices": notices,
        "result": result.model_dump(mode="json"),
        "steps": [
            {
                "number": step.number,
                "title": get_step_definition(step.number).title,
                "display": render_step(step),
            }
            for step in result.steps()
        ],
        "summary_text": summary,
    }
    if inputs is not None:
        report["inputs"] = inputs.model_dump(mode="json")
    return report
