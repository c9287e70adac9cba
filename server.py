#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Water Softener Sizer MCP Server

An STDIO MCP server for industrial water softener sizing.
Provides tools that turn raw form field values into the twelve-step sizing
result (resin volume, salt and brine demand, bed area, tank diameter and
backwash flow), plus the form defaults and the step catalog.
"""

import json
import logging
import sys
import time
from typing import Any, Dict, Union

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import ValidationError

from softener_tools.core_config import CONFIG
from softener_tools.exceptions import SofteningDesignError
from softener_tools.mcp_types import SizingToolInput
from softener_tools.schemas import SizingInput, build_sizing_input, invalid_input_error
from softener_tools.sizing_calculator import compute_sizing
from softener_tools.sizing_report import STEP_DEFINITIONS, build_report
from softener_tools.unit_conversions import HardnessUnit

logger = logging.getLogger(__name__)

# Configuration constants
MAX_REQUEST_SIZE = 1024 * 1024  # 1MB max request size

EXAMPLE_STRUCTURE = {
    "sizing_input": {
        "inputs": {
            "hardness_value": "300",
            "hardness_units": "ppm_as_caco3",
            "gallons_per_day": "10000",
            "days_between_regen": "2",
            "reserve_percent": "15",
            "salt_dose": 8,
            "peak_flow_gpm": "50"
        },
        "response_format": "json"
    }
}

# Create FastMCP instance
mcp = FastMCP("Water Softener Sizer")


def configure_logging():
    """
    Configure logging for MCP - CRITICAL for protocol integrity.

    Detailed logs go to a file; only warnings and errors go to stderr to
    avoid flooding the STDIO pipe.
    """
    file_handler = logging.FileHandler(CONFIG.get_log_file())
    file_handler.setLevel(CONFIG.get_log_level())

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=CONFIG.get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[file_handler, stderr_handler]
    )


def size_water_softener_impl(sizing_input: Union[Dict[str, Any], str]) -> Union[Dict[str, Any], str]:
    """Run the sizing calculation for a tool request. Errors are returned, not raised."""
    start_time = time.time()

    # Handle both string and object inputs
    if isinstance(sizing_input, str):
        try:
            sizing_input = json.loads(sizing_input)
        except json.JSONDecodeError:
            return {
                "error": "Invalid JSON input",
                "details": "Input must be a valid JSON object or dict",
                "example_structure": EXAMPLE_STRUCTURE
            }

    input_size = len(json.dumps(sizing_input, default=str))
    if input_size > MAX_REQUEST_SIZE:
        return {
            "error": "Request too large",
            "details": f"Request size {input_size} bytes exceeds maximum {MAX_REQUEST_SIZE} bytes",
            "hint": "Please reduce the size of your request"
        }

    try:
        request = SizingToolInput.model_validate(sizing_input)
        inputs = build_sizing_input(request.inputs)
    except ValidationError as e:
        logger.warning(f"Rejected sizing request: {e}")
        error = invalid_input_error(
            e,
            "Invalid sizing request",
            hint="Field values go inside 'inputs'; response_format is 'json' or 'markdown'"
        )
        return {**error.to_dict(), "example_structure": EXAMPLE_STRUCTURE}
    except SofteningDesignError as e:
        logger.warning(f"Sizing request failed: {e}")
        return {**e.to_dict(), "example_structure": EXAMPLE_STRUCTURE}

    result = compute_sizing(inputs)
    output = build_report(result, request.response_format, inputs=inputs)

    elapsed = time.time() - start_time
    logger.info(f"size_water_softener completed in {elapsed:.3f} seconds")
    return output


def get_sizing_defaults_impl() -> Dict[str, Any]:
    """Form defaults and the enumerated choices for the sizing inputs."""
    return {
        "defaults": SizingInput.defaults().model_dump(mode="json"),
        "hardness_units": [unit.value for unit in HardnessUnit],
        "hardness_unit_labels": {unit.value: unit.label for unit in HardnessUnit},
        "salt_doses": list(CONFIG.SALT_DOSES),
        "capacity_by_salt_dose": {str(dose): CONFIG.CAPACITY_BY_SALT_DOSE[dose] for dose in CONFIG.SALT_DOSES},
    }


def describe_sizing_steps_impl() -> Dict[str, Any]:
    """Catalog of the twelve sizing steps."""
    return {
        "steps": [
            {
                "number": d.number,
                "title": d.title,
                "formula": d.formula,
                "explanation": d.explanation,
                "unit": d.unit,
            }
            for d in STEP_DEFINITIONS
        ]
    }


@mcp.tool(
    description="""Size an industrial water softener.

    Runs the twelve-step sizing calculation:
    1. Hardness to grains per gallon (ppm as CaCO3 / 17.1)
    2. Design hardness (optionally + 4 x (Fe + Mn) ppm)
    3. Daily hardness load (grains/day)
    4. Required grains per run
    5. Design grains per run with reserve
    6. Working capacity per ft³ (salt dose table or override)
    7. Resin volume (ft³)
    8. Salt per regeneration (lbs)
    9. Brine refill water (gallons)
    10. Bed area from peak flow (ft²)
    11. Minimum tank diameter (ft, in)
    12. Backwash flow (gpm)

    Input parameter: sizing_input (object with 'inputs' and optional 'response_format')

    Example:
    {
      "inputs": {
        "hardness_value": "300",
        "hardness_units": "ppm_as_caco3",
        "gallons_per_day": "10000",
        "days_between_regen": "2",
        "peak_flow_gpm": "50"
      },
      "response_format": "json"
    }

    Field values may be strings. Blank or non-numeric values mean "not
    entered". Omitted fields use the form defaults (reserve 15%, salt dose
    8 lbs/ft³, dissolution factor 3, service loading 7, backwash 7).
    Steps that cannot be computed carry a blocking message instead of a value.
    """
)
async def size_water_softener(sizing_input: Dict[str, Any]) -> Union[Dict[str, Any], str]:
    """Size a water softener from raw field values."""
    return size_water_softener_impl(sizing_input)


@mcp.tool(description="Get the sizing form defaults, hardness units with their labels, salt doses and capacity table.")
async def get_sizing_defaults() -> Dict[str, Any]:
    """Get sizing defaults."""
    return get_sizing_defaults_impl()


@mcp.tool(description="Describe the twelve sizing steps: title, formula, explanation and unit.")
async def describe_sizing_steps() -> Dict[str, Any]:
    """Describe sizing steps."""
    return describe_sizing_steps_impl()


def main():
    """Run the MCP server."""
    load_dotenv()
    configure_logging()

    logger.info("Starting Water Softener Sizer MCP Server...")
    logger.info("Available tools:")
    logger.info("  - size_water_softener: twelve-step softener sizing")
    logger.info("  - get_sizing_defaults: form defaults and choices")
    logger.info("  - describe_sizing_steps: step catalog")

    mcp.run()


if __name__ == "__main__":
    main()
