#!/usr/bin/env python
"""
Example usage of the Water Softener Sizer
Demonstrates the sizing library and the MCP tool request shape
"""

import json

from softener_tools import build_report, build_summary_text, build_sizing_input, compute_sizing
from softener_tools.sizing_report import render_step, get_step_definition


def example_softener_sizing():
    """Example workflow for softener sizing"""

    # Step 1: Raw form values, as a form-state collaborator would send them
    raw_inputs = {
        "hardness_value": "300",
        "hardness_units": "ppm_as_caco3",
        "use_compensation": True,
        "iron_ppm": "0.3",
        "manganese_ppm": "0.05",
        "gallons_per_day": "10000",
        "days_between_regen": "2",
        "reserve_percent": "15",
        "salt_dose": 8,
        "peak_flow_gpm": "50",
    }

    print("=" * 60)
    print("STEP 1: Running the twelve-step sizing")
    print("=" * 60)

    inputs = build_sizing_input(raw_inputs)
    result = compute_sizing(inputs)

    for step in result.steps():
        print(f"{get_step_definition(step.number).title}")
        print(f"  {render_step(step)}")

    # Step 2: Clipboard summary
    print("\n" + "=" * 60)
    print("STEP 2: Summary")
    print("=" * 60)
    print(build_summary_text(result))

    # Step 3: Try a reserve that is too high
    print("\n" + "=" * 60)
    print("STEP 3: Reserve capacity at 100%")
    print("=" * 60)

    blocked = compute_sizing(inputs.with_updates(reserve_percent="100"))
    for number, message in blocked.blocking_messages.items():
        print(f"  Step {number}: {message}")

    # Step 4: Same request through the MCP tool
    # In practice: report = await client.call_tool("size_water_softener", {"sizing_input": request})
    request = {"inputs": raw_inputs, "response_format": "json"}
    print("\n" + "=" * 60)
    print("STEP 4: MCP request for size_water_softener")
    print("=" * 60)
    print(json.dumps({"sizing_input": request}, indent=2))

    report = build_report(result, request["response_format"], inputs=inputs)
    print(f"\nReport status: {report['status']}")

    print("\n" + "=" * 60)
    print("Softener Sizing Complete!")
    print("=" * 60)


if __name__ == "__main__":
    # Run the example
    example_softener_sizing()
