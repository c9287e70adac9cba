"""
Tests for step display, summary text and report generation.
"""
import pytest

from softener_tools.core_config import CONFIG
from softener_tools.mcp_types import ResponseFormat, format_as_markdown
from softener_tools.schemas import SizingInput, StepResult, TankDiameterResult
from softener_tools.sizing_calculator import compute_sizing
from softener_tools.sizing_report import (
    STEP_DEFINITIONS,
    SUMMARY_TITLE,
    build_report,
    build_summary_text,
    format_number,
    format_result,
    get_step_definition,
    render_step,
    status_notices,
)


@pytest.mark.report
class TestNumberFormatting:
    """Thousands separators, at most N decimals, trailing zeros dropped."""

    @pytest.mark.parametrize("value,decimals,expected", [
        (1500, 2, "1,500"),
        (17.543859649, 2, "17.54"),
        (50.00000000000001, 2, "50"),
        (17.5, 2, "17.5"),
        (175438.59649, 0, "175,439"),
        (412796.697, 0, "412,797"),
        (0.125, 2, "0.13"),
        (2.5, 0, "3"),
        (0, 2, "0"),
        (-0.001, 2, "0"),
        (-1234.567, 2, "-1,234.57"),
        (1234567.891, 2, "1,234,567.89"),
    ])
    def test_format_number(self, value, decimals, expected):
        assert format_number(value, decimals) == expected

    @pytest.mark.parametrize("value,expected", [
        (float("inf"), "∞"),
        (float("-inf"), "-∞"),
        (float("nan"), "NaN"),
    ])
    def test_non_finite(self, value, expected):
        assert format_number(value) == expected

    def test_format_result(self):
        assert format_result(18.3465, "ft³") == "18.35 ft³"
        assert format_result(None, "ft³") == CONFIG.EMPTY_RESULT


@pytest.mark.report
class TestStepCatalog:

    def test_twelve_steps(self):
        assert [d.number for d in STEP_DEFINITIONS] == list(range(1, 13))
        assert all(d.title.startswith(f"Step {d.number} - ") for d in STEP_DEFINITIONS)

    def test_whole_number_steps(self):
        assert [d.number for d in STEP_DEFINITIONS if d.decimals == 0] == [3, 4, 5, 6]

    def test_unknown_step(self):
        with pytest.raises(KeyError):
            get_step_definition(13)


@pytest.mark.report
class TestRenderStep:
    """Display lines for individual steps."""

    def test_value_with_unit(self, scenario_1):
        result = compute_sizing(scenario_1)

        assert render_step(result.hardness_gpg) == "17.54 grains per gallon"
        assert render_step(result.grains_per_day) == "175,439 grains per day"
        assert render_step(result.capacity_per_ft3) == "22,500 grains per cubic foot"
        assert render_step(result.resin_ft3) == "18.35 ft³"

    def test_tank_diameter(self, scenario_1):
        result = compute_sizing(scenario_1)
        assert render_step(result.tank_diameter) == "3.02 feet (36.19 inches)"

    def test_message_shown(self, reserve_at_limit):
        result = compute_sizing(reserve_at_limit)
        assert render_step(result.resin_ft3) == CONFIG.RESERVE_BLOCK_MESSAGE

    def test_empty(self):
        assert render_step(StepResult(number=3)) == CONFIG.EMPTY_RESULT
        assert render_step(TankDiameterResult(number=11)) == CONFIG.EMPTY_RESULT


@pytest.mark.report
class TestStatusNotices:

    def test_none_for_complete_input(self, scenario_1):
        assert status_notices(compute_sizing(scenario_1)) == []

    def test_ready_to_calculate(self):
        notices = status_notices(compute_sizing(SizingInput.defaults()))
        assert notices == ["Ready to Calculate: Complete the required fields to generate sizing results"]

    def test_reserve_banner(self, reserve_at_limit):
        notices = status_notices(compute_sizing(reserve_at_limit))
        assert notices == ["Reserve Capacity must be less than 100. Step 5 and beyond are blocked."]

    def test_service_loading_notices(self, zero_service_loading):
        notices = status_notices(compute_sizing(zero_service_loading))

        # Zero loading rate also counts as missing required input
        assert len(notices) == 2
        assert notices[1] == CONFIG.SERVICE_LOADING_MESSAGE


@pytest.mark.report
class TestSummaryText:
    """Plain-text summary used for clipboard export."""

    def test_reference_scenario(self, scenario_1):
        text = build_summary_text(compute_sizing(scenario_1))

        assert text == "\n".join([
            "Industrial Water Softener Sizer Summary",
            "Design hardness: 17.54 grains per gallon",
            "Resin volume: 18.35 ft³",
            "Salt per regeneration: 146.77 pounds",
            "Estimated brine refill water: 48.92 gallons",
            "Minimum tank diameter estimate: 36.19 in",
            "Required backwash flow: 50 gallons per minute",
        ])

    def test_overflowing_values(self):
        inputs = SizingInput(
            hardness_value="1e200", hardness_units="gpg",
            gallons_per_day="1e200", days_between_regen="2", peak_flow_gpm="50"
        )
        result = compute_sizing(inputs)

        assert result.grains_per_day.value == float("inf")
        lines = build_summary_text(result).split("\n")
        assert lines[2] == "Resin volume: ∞ ft³"
        assert lines[6] == "Required backwash flow: 50 gallons per minute"
        assert render_step(result.grains_per_day) == "∞ grains per day"
        assert build_report(result)["status"] == "complete"
        assert "| Step 8 - Salt Required Per Regeneration (pounds) | ∞ pounds |" in build_report(result, "markdown")

    def test_empty_values(self):
        lines = build_summary_text(compute_sizing(SizingInput.defaults())).split("\n")

        assert lines[0] == SUMMARY_TITLE
        assert len(lines) == 7
        assert all(line.endswith(": —") for line in lines[1:])

    def test_blocked_values(self, reserve_at_limit):
        lines = build_summary_text(compute_sizing(reserve_at_limit)).split("\n")

        assert lines[2] == "Resin volume: —"
        assert lines[5] == "Minimum tank diameter estimate: 36.19 in"


@pytest.mark.report
class TestBuildReport:
    """JSON and Markdown reports."""

    def test_json_report(self, scenario_1):
        report = build_report(compute_sizing(scenario_1), ResponseFormat.JSON, inputs=scenario_1)

        assert report["status"] == "complete"
        assert report["notices"] == []
        assert len(report["steps"]) == 12
        assert report["steps"][6]["display"] == "18.35 ft³"
        assert report["result"]["resin_ft3"]["value"] == pytest.approx(18.3465, rel=1e-4)
        assert report["summary_text"].startswith(SUMMARY_TITLE)
        assert report["inputs"]["hardness_units"] == "ppm_as_caco3"

    def test_json_report_without_inputs(self, scenario_1):
        report = build_report(compute_sizing(scenario_1))
        assert "inputs" not in report

    def test_status_values(self, reserve_at_limit):
        assert build_report(compute_sizing(reserve_at_limit))["status"] == "blocked"
        assert build_report(compute_sizing(SizingInput.defaults()))["status"] == "incomplete"

    def test_markdown_report(self, reserve_at_limit):
        text = build_report(compute_sizing(reserve_at_limit), "markdown", inputs=reserve_at_limit)

        assert text.startswith(f"# {SUMMARY_TITLE}")
        assert f"> {CONFIG.RESERVE_BANNER_MESSAGE}" in text
        assert "| Step 7 - Required Resin Volume (cubic feet) | " + CONFIG.RESERVE_BLOCK_MESSAGE + " |" in text
        assert "## Summary" in text
        assert "## Inputs" in text
        assert "- **Reserve Percent**: 100" in text

    def test_invalid_format(self, scenario_1):
        with pytest.raises(ValueError):
            build_report(compute_sizing(scenario_1), "html")


@pytest.mark.report
class TestMarkdownFormatter:

    def test_nested_sections(self):
        text = format_as_markdown({"name": "A", "values": [1.5, None], "table": {"max_flow": 2.0}}, title="Doc")

        assert text.startswith("# Doc")
        assert "- **Name**: A" in text
        assert "## Values" in text
        assert "- 1.5" in text
        assert "- —" in text
        assert "- **Max Flow**: 2" in text
