"""
Shared pytest fixtures for the water softener sizer test suite.

Provides:
- Test markers registration
- Raw form inputs for the reference sizing scenarios
"""
import pytest
from typing import Dict, Any

from softener_tools.schemas import SizingInput, build_sizing_input


# =============================================================================
# Pytest Markers Registration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "report: marks report and formatting tests")
    config.addinivalue_line("markers", "cli: marks command-line interface tests")
    config.addinivalue_line("markers", "server: marks MCP server tool tests")


# =============================================================================
# Raw Input Fixtures
# =============================================================================

@pytest.fixture
def scenario_1_raw() -> Dict[str, Any]:
    """Typical industrial softener, entered as raw form strings.

    300 ppm hardness, 10,000 gal/day, regenerating every 2 days,
    15% reserve at 8 lbs/ft³ salt dose, 50 gpm peak flow.
    """
    return {
        "hardness_value": "300",
        "hardness_units": "ppm_as_caco3",
        "use_compensation": False,
        "gallons_per_day": "10000",
        "days_between_regen": "2",
        "reserve_percent": "15",
        "salt_dose": 8,
        "salt_dissolution_factor": "3",
        "peak_flow_gpm": "50",
        "service_loading_rate": "7",
        "backwash_rate": "7"
    }


@pytest.fixture
def scenario_1(scenario_1_raw) -> SizingInput:
    """Scenario 1 as a parsed input record."""
    return build_sizing_input(scenario_1_raw)


@pytest.fixture
def reserve_at_limit(scenario_1) -> SizingInput:
    """Scenario 1 with reserve capacity at 100%."""
    return scenario_1.with_updates(reserve_percent="100")


@pytest.fixture
def zero_service_loading(scenario_1) -> SizingInput:
    """Scenario 1 with a service loading rate of 0."""
    return scenario_1.with_updates(service_loading_rate="0")

