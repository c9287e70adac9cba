"""
Core Configuration Module for the Water Softener Sizer

Centralizes all configuration constants to prevent duplication and divergence.
Conversion factors, the working capacity table, form defaults and the
user-facing blocking messages are defined here.
"""

from dataclasses import dataclass, field
from pathlib import Path
import os
from typing import Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


def get_project_root() -> Path:
    """Get project root with environment variable support."""
    # Strategy 1: Environment variable (most reliable for MCP clients)
    if 'SOFTENER_SIZER_ROOT' in os.environ:
        root = Path(os.environ['SOFTENER_SIZER_ROOT'])
        if root.exists():
            return root

    # Strategy 2: Relative to this file (fallback)
    return Path(__file__).resolve().parent.parent


def _default_capacity_table() -> Dict[int, float]:
    # Working capacity in grains per ft³ of resin, keyed by lbs NaCl per ft³
    return {
        6: 20000.0,
        8: 22500.0,
        10: 25000.0,
        12: 27500.0,
        15: 30000.0,
    }


@dataclass(frozen=True)
class CoreConfig:
    """
    Centralized configuration for softener sizing.

    This class contains the conversion factors, design tables and
    user-facing messages used throughout the application.
    Using frozen=True ensures these values cannot be modified at runtime.
    """

    # Hardness conversions
    PPM_PER_GPG: float = 17.1  # mg/L as CaCO3 per grain per gallon
    IRON_MANGANESE_HARDNESS_FACTOR: float = 4.0  # gpg added per ppm of Fe + Mn

    # Geometry
    INCHES_PER_FOOT: float = 12.0

    # Reserve capacity must stay strictly below this percentage
    RESERVE_LIMIT_PERCENT: float = 100.0

    # Working capacity table (grains/ft³ by salt dose in lbs/ft³)
    CAPACITY_BY_SALT_DOSE: Dict[int, float] = field(default_factory=_default_capacity_table)

    # Form defaults (the reset state of the input form)
    DEFAULT_HARDNESS_UNITS: str = "ppm_as_caco3"
    DEFAULT_IRON_PPM: float = 0.0
    DEFAULT_MANGANESE_PPM: float = 0.0
    DEFAULT_RESERVE_PERCENT: float = 15.0
    DEFAULT_SALT_DOSE: int = 8
    DEFAULT_SALT_DISSOLUTION_FACTOR: float = 3.0  # lbs salt per gallon of water
    DEFAULT_SERVICE_LOADING_RATE: float = 7.0  # gpm/ft²
    DEFAULT_BACKWASH_RATE: float = 7.0  # gpm/ft²

    # Display
    DEFAULT_DECIMALS: int = 2
    EMPTY_RESULT: str = "—"

    # Blocking messages
    RESERVE_BLOCK_MESSAGE: str = "Reserve Capacity must be below 100%. Step 5 and all later steps are blocked."
    RESERVE_BANNER_MESSAGE: str = "Reserve Capacity must be less than 100. Step 5 and beyond are blocked."
    RESERVE_MISSING_MESSAGE: str = "Enter Reserve Capacity to calculate Step 5."
    RESERVE_NEGATIVE_MESSAGE: str = "Reserve Capacity cannot be negative."
    OVERRIDE_CAPACITY_MESSAGE: str = "Override capacity per cubic foot must be greater than 0."
    RESIN_INCOMPLETE_MESSAGE: str = "Complete Steps 5 and 6 to calculate resin volume."
    SALT_INCOMPLETE_MESSAGE: str = "Complete Step 7 to calculate salt per regeneration."
    BRINE_INCOMPLETE_MESSAGE: str = "Complete Step 8 to calculate brine refill water."
    DISSOLUTION_FACTOR_MESSAGE: str = "Salt Dissolution Factor must be greater than 0."
    PEAK_FLOW_MESSAGE: str = "Peak Flow Rate must be greater than 0."
    SERVICE_LOADING_MESSAGE: str = "Service Loading Rate must be greater than 0. Steps 10 through 12 are blocked."
    BACKWASH_RATE_MESSAGE: str = "Backwash Rate must be greater than 0."
    READY_TO_CALCULATE_TITLE: str = "Ready to Calculate"
    READY_TO_CALCULATE_MESSAGE: str = "Complete the required fields to generate sizing results"

    # Logging defaults
    DEFAULT_LOG_FILE: str = "softener_sizer.log"
    DEFAULT_LOG_LEVEL: str = "INFO"

    @property
    def SALT_DOSES(self) -> Tuple[int, ...]:
        """Salt doses available in the capacity table, ascending."""
        return tuple(sorted(self.CAPACITY_BY_SALT_DOSE))

    def get_working_capacity(self, salt_dose: int) -> float:
        """
        Get working capacity for a salt dose.

        Args:
            salt_dose: Salt dose in lbs NaCl per ft³ of resin

        Returns:
            Working capacity in grains per ft³

        Raises:
            ValueError: If the salt dose is not in the capacity table
        """
        if salt_dose not in self.CAPACITY_BY_SALT_DOSE:
            raise ValueError(
                f"Unknown salt dose: {salt_dose}. Known doses: {list(self.SALT_DOSES)}"
            )
        return self.CAPACITY_BY_SALT_DOSE[salt_dose]

    def get_log_file(self) -> Path:
        """Get log file path from environment or use default under the project root."""
        env_path = os.getenv('SOFTENER_SIZER_LOG_FILE')
        if env_path:
            return Path(env_path)
        return get_project_root() / self.DEFAULT_LOG_FILE

    def get_log_level(self, level_name: Optional[str] = None) -> int:
        """Resolve a logging level name (or SOFTENER_SIZER_LOG_LEVEL) to its numeric value."""
        name = (level_name or os.getenv('SOFTENER_SIZER_LOG_LEVEL') or self.DEFAULT_LOG_LEVEL).upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            logger.warning(f"Unknown log level '{name}', using {self.DEFAULT_LOG_LEVEL}")
            return logging.getLevelName(self.DEFAULT_LOG_LEVEL)
        return level


# Create singleton instance
CONFIG = CoreConfig()


def validate_config():
    """
    Validate configuration values are reasonable.
    Called on module import to catch configuration errors early.
    """
    assert CONFIG.PPM_PER_GPG > 0, "ppm per gpg must be positive"
    assert CONFIG.IRON_MANGANESE_HARDNESS_FACTOR >= 0, "Fe/Mn factor must be non-negative"
    assert CONFIG.INCHES_PER_FOOT > 0, "Inches per foot must be positive"
    assert CONFIG.RESERVE_LIMIT_PERCENT > 0, "Reserve limit must be positive"

    # Capacity must rise with salt dose
    capacities = [CONFIG.CAPACITY_BY_SALT_DOSE[dose] for dose in CONFIG.SALT_DOSES]
    assert all(c > 0 for c in capacities), "Working capacities must be positive"
    assert all(a < b for a, b in zip(capacities, capacities[1:])), \
        "Working capacity must increase with salt dose"

    assert CONFIG.DEFAULT_SALT_DOSE in CONFIG.CAPACITY_BY_SALT_DOSE, "Default salt dose not in table"
    assert 0 <= CONFIG.DEFAULT_RESERVE_PERCENT < CONFIG.RESERVE_LIMIT_PERCENT, \
        "Default reserve must be below the reserve limit"
    assert CONFIG.DEFAULT_SALT_DISSOLUTION_FACTOR > 0, "Default dissolution factor must be positive"
    assert CONFIG.DEFAULT_SERVICE_LOADING_RATE > 0, "Default service loading rate must be positive"
    assert CONFIG.DEFAULT_BACKWASH_RATE > 0, "Default backwash rate must be positive"


# Run validation on import
validate_config()
