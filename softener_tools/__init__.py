"""
Water Softener Sizing Tools

Twelve-step sizing of industrial water softeners: hardness conversion,
resin volume, salt and brine demand, bed area, tank diameter and backwash
flow. Used by the MCP server (server.py) and the softener-sizer CLI.
"""

from .schemas import SizingInput, SizingResult, StepResult, build_sizing_input
from .sizing_calculator import compute_sizing
from .sizing_report import build_report, build_summary_text

__all__ = [
    "SizingInput",
    "SizingResult",
    "StepResult",
    "build_sizing_input",
    "compute_sizing",
    "build_report",
    "build_summary_text",
]
