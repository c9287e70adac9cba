"""
MCP Common Types and Enums

Provides shared types for MCP tool requests and responses:
- ResponseFormat enum for JSON/Markdown output
- Base tool input model
- Generic markdown formatting of structured data
"""

from enum import Enum
from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, Field


class ResponseFormat(str, Enum):
    """
    Output format for tool responses.

    JSON: Machine-readable structured data (default)
    MARKDOWN: Human-readable formatted text for display
    """
    JSON = "json"
    MARKDOWN = "markdown"


class BaseToolInput(BaseModel):
    """
    Base class for tool inputs with common fields.

    All sizing tool input models inherit from this to get
    response_format support automatically.
    """
    model_config = ConfigDict(use_enum_values=True)

    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        description="Output format: 'json' for machine-readable or 'markdown' for human-readable"
    )


class SizingToolInput(BaseToolInput):
    """Input for the softener sizing tool: raw form field values plus output format."""
    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    inputs: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw field values keyed by field name; omitted fields use form defaults"
    )


def format_as_markdown(data: Dict[str, Any], title: str = "Results", level: int = 1) -> str:
    """
    Convert structured data to markdown format.

    Args:
        data: Dictionary to format
        title: Title for the markdown document
        level: Heading level of the title; sections go one level deeper

    Returns:
        Markdown-formatted string
    """
    lines = [f"{'#' * level} {title}", ""]

    def format_value(value: Any, indent: int = 0) -> str:
        """Recursively format values."""
        prefix = "  " * indent

        if isinstance(value, dict):
            result = []
            for k, v in value.items():
                formatted_key = k.replace("_", " ").title()
                if isinstance(v, (dict, list)):
                    result.append(f"{prefix}- **{formatted_key}**:")
                    result.append(format_value(v, indent + 1))
                else:
                    result.append(f"{prefix}- **{formatted_key}**: {_format_scalar(v)}")
            return "\n".join(result)

        elif isinstance(value, list):
            if not value:
                return f"{prefix}(empty)"
            return "\n".join(f"{prefix}- {_format_scalar(item)}" for item in value)

        else:
            return f"{prefix}{_format_scalar(value)}"

    for key, value in data.items():
        formatted_key = key.replace("_", " ").title()

        if isinstance(value, (dict, list)):
            lines.append(f"{'#' * (level + 1)} {formatted_key}")
            lines.append("")
            lines.append(format_value(value))
            lines.append("")
        else:
            lines.append(f"- **{formatted_key}**: {_format_scalar(value)}")

    return "\n".join(lines)


def _format_scalar(value: Any) -> str:
    if value is None:
        return "—"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float):
        return f"{value:,.3f}".rstrip("0").rstrip(".")
    return str(value)
