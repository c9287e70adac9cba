"""
Custom exception hierarchy for the Water Softener Sizer.

The sizing calculator itself never raises: invalid or missing inputs are
reported as per-step blocking messages. These exceptions cover the
boundaries around it (raw input parsing, step lookup, CLI/MCP requests).
All exceptions inherit from SofteningDesignError for easy catching.
"""
from typing import Any, Dict, List, Optional


class SofteningDesignError(Exception):
    """Base exception for all softener sizing errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
        hint: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        parts = [self.message]
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"[{details_str}]")
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for MCP error responses."""
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.hint:
            result["hint"] = self.hint
        return result


class InvalidSizingInputError(SofteningDesignError):
    """Raw sizing input could not be turned into an input record.

    Raised for structural problems only (unknown units, a salt dose outside
    the capacity table, malformed JSON). Blank or non-numeric field values
    are not errors: they parse to "not entered".
    """

    def __init__(
        self,
        message: str,
        invalid_fields: Optional[Dict[str, str]] = None,
        unknown_fields: Optional[List[str]] = None,
        hint: Optional[str] = "Check field names and enumerated values (hardness_units, salt_dose)"
    ):
        details = {}
        if invalid_fields:
            details["invalid_fields"] = invalid_fields
        if unknown_fields:
            details["unknown_fields"] = unknown_fields
        super().__init__(message=message, details=details, hint=hint)


class StepNotFoundError(SofteningDesignError):
    """Requested sizing step does not exist."""

    def __init__(self, step_number: Any, step_count: int = 12):
        super().__init__(
            message=f"Step not found: {step_number}",
            details={"step_number": step_number, "valid_range": f"1-{step_count}"},
            hint="Steps are numbered from 1"
        )
