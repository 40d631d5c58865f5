"""
AIOS Exceptions

Custom exception types for tool resolution errors with remediation suggestions.
"""

from pathlib import Path
from typing import Optional, List, Sequence, Union


class AIOSError(Exception):
    """Base exception for all AIOS errors."""

    def __init__(
        self,
        message: str,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            remediation: Suggested fix for the user
            details: Technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.details = details

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.remediation:
            parts.append(f"To fix: {self.remediation}")
        return "\n".join(parts)


class ConfigError(AIOSError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.config_key = config_key
        if not remediation and config_key:
            remediation = f"Check '{config_key}' in .aios-core/core-config.yaml or the AIOS_* environment variables"
        super().__init__(message, remediation, details)


class ToolNotFoundError(AIOSError):
    """No tool definition matches the requested id in any search root."""

    def __init__(
        self,
        tool_id: str,
        searched_paths: Optional[Sequence[Union[str, Path]]] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.tool_id = tool_id
        self.searched_paths = [str(p) for p in (searched_paths or [])]

        if self.searched_paths:
            listing = "\n".join(f"  - {p}" for p in self.searched_paths)
            message = f"Tool '{tool_id}' not found in search paths:\n{listing}"
        else:
            message = f"Tool '{tool_id}' not found: no search paths configured"

        if not remediation:
            remediation = (
                f"Check the spelling of '{tool_id}' or add {tool_id}.yaml to one of the "
                "tool directories. Run 'aios tools list' to see available tools."
            )
        super().__init__(message, remediation, details)


class ToolParseError(AIOSError):
    """A tool definition was located but its YAML could not be parsed."""

    def __init__(
        self,
        message: str,
        tool_id: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.tool_id = tool_id
        self.path = str(path) if path else None
        if not remediation and self.path:
            remediation = f"Fix the YAML syntax in {self.path}"
        super().__init__(message, remediation, details)


class ToolSchemaError(AIOSError):
    """A tool definition parsed but does not satisfy its schema."""

    def __init__(
        self,
        message: str,
        tool_id: Optional[str] = None,
        missing_fields: Optional[List[str]] = None,
        path: Optional[Union[str, Path]] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.tool_id = tool_id
        self.missing_fields = list(missing_fields or [])
        self.path = str(path) if path else None
        if not remediation and self.missing_fields:
            target = self.path or f"the definition of '{tool_id}'"
            remediation = f"Add {', '.join(self.missing_fields)} under the 'tool:' key in {target}"
        super().__init__(message, remediation, details)


class ValidatorRunnerError(AIOSError):
    """A validator runner could not execute an embedded validator."""

    def __init__(
        self,
        message: str,
        validator_id: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.validator_id = validator_id
        if not remediation and validator_id:
            remediation = f"Register an implementation for validator '{validator_id}' with the validator runner"
        super().__init__(message, remediation, details)


# Error code mapping for CLI exit codes
ERROR_CODES = {
    ConfigError: 10,
    ToolNotFoundError: 20,
    ToolParseError: 21,
    ToolSchemaError: 22,
    ValidatorRunnerError: 23,
    AIOSError: 1,
}


def get_error_code(error: Exception) -> int:
    """Get the exit code for an error type."""
    for error_type, code in ERROR_CODES.items():
        if isinstance(error, error_type):
            return code
    return 1
