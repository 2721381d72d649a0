#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the tasksearch library.

Matching, scoring and filtering never raise on record data: missing or
non-string fields are skipped. The exceptions below cover caller contract
violations and configuration loading only.

Exception Hierarchy
-------------------
- TaskSearchError (base exception)

  - ValidationError (caller contract violations, also a ValueError)

  - ConfigurationError (unreadable or malformed configuration files)

"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class TaskSearchError(Exception):
    """Base exception class for all tasksearch-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(TaskSearchError, ValueError):
    """Exception raised when a caller violates an input contract.

    Raised at the boundary of the search pipeline and session for inputs
    such as a non-sequence record collection, a negative result cap or a
    filter index that is out of range.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class ConfigurationError(TaskSearchError):
    """Exception raised when a configuration file cannot be loaded.

    Parameters
    ----------
    message : str
        Description of the configuration problem
    config_path : str or Path, optional
        Path of the offending configuration file
    original_error : Exception, optional
        The underlying parse or I/O error

    """

    def __init__(
        self,
        message: str,
        config_path: str | Path | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the configuration error."""
        super().__init__(message, original_error=original_error)
        self.config_path = str(config_path) if config_path is not None else None


__all__ = ["TaskSearchError", "ValidationError", "ConfigurationError"]
