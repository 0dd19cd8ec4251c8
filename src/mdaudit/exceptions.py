#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the mdaudit library.

This module defines the exception classes raised by the configuration layer
and the bundled formatters. The diagnostic core itself never wraps errors
raised by a formatter: whatever the formatter raises reaches the caller as-is.

Exception Hierarchy
-------------------
- MdAuditError (base exception)

  - ValidationError (parameter/option validation)
    - ConfigError (invalid or unreadable configuration files)

  - FileError (file access and I/O)

  - FormatterError (canonical-text formatter failures)
    - UnsupportedParserError (no formatter registered for a parser name)

"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class MdAuditError(Exception):
    """Base exception class for all mdaudit-specific errors.

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


class ValidationError(MdAuditError):
    """Exception raised for invalid input parameters or options.

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


class ConfigError(ValidationError):
    """Exception raised when formatting configuration cannot be used.

    Covers malformed configuration files (TOML, YAML, JSON, editorconfig),
    unknown option names and option values outside their allowed set.

    Parameters
    ----------
    message : str
        Description of the configuration problem
    config_path : str or Path, optional
        File the offending configuration was read from
    parameter_name : str, optional
        Name of the offending option
    parameter_value : any, optional
        Value of the offending option
    original_error : Exception, optional
        Underlying decode or I/O error

    """

    def __init__(
        self,
        message: str,
        config_path: str | Path | None = None,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the configuration error."""
        if config_path is not None:
            message = f"{message} (in {config_path})"
        super().__init__(
            message,
            parameter_name=parameter_name,
            parameter_value=parameter_value,
            original_error=original_error,
        )
        self.config_path = str(config_path) if config_path is not None else None


class FileError(MdAuditError):
    """Exception raised for file access problems.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the file that caused the error
    original_error : Exception, optional
        The underlying I/O error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FormatterError(MdAuditError):
    """Exception raised when a formatter cannot produce canonical text.

    Parameters
    ----------
    message : str
        Description of the failure
    parser : str, optional
        Name of the parser the formatter was selected for
    original_error : Exception, optional
        The underlying exception

    """

    def __init__(self, message: str, parser: str | None = None, original_error: Exception | None = None):
        """Initialize the formatter error."""
        super().__init__(message, original_error=original_error)
        self.parser = parser


class UnsupportedParserError(FormatterError):
    """Exception raised when no formatter is registered for a parser name.

    Parameters
    ----------
    parser : str
        The requested parser name
    available : list of str, optional
        Parser names that are registered

    """

    def __init__(self, parser: str, available: list[str] | None = None):
        """Initialize the unsupported parser error."""
        message = f"No formatter registered for parser '{parser}'"
        if available:
            message += f". Available parsers: {', '.join(sorted(available))}"
        super().__init__(message, parser=parser)
        self.available = available or []


__all__ = [
    "MdAuditError",
    "ValidationError",
    "ConfigError",
    "FileError",
    "FormatterError",
    "UnsupportedParserError",
]
