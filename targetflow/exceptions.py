"""
Custom exception classes for TargetFlow

Provides module-specific error types for the binding-expression
integration pipeline.
"""

import numbers
from typing import Iterable, Optional


class TargetFlowError(Exception):
    """Base exception for all TargetFlow errors"""

    pass


# ============================================================================
# Data validation errors
# ============================================================================


class ValidationError(TargetFlowError):
    """Raised when input data fails validation checks"""

    pass


class InvalidIntervalError(ValidationError):
    """Raised when a genomic interval or peak record is malformed"""

    pass


class MissingColumnError(ValidationError):
    """Raised when a required column is missing from a DataFrame"""

    def __init__(
        self, column: str, dataframe_name: str = "DataFrame", available: list = None
    ):
        available_str = f" Available columns: {available}" if available else ""
        super().__init__(
            f"Required column '{column}' not found in {dataframe_name}.{available_str}"
        )
        self.column = column
        self.available = available


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is out of valid range"""

    def __init__(self, param: str, value, valid_range: str = ""):
        msg = f"Invalid value for '{param}': {value}"
        if valid_range:
            msg += f". Expected: {valid_range}"
        super().__init__(msg)
        self.param = param
        self.value = value


class MissingStatisticError(InvalidParameterError):
    """Raised when a statistic key is absent from every region record"""

    def __init__(self, stat_key: str, available: Optional[Iterable[str]] = None):
        available = sorted(available) if available else []
        super().__init__(
            "stat_key", stat_key, f"one of the region statistics {available}"
        )
        self.stat_key = stat_key
        self.available = available


class InsufficientDataError(ValidationError):
    """Raised when a group or sample is too small for the requested analysis"""

    def __init__(self, required: int, actual: int, context: str = "analysis"):
        super().__init__(
            f"Insufficient data for {context}: need at least {required}, got {actual}"
        )
        self.required = required
        self.actual = actual
        self.context = context


# ============================================================================
# Validation helpers
# ============================================================================


def validate_numeric_param(
    value, name: str, min_val=None, max_val=None, exclusive_min: bool = False
) -> None:
    """Validate a numeric parameter is within acceptable bounds.

    Raises
    ------
    InvalidParameterError
        If the value is not a number or is out of range.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(name, value, "a number")
    if value != value:
        raise InvalidParameterError(name, value, "a finite number")
    if min_val is not None:
        if exclusive_min and value <= min_val:
            raise InvalidParameterError(name, value, f"> {min_val}")
        if not exclusive_min and value < min_val:
            raise InvalidParameterError(name, value, f">= {min_val}")
    if max_val is not None and value > max_val:
        raise InvalidParameterError(name, value, f"<= {max_val}")


def validate_choice(value, name: str, choices: Iterable) -> None:
    """Validate a parameter takes one of a fixed set of values.

    Raises
    ------
    InvalidParameterError
        If the value is not one of ``choices``.
    """
    choices = list(choices)
    if value not in choices:
        raise InvalidParameterError(name, value, f"one of {choices}")
