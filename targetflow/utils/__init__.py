"""
Utility functions for TargetFlow
"""

from .logging import get_logger, log_execution_time, setup_logging
from .validation import (validate_environment, validate_output_permissions,
                         validate_python_packages)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_execution_time",
    "validate_environment",
    "validate_output_permissions",
    "validate_python_packages",
]
