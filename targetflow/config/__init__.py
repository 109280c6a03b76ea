"""
Configuration management for TargetFlow

This module provides configuration loading, validation, and management
for the binding-expression integration pipeline.
"""

from .config import (ALTERNATIVES, CORRECTION_METHODS, KS_METHODS,
                     REGION_KEYS, TARGET_VALUES, TIE_METHODS, Config,
                     get_default_config, load_config, save_config,
                     validate_config)

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "validate_config",
    "get_default_config",
    "ALTERNATIVES",
    "REGION_KEYS",
    "TIE_METHODS",
    "KS_METHODS",
    "TARGET_VALUES",
    "CORRECTION_METHODS",
]
