"""
TargetFlow: binding and expression integration for transcription factor targets

TargetFlow ranks genes by the regulatory potential of a factor's ChIP-seq
peaks, pairs the ranking with differential expression statistics and tests
whether binding is associated with a direction of regulation.

Main Components:
- Peak-to-region assignment with exponential distance decay
- Regulatory potential scoring and target ranking
- Up/None/Down (or Cooperative/None/Competitive) classification
- ECDF and Kolmogorov-Smirnov comparison of regulation groups
- Shared targets of two factors

Example:
    >>> from targetflow import TargetAnalysis
    >>> analysis = TargetAnalysis(config="config.yaml")
    >>> result = analysis.run_factor("YY1", peaks, regions)
"""

import logging
import sys
from importlib import metadata
from typing import Any, Dict

try:
    __version__ = metadata.version("targetflow")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0-dev"

from . import genomics, utils
from .config import Config, load_config
from .core import FactorResult, TargetAnalysis
from .utils import setup_logging, validate_environment

__all__ = [
    "__version__",
    "TargetAnalysis",
    "FactorResult",
    "Config",
    "load_config",
    "setup_logging",
    "validate_environment",
    "genomics",
    "utils",
]


def get_info() -> Dict[str, Any]:
    """Get package information."""
    return {
        "name": "TargetFlow",
        "version": __version__,
        "description": "Integration of factor binding and differential expression",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "modules": __all__[7:],
    }


def check_dependencies() -> Dict[str, bool]:
    """Check if key dependencies are available."""
    from .utils.validation import CORE_PACKAGES, validate_python_packages

    return validate_python_packages(CORE_PACKAGES)


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
