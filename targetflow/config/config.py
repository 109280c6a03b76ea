"""
Core configuration management for TargetFlow
"""

import json
import logging
import numbers
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

ALTERNATIVES = ["two_sided", "greater", "less"]
REGION_KEYS = ["gene_id", "region_id"]
TIE_METHODS = ["ordinal", "average"]
KS_METHODS = ["auto", "exact", "asymp"]
TARGET_VALUES = ["score_rank", "score", "rank", "stat", "distance"]
# statsmodels.stats.multitest.multipletests methods
CORRECTION_METHODS = [
    "bonferroni",
    "sidak",
    "holm-sidak",
    "holm",
    "simes-hochberg",
    "hommel",
    "fdr_bh",
    "fdr_by",
    "fdr_tsbh",
    "fdr_tsbky",
]


@dataclass
class Config:
    """Main configuration class for TargetFlow analysis"""

    # General settings
    project_name: str = "TargetFlow_Analysis"
    n_jobs: int = 1
    log_level: str = "INFO"

    # Output path used by the command-line interface
    output_dir: Optional[str] = None

    # Analysis parameters
    assignment: Dict[str, Any] = field(default_factory=dict)
    scoring: Dict[str, Any] = field(default_factory=dict)
    classification: Dict[str, Any] = field(default_factory=dict)
    comparison: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Fill missing sections and keys with defaults"""
        self.assignment = {**self._get_default_assignment(), **self.assignment}
        self.scoring = {**self._get_default_scoring(), **self.scoring}
        self.classification = {
            **self._get_default_classification(),
            **self.classification,
        }
        self.comparison = {**self._get_default_comparison(), **self.comparison}

    def _get_default_assignment(self) -> Dict[str, Any]:
        """Default peak assignment configuration"""
        return {
            "flank_window": 100000,
            "decay_constant": 100000.0,
        }

    def _get_default_scoring(self) -> Dict[str, Any]:
        """Default regulatory scoring configuration"""
        return {
            "region_key": "gene_id",
            "stat_key": "fc",
            "tie_method": "ordinal",
        }

    def _get_default_classification(self) -> Dict[str, Any]:
        """Default group labels"""
        return {
            "single_labels": ["Down", "None", "Up"],
            "combined_labels": ["Competitive", "None", "Cooperative"],
        }

    def _get_default_comparison(self) -> Dict[str, Any]:
        """Default distribution comparison configuration"""
        return {
            "value": "score_rank",
            "reference": "None",
            "alternative": "greater",
            "method": "auto",
            "multiple_testing_correction": "fdr_bh",
            "alpha": 0.05,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary view of the configuration"""
        return asdict(self)


def load_config(config_file: Union[str, Path]) -> Config:
    """Load configuration from YAML or JSON file"""
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            config_dict = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return Config(**(config_dict or {}))


def save_config(config: Config, output_file: Union[str, Path]) -> None:
    """Save configuration to YAML file"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {output_path}")


def validate_config(config: Config) -> List[str]:
    """Validate configuration and return list of issues"""
    issues = []

    if config.n_jobs == 0:
        issues.append("n_jobs must be non-zero (use -1 for all cores)")

    flank_window = config.assignment.get("flank_window")
    if not isinstance(flank_window, numbers.Real) or flank_window < 0:
        issues.append(f"flank_window must be a non-negative number, got {flank_window}")

    decay_constant = config.assignment.get("decay_constant")
    if not isinstance(decay_constant, numbers.Real) or decay_constant <= 0:
        issues.append(f"decay_constant must be positive, got {decay_constant}")

    if config.scoring.get("region_key") not in REGION_KEYS:
        issues.append(f"region_key must be one of {REGION_KEYS}")

    if config.scoring.get("tie_method") not in TIE_METHODS:
        issues.append(f"tie_method must be one of {TIE_METHODS}")

    stat_key = config.scoring.get("stat_key")
    if isinstance(stat_key, (list, tuple)):
        if len(stat_key) != 2:
            issues.append("A combined stat_key must name exactly two statistics")
    elif not isinstance(stat_key, str) or not stat_key:
        issues.append("stat_key must be a statistic name")

    for section in ["single_labels", "combined_labels"]:
        labels = config.classification.get(section, [])
        if len(labels) != 3 or len(set(labels)) != 3:
            issues.append(f"{section} must hold three distinct labels")

    if config.comparison.get("alternative") not in ALTERNATIVES:
        issues.append(f"alternative must be one of {ALTERNATIVES}")

    if config.comparison.get("value") not in TARGET_VALUES:
        issues.append(f"value must be one of {TARGET_VALUES}")

    if config.comparison.get("method") not in KS_METHODS:
        issues.append(f"method must be one of {KS_METHODS}")

    correction = config.comparison.get("multiple_testing_correction")
    if correction not in CORRECTION_METHODS:
        issues.append(
            f"multiple_testing_correction must be one of {CORRECTION_METHODS}"
        )

    reference = config.comparison.get("reference")
    for section in ["single_labels", "combined_labels"]:
        if reference not in config.classification.get(section, []):
            issues.append(f"reference '{reference}' is not one of the {section}")

    alpha = config.comparison.get("alpha")
    if not isinstance(alpha, numbers.Real) or not 0 < alpha < 1:
        issues.append(f"alpha must lie in (0, 1), got {alpha}")

    return issues


def get_default_config() -> Config:
    """Get default configuration object"""
    return Config()
