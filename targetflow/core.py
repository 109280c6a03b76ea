"""
Core TargetFlow analysis orchestrator
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from joblib import Parallel, delayed

from .config import Config, load_config, validate_config
from .exceptions import InsufficientDataError, InvalidParameterError
from .genomics import (GroupComparison, Peak, Region, RegulatoryScorer,
                       combined_regions, combined_stat_key, shared_peaks,
                       targets_to_frame, tests_to_frame)
from .genomics.assignment import AssignedPeak
from .genomics.scoring import ScoringResult, Target
from .genomics.statistical import ComparisonResult
from .utils import get_logger, log_execution_time, setup_logging

logger = get_logger(__name__)


@dataclass
class FactorResult:
    """Result container for one factor (or one factor pair)"""

    name: str
    mode: str  # 'single' or 'combined'
    assigned_peaks: List[AssignedPeak]
    targets: List[Target]
    unmatched_binding: int
    unmatched_expression: int
    comparison: Optional[ComparisonResult] = None

    def targets_frame(self) -> pd.DataFrame:
        labels = self.comparison.labels if self.comparison else None
        return targets_to_frame(self.targets, labels)

    def tests_frame(self) -> pd.DataFrame:
        return tests_to_frame(self.comparison.tests if self.comparison else [])

    def summary(self) -> Dict[str, Any]:
        summary = {
            "name": self.name,
            "mode": self.mode,
            "assigned_peaks": len(self.assigned_peaks),
            "targets": len(self.targets),
            "unmatched_binding": self.unmatched_binding,
            "unmatched_expression": self.unmatched_expression,
        }
        if self.comparison:
            summary["group_sizes"] = self.comparison.group_sizes()
            summary["tests"] = {
                test.group: {"statistic": test.statistic, "p_adjusted": test.p_adjusted}
                for test in self.comparison.tests
            }
        return summary


class TargetAnalysis:
    """
    Main orchestrator for binding-expression integration

    Runs assignment, scoring, classification and group comparison for single
    factors and factor pairs. Every run recomputes from its inputs.
    """

    def __init__(
        self,
        config: Union[str, Path, Config, Dict[str, Any], None] = None,
        log_level: Optional[str] = None,
        log_file: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize TargetFlow analysis

        Args:
            config: Configuration file path, Config object, or config dict
            log_level: Configure logging at this level when given
            log_file: Optional log file path
        """
        if log_level or log_file:
            setup_logging(level=log_level or "INFO", log_file=log_file)

        if config is None:
            self.config = Config()
        elif isinstance(config, (str, Path)):
            self.config = load_config(config)
        elif isinstance(config, dict):
            self.config = Config(**config)
        elif isinstance(config, Config):
            self.config = config
        else:
            raise ValueError(
                "Invalid config type. Expected str, Path, dict, or Config object"
            )

        issues = validate_config(self.config)
        if issues:
            logger.warning("Configuration issues found:")
            for issue in issues:
                logger.warning(f"  - {issue}")

        self.scorer = RegulatoryScorer(self.config)
        self.comparison = GroupComparison(self.config)

        self.single_labels = tuple(self.config.classification["single_labels"])
        self.combined_labels = tuple(self.config.classification["combined_labels"])

    def _finish(
        self,
        name: str,
        mode: str,
        scoring: ScoringResult,
        labels: Tuple[str, str, str],
    ) -> FactorResult:
        """Compare groups, keeping the scored result reachable on failure"""
        result = FactorResult(
            name=name,
            mode=mode,
            assigned_peaks=scoring.assigned_peaks,
            targets=scoring.targets,
            unmatched_binding=scoring.unmatched_binding,
            unmatched_expression=scoring.unmatched_expression,
        )
        try:
            result.comparison = self.comparison.compare(scoring.targets, labels)
        except InsufficientDataError as e:
            logger.error(f"Group comparison for {name} failed: {e}")
            e.partial_result = result
            raise
        return result

    @log_execution_time
    def run_factor(
        self,
        name: str,
        peaks: Sequence[Peak],
        regions: Sequence[Region],
        stat_key: Optional[str] = None,
    ) -> FactorResult:
        """
        Rank and test the targets of a single factor

        Args:
            name: Factor name used in logs and results
            peaks: The factor's peaks
            regions: Regions carrying the expression statistic
            stat_key: Statistic to use instead of the configured one

        Returns:
            FactorResult with assigned peaks, targets and group comparison
        """
        logger.info(f"Running single-factor analysis for {name}")
        scoring = self.scorer.score(peaks, regions, stat_key=stat_key)
        return self._finish(name, "single", scoring, self.single_labels)

    @log_execution_time
    def run_pair(
        self,
        names: Tuple[str, str],
        peaks_a: Sequence[Peak],
        peaks_b: Sequence[Peak],
        regions_a: Sequence[Region],
        regions_b: Sequence[Region],
        stat: Optional[str] = None,
    ) -> FactorResult:
        """
        Rank and test the shared targets of two factors

        The statistic is the product of both factors' values, so positive
        values mark cooperative and negative values competitive targets.
        """
        if stat is None:
            stat = self.config.scoring.get("stat_key")
        if not isinstance(stat, str):
            raise InvalidParameterError("stat", stat, "a single statistic name")

        name = f"{names[0]}_{names[1]}"
        logger.info(f"Running combined analysis for {names[0]} and {names[1]}")

        scoring = self.scorer.score(
            shared_peaks(peaks_a, peaks_b),
            combined_regions(regions_a, regions_b, names),
            stat_key=combined_stat_key(names, stat),
        )
        return self._finish(name, "combined", scoring, self.combined_labels)

    def run_factors(
        self, factors: Mapping[str, Tuple[Sequence[Peak], Sequence[Region]]]
    ) -> Dict[str, FactorResult]:
        """
        Run independent single-factor analyses, in parallel when n_jobs != 1

        Args:
            factors: Mapping of factor name -> (peaks, regions)

        Returns:
            Mapping of factor name -> FactorResult, in input order
        """
        names = list(factors)
        logger.info(f"Running {len(names)} factors with n_jobs={self.config.n_jobs}")

        if self.config.n_jobs == 1 or len(names) < 2:
            results = [self.run_factor(name, *factors[name]) for name in names]
        else:
            results = Parallel(n_jobs=self.config.n_jobs, prefer="threads")(
                delayed(self.run_factor)(name, *factors[name]) for name in names
            )

        return dict(zip(names, results))
