"""
Distribution comparison between regulation groups

This module provides empirical CDFs and directional two-sample
Kolmogorov-Smirnov tests, and compares the regulatory potential of each
regulation group against the unregulated reference group.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import ks_2samp
from statsmodels.stats.multitest import multipletests

from ..config import (ALTERNATIVES, CORRECTION_METHODS, KS_METHODS,
                      TARGET_VALUES, Config)
from ..exceptions import InsufficientDataError, validate_choice
from ..utils import get_logger
from .classification import (SINGLE_FACTOR_LABELS, classify,
                             partition_targets)
from .scoring import Target

logger = get_logger(__name__)

_SCIPY_ALTERNATIVES = {
    "two_sided": "two-sided",
    "greater": "greater",
    "less": "less",
}


class ECDF:
    """Empirical cumulative distribution function of a sample"""

    def __init__(self, values: Sequence[float]):
        self.values = np.sort(np.asarray(values, dtype=float))
        if len(self.values) == 0:
            raise InsufficientDataError(1, 0, "ECDF")
        self.n = len(self.values)

    def __call__(self, x):
        """Fraction of sample values <= x; accepts scalars or arrays"""
        result = np.searchsorted(self.values, x, side="right") / self.n
        if np.ndim(result) == 0:
            return float(result)
        return result

    def curve(self) -> Tuple[np.ndarray, np.ndarray]:
        """Step coordinates (distinct sorted values, cumulative fraction)"""
        x = np.unique(self.values)
        return x, self(x)

    def __len__(self) -> int:
        return self.n


def ecdf(values: Sequence[float]) -> ECDF:
    return ECDF(values)


@dataclass(frozen=True)
class KSTestResult:
    """Two-sample Kolmogorov-Smirnov test outcome"""

    statistic: float
    p_value: float
    group_sizes: Tuple[int, int]
    alternative: str


def ks_test(
    sample_a: Sequence[float],
    sample_b: Sequence[float],
    alternative: str = "two_sided",
    method: str = "auto",
) -> KSTestResult:
    """
    Two-sample Kolmogorov-Smirnov test

    ``greater`` tests whether ecdf_A(x) >= ecdf_B(x) everywhere with strict
    inequality somewhere, i.e. whether sample A tends to be smaller. With
    ranks, where lower means stronger potential, this says group A is
    more strongly bound than group B.

    Args:
        sample_a: First sample
        sample_b: Second sample
        alternative: "two_sided", "greater" or "less"
        method: p-value computation, "auto", "exact" or "asymp"

    Returns:
        KSTestResult with the D statistic and p-value
    """
    validate_choice(alternative, "alternative", ALTERNATIVES)
    validate_choice(method, "method", KS_METHODS)

    a = np.asarray(sample_a, dtype=float)
    b = np.asarray(sample_b, dtype=float)
    if len(a) == 0 or len(b) == 0:
        raise InsufficientDataError(
            1, min(len(a), len(b)), f"KS test (sizes {len(a)} and {len(b)})"
        )

    result = ks_2samp(a, b, alternative=_SCIPY_ALTERNATIVES[alternative], method=method)

    return KSTestResult(
        statistic=float(result.statistic),
        p_value=float(result.pvalue),
        group_sizes=(len(a), len(b)),
        alternative=alternative,
    )


@dataclass(frozen=True)
class GroupTest:
    """KS comparison of one regulation group against the reference group"""

    group: str
    reference: str
    statistic: float
    p_value: float
    p_adjusted: float
    significant: bool
    group_sizes: Tuple[int, int]
    alternative: str


@dataclass
class ComparisonResult:
    """Labels, groups, ECDFs and tests of a grouped comparison"""

    value: str
    labels: List[str]
    groups: "OrderedDict[str, List[Target]]"
    ecdfs: Dict[str, ECDF]
    tests: List[GroupTest]

    def group_sizes(self) -> Dict[str, int]:
        return {label: len(members) for label, members in self.groups.items()}


class GroupComparison:
    """Compare regulatory potential across statistic-defined groups"""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize group comparison

        Args:
            config: TargetFlow configuration object
        """
        self.config = config or Config()

        self.stat_params = self.config.comparison
        self.value = self.stat_params.get("value", "score_rank")
        self.reference = self.stat_params.get("reference", "None")
        self.alternative = self.stat_params.get("alternative", "greater")
        self.method = self.stat_params.get("method", "auto")
        self.correction = self.stat_params.get("multiple_testing_correction", "fdr_bh")
        self.alpha = self.stat_params.get("alpha", 0.05)

    def compare(
        self,
        targets: Sequence[Target],
        labels: Tuple[str, str, str] = SINGLE_FACTOR_LABELS,
    ) -> ComparisonResult:
        """
        Classify targets and test each group against the reference group

        Args:
            targets: Ranked targets
            labels: Low, middle and high labels; the reference must be one

        Returns:
            ComparisonResult with per-group ECDFs and adjusted KS tests
        """
        validate_choice(self.value, "value", TARGET_VALUES)
        validate_choice(self.reference, "reference", labels)
        validate_choice(self.alternative, "alternative", ALTERNATIVES)
        validate_choice(self.method, "method", KS_METHODS)
        validate_choice(
            self.correction, "multiple_testing_correction", CORRECTION_METHODS
        )

        target_labels = classify([target.stat for target in targets], labels)
        groups = partition_targets(targets, target_labels, labels)
        samples = {
            label: [getattr(target, self.value) for target in members]
            for label, members in groups.items()
        }

        for label, sample in samples.items():
            if not sample:
                raise InsufficientDataError(1, 0, f"group '{label}'")

        ecdfs = {label: ECDF(sample) for label, sample in samples.items()}
        test_results = self._calculate_statistical_tests(samples, labels)

        logger.info(
            f"Compared {self.value} of {len(targets)} targets across groups "
            + ", ".join(f"{label}={len(sample)}" for label, sample in samples.items())
        )

        return ComparisonResult(
            value=self.value,
            labels=target_labels,
            groups=groups,
            ecdfs=ecdfs,
            tests=test_results,
        )

    def _calculate_statistical_tests(
        self, samples: Dict[str, List[float]], labels: Tuple[str, str, str]
    ) -> List[GroupTest]:
        """KS-test every non-reference group against the reference"""

        raw: List[Dict[str, Any]] = []
        for label in labels:
            if label == self.reference:
                continue
            result = ks_test(
                samples[label],
                samples[self.reference],
                alternative=self.alternative,
                method=self.method,
            )
            raw.append({"group": label, "result": result})

        p_values = [entry["result"].p_value for entry in raw]
        corrected_p = multipletests(p_values, method=self.correction)[1]

        tests = []
        for entry, p_adjusted in zip(raw, corrected_p):
            result = entry["result"]
            tests.append(
                GroupTest(
                    group=entry["group"],
                    reference=self.reference,
                    statistic=result.statistic,
                    p_value=result.p_value,
                    p_adjusted=float(p_adjusted),
                    significant=bool(p_adjusted < self.alpha),
                    group_sizes=result.group_sizes,
                    alternative=result.alternative,
                )
            )

        for test in tests:
            significance = ""
            if test.p_adjusted < 0.001:
                significance = " ***"
            elif test.p_adjusted < 0.01:
                significance = " **"
            elif test.p_adjusted < 0.05:
                significance = " *"

            logger.debug(
                f"{test.group} vs {test.reference}: D = {test.statistic:.4f}, "
                f"p = {test.p_value:.4g}, p_adj = {test.p_adjusted:.4g}{significance}"
            )

        return tests
