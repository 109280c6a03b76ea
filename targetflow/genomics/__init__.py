"""
Genomics analysis module for TargetFlow

This module provides functionality for:
- Genomic interval records and TSS-anchored distances
- Peak-to-region assignment with exponential distance decay
- Regulatory potential scoring and target ranking
- Three-way classification of targets by expression statistic
- ECDF and Kolmogorov-Smirnov comparison of regulation groups
- Shared peaks and combined statistics for two factors
"""

from .assignment import AssignedPeak, PeakAssigner, associated_peaks
from .classification import (COMBINED_LABELS, SINGLE_FACTOR_LABELS, bin_edges,
                             classify, group_targets)
from .frames import (assigned_to_frame, peaks_from_frame, regions_from_frame,
                     targets_to_frame, tests_to_frame)
from .intervals import (Interval, Peak, Region, anchor, decay,
                        distance_to_anchor, midpoint, overlaps)
from .pairwise import (combined_regions, combined_stat_key, combined_targets,
                       shared_peaks)
from .scoring import (RegulatoryScorer, ScoringResult, Target, direct_targets,
                      score_targets)
from .statistical import (ECDF, ComparisonResult, GroupComparison, GroupTest,
                          KSTestResult, ecdf, ks_test)

__all__ = [
    "Interval",
    "Peak",
    "Region",
    "overlaps",
    "midpoint",
    "anchor",
    "distance_to_anchor",
    "decay",
    "AssignedPeak",
    "PeakAssigner",
    "associated_peaks",
    "Target",
    "ScoringResult",
    "RegulatoryScorer",
    "score_targets",
    "direct_targets",
    "SINGLE_FACTOR_LABELS",
    "COMBINED_LABELS",
    "bin_edges",
    "classify",
    "group_targets",
    "ECDF",
    "ecdf",
    "KSTestResult",
    "ks_test",
    "GroupTest",
    "ComparisonResult",
    "GroupComparison",
    "shared_peaks",
    "combined_regions",
    "combined_stat_key",
    "combined_targets",
    "peaks_from_frame",
    "regions_from_frame",
    "assigned_to_frame",
    "targets_to_frame",
    "tests_to_frame",
]
