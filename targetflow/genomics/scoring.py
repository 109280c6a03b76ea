"""
Regulatory potential scoring and target ranking

Aggregates assigned peak scores per gene (or region), ranks the resulting
regulatory potential and pairs it with the gene's expression statistic.
Two statistic names switch to product mode, where the sign of
``stat_a * stat_b`` tells whether two factors act in the same direction.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.stats import rankdata

from ..config import TIE_METHODS, Config
from ..exceptions import (InvalidParameterError, MissingStatisticError,
                          validate_choice)
from ..utils import get_logger
from .assignment import (AssignedPeak, associated_peaks,
                         validate_assignment_params)
from .intervals import (DEFAULT_DECAY_CONSTANT, DEFAULT_FLANK_WINDOW, Peak,
                        Region)

logger = get_logger(__name__)

StatKey = Union[str, Sequence[str]]


@dataclass(frozen=True)
class Target:
    """A ranked candidate target gene"""

    gene_id: str
    score: float
    score_rank: Union[int, float]
    rank: int
    stat: float
    region_id: str
    distance: float
    n_peaks: int


@dataclass
class ScoringResult:
    """Targets together with the intermediate assignments and match counts"""

    targets: List[Target]
    assigned_peaks: List[AssignedPeak]
    unmatched_binding: int
    unmatched_expression: int

    @property
    def n_targets(self) -> int:
        return len(self.targets)


def normalize_stat_key(stat_key: StatKey) -> Tuple[str, ...]:
    """Return the statistic names as a tuple of one or two strings"""
    if isinstance(stat_key, str) and stat_key:
        return (stat_key,)
    if (
        isinstance(stat_key, (list, tuple))
        and len(stat_key) == 2
        and all(isinstance(key, str) and key for key in stat_key)
    ):
        return tuple(stat_key)
    raise InvalidParameterError(
        "stat_key", stat_key, "a statistic name or a pair of statistic names"
    )


def validate_stat_key(regions: Sequence[Region], stat_keys: Tuple[str, ...]) -> None:
    """Raise MissingStatisticError when a statistic is absent from every region"""
    available = set()
    for region in regions:
        available.update(region.statistics.keys())
    for key in stat_keys:
        if key not in available:
            raise MissingStatisticError(key, available)


def _select_best(assigned: Sequence[AssignedPeak]) -> Dict[str, AssignedPeak]:
    """Best assignment per key: max peak_score, then region_id, then distance"""
    best: Dict[str, AssignedPeak] = {}
    for item in assigned:
        current = best.get(item.key)
        if current is None:
            best[item.key] = item
            continue
        if (-item.peak_score, item.region_id, item.distance) < (
            -current.peak_score,
            current.region_id,
            current.distance,
        ):
            best[item.key] = item
    return best


def _key_statistic(
    regions: Sequence[Region],
    region_indices: List[int],
    best_index: int,
    stat_keys: Tuple[str, ...],
) -> Optional[float]:
    """Statistic (or product of statistics) for one aggregation key"""
    ordered = [best_index] + [i for i in region_indices if i != best_index]
    value = 1.0
    for key in stat_keys:
        found = None
        for index in ordered:
            found = regions[index].statistic(key)
            if found is not None:
                break
        if found is None:
            return None
        value *= found
    return value


def score_targets(
    peaks: Sequence[Peak],
    regions: Sequence[Region],
    region_key: str = "gene_id",
    stat_key: StatKey = "fc",
    flank_window: float = DEFAULT_FLANK_WINDOW,
    decay_constant: float = DEFAULT_DECAY_CONSTANT,
    tie_method: str = "ordinal",
    n_jobs: int = 1,
) -> ScoringResult:
    """
    Score, rank and pair binding potential with expression statistics

    Args:
        peaks: Peak records
        regions: Region records carrying expression statistics
        region_key: Aggregate per "gene_id" or per "region_id"
        stat_key: One statistic name, or two names for product mode
        flank_window: Assignment window around region anchors (bp)
        decay_constant: Distance (bp) over which a peak score halves
        tie_method: "ordinal" (first appearance wins) or "average"
        n_jobs: Number of joblib workers used for peak assignment

    Returns:
        ScoringResult with targets ordered by score_rank
    """
    validate_assignment_params(region_key, flank_window, decay_constant)
    validate_choice(tie_method, "tie_method", TIE_METHODS)
    stat_keys = normalize_stat_key(stat_key)

    if not regions:
        return ScoringResult([], [], 0, 0)
    validate_stat_key(regions, stat_keys)

    assigned = associated_peaks(
        peaks,
        regions,
        region_key=region_key,
        flank_window=flank_window,
        decay_constant=decay_constant,
        n_jobs=n_jobs,
    )
    best = _select_best(assigned)

    key_regions: Dict[str, List[int]] = OrderedDict()
    for index, region in enumerate(regions):
        key_regions.setdefault(getattr(region, region_key), []).append(index)

    peaks_per_key: Dict[str, set] = {}
    for item in assigned:
        peaks_per_key.setdefault(item.key, set()).add(item.peak_index)

    rows = []
    unmatched_binding = 0
    unmatched_expression = 0
    for key, region_indices in key_regions.items():
        if key not in best:
            if _key_statistic(regions, region_indices, region_indices[0], stat_keys) is not None:
                unmatched_expression += 1
            continue

        winner = best[key]
        stat = _key_statistic(regions, region_indices, winner.region_index, stat_keys)
        if stat is None:
            unmatched_binding += 1
            continue
        rows.append((key, winner, stat))

    logger.info(
        f"Scored {len(rows)} targets by {region_key}; "
        f"{unmatched_binding} bound without statistics, "
        f"{unmatched_expression} with statistics but unbound"
    )

    if not rows:
        return ScoringResult([], assigned, unmatched_binding, unmatched_expression)

    scores = np.array([winner.peak_score for _, winner, _ in rows])
    stats = np.array([stat for _, _, stat in rows])

    score_ranks = rankdata(-scores, method=tie_method)
    stat_ranks = rankdata(stats, method="ordinal")

    targets = []
    for (key, winner, stat), score_rank, stat_rank in zip(rows, score_ranks, stat_ranks):
        targets.append(
            Target(
                gene_id=key,
                score=winner.peak_score,
                score_rank=int(score_rank) if tie_method == "ordinal" else float(score_rank),
                rank=int(stat_rank),
                stat=float(stat),
                region_id=winner.region_id,
                distance=winner.distance,
                n_peaks=len(peaks_per_key[key]),
            )
        )

    # stable, so average-rank ties keep first-appearance order
    targets.sort(key=lambda target: target.score_rank)

    return ScoringResult(targets, assigned, unmatched_binding, unmatched_expression)


def direct_targets(
    peaks: Sequence[Peak],
    regions: Sequence[Region],
    region_key: str = "gene_id",
    stat_key: StatKey = "fc",
    **kwargs,
) -> List[Target]:
    """Ranked targets of a factor; see :func:`score_targets` for arguments"""
    return score_targets(
        peaks, regions, region_key=region_key, stat_key=stat_key, **kwargs
    ).targets


class RegulatoryScorer:
    """Config-driven wrapper around :func:`score_targets`"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

        self.scoring_params = self.config.scoring
        self.region_key = self.scoring_params.get("region_key", "gene_id")
        self.stat_key = self.scoring_params.get("stat_key", "fc")
        self.tie_method = self.scoring_params.get("tie_method", "ordinal")

        self.flank_window = self.config.assignment.get(
            "flank_window", DEFAULT_FLANK_WINDOW
        )
        self.decay_constant = self.config.assignment.get(
            "decay_constant", DEFAULT_DECAY_CONSTANT
        )

    def score(
        self,
        peaks: Sequence[Peak],
        regions: Sequence[Region],
        stat_key: Optional[StatKey] = None,
    ) -> ScoringResult:
        """Score targets, optionally overriding the configured statistic"""
        return score_targets(
            peaks,
            regions,
            region_key=self.region_key,
            stat_key=stat_key if stat_key is not None else self.stat_key,
            flank_window=self.flank_window,
            decay_constant=self.decay_constant,
            tie_method=self.tie_method,
            n_jobs=self.config.n_jobs,
        )
