"""
Peak-to-region assignment

Associates every peak with each region whose anchor lies within a flanking
window of the peak midpoint and weights the peak signal by an exponential
distance decay. Lookups are done per chromosome with binary search over
the sorted region anchors.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from ..config import REGION_KEYS, Config
from ..exceptions import validate_choice, validate_numeric_param
from ..utils import get_logger
from .intervals import (DEFAULT_DECAY_CONSTANT, DEFAULT_FLANK_WINDOW, Peak,
                        Region, anchor, midpoint, sort_chromosomes)

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssignedPeak:
    """A peak associated with one candidate region"""

    peak_ref: str
    region_id: str
    gene_id: str
    key: str  # aggregation key value (gene_id or region_id)
    distance: float
    peak_score: float
    peak_index: int
    region_index: int


def _partition_by_chromosome(records: Sequence) -> Dict[str, List[Tuple[int, object]]]:
    """Group (input index, record) pairs by chromosome, keeping input order"""
    partitions: Dict[str, List[Tuple[int, object]]] = OrderedDict()
    for index, record in enumerate(records):
        partitions.setdefault(record.chromosome, []).append((index, record))
    return partitions


def _assign_chromosome(
    peak_items: List[Tuple[int, Peak]],
    region_items: List[Tuple[int, Region]],
    region_key: str,
    flank_window: float,
    decay_constant: float,
) -> List[AssignedPeak]:
    """Assign the peaks of one chromosome to that chromosome's regions"""

    anchors = np.array([anchor(region) for _, region in region_items], dtype=float)
    order = np.argsort(anchors, kind="stable")
    sorted_anchors = anchors[order]

    assigned = []
    for peak_index, peak in peak_items:
        center = midpoint(peak)
        lo = np.searchsorted(sorted_anchors, center - flank_window, side="left")
        hi = np.searchsorted(sorted_anchors, center + flank_window, side="right")
        if lo >= hi:
            continue

        # back to region input order
        hits = np.sort(order[lo:hi])
        distances = np.abs(center - anchors[hits])
        scores = peak.signal * np.power(2.0, -distances / decay_constant)
        peak_ref = peak.peak_id or f"peak_{peak_index + 1}"

        for local, distance, score in zip(hits, distances, scores):
            region_index, region = region_items[local]
            assigned.append(
                AssignedPeak(
                    peak_ref=peak_ref,
                    region_id=region.region_id,
                    gene_id=region.gene_id,
                    key=getattr(region, region_key),
                    distance=float(distance),
                    peak_score=float(score),
                    peak_index=peak_index,
                    region_index=region_index,
                )
            )

    return assigned


def validate_assignment_params(
    region_key: str, flank_window: float, decay_constant: float
) -> None:
    """Raise InvalidParameterError for unusable assignment parameters"""
    validate_choice(region_key, "region_key", REGION_KEYS)
    validate_numeric_param(flank_window, "flank_window", min_val=0)
    validate_numeric_param(
        decay_constant, "decay_constant", min_val=0, exclusive_min=True
    )


def associated_peaks(
    peaks: Sequence[Peak],
    regions: Sequence[Region],
    region_key: str = "gene_id",
    flank_window: float = DEFAULT_FLANK_WINDOW,
    decay_constant: float = DEFAULT_DECAY_CONSTANT,
    n_jobs: int = 1,
) -> List[AssignedPeak]:
    """
    Associate peaks with every region anchored within the flanking window

    Args:
        peaks: Peak records
        regions: Candidate region records
        region_key: Region attribute used as aggregation key downstream
        flank_window: Maximum peak-midpoint to anchor distance (bp, inclusive)
        decay_constant: Distance (bp) over which the peak score halves
        n_jobs: Number of joblib workers for per-chromosome partitions

    Returns:
        Assigned peaks ordered by peak input order, then region input order
    """
    validate_assignment_params(region_key, flank_window, decay_constant)

    if not peaks or not regions:
        logger.debug("Empty peak or region set; no peaks assigned")
        return []

    peak_partitions = _partition_by_chromosome(peaks)
    region_partitions = _partition_by_chromosome(regions)
    chromosomes = sort_chromosomes(
        [chrom for chrom in peak_partitions if chrom in region_partitions]
    )

    logger.debug(
        f"Assigning {len(peaks)} peaks to {len(regions)} regions "
        f"on {len(chromosomes)} shared chromosomes"
    )

    if n_jobs == 1 or len(chromosomes) < 2:
        partitions = [
            _assign_chromosome(
                peak_partitions[chrom],
                region_partitions[chrom],
                region_key,
                flank_window,
                decay_constant,
            )
            for chrom in chromosomes
        ]
    else:
        partitions = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_assign_chromosome)(
                peak_partitions[chrom],
                region_partitions[chrom],
                region_key,
                flank_window,
                decay_constant,
            )
            for chrom in chromosomes
        )

    assigned = [item for partition in partitions for item in partition]
    assigned.sort(key=lambda item: (item.peak_index, item.region_index))

    n_bound = len({item.peak_index for item in assigned})
    logger.info(
        f"Assigned {n_bound}/{len(peaks)} peaks to regions "
        f"({len(assigned)} peak-region pairs)"
    )

    return assigned


class PeakAssigner:
    """Config-driven wrapper around :func:`associated_peaks`"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

        self.assignment_params = self.config.assignment
        self.flank_window = self.assignment_params.get(
            "flank_window", DEFAULT_FLANK_WINDOW
        )
        self.decay_constant = self.assignment_params.get(
            "decay_constant", DEFAULT_DECAY_CONSTANT
        )
        self.region_key = self.config.scoring.get("region_key", "gene_id")
        self.n_jobs = self.config.n_jobs

    def assign(
        self, peaks: Sequence[Peak], regions: Sequence[Region]
    ) -> List[AssignedPeak]:
        """Assign peaks to regions using the configured window and decay"""
        return associated_peaks(
            peaks,
            regions,
            region_key=self.region_key,
            flank_window=self.flank_window,
            decay_constant=self.decay_constant,
            n_jobs=self.n_jobs,
        )
