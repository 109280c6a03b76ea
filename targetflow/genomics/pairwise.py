"""
Two-factor combination

Builds the peaks bound by both factors and the regions carrying both
factors' statistics, so the single-factor scoring pipeline can rank shared
targets by the product of the two fold-changes.
"""

from collections import OrderedDict
from typing import Dict, List, Sequence, Tuple

from ..exceptions import InvalidParameterError
from ..utils import get_logger
from .intervals import Interval, Peak, Region, overlaps, sort_chromosomes
from .scoring import Target, direct_targets

logger = get_logger(__name__)


def _merge_runs(peaks: List[Peak]) -> List[list]:
    """Merge start-sorted peaks into disjoint [start, end, members] runs"""
    runs: List[list] = []
    for peak in peaks:
        if runs and peak.start <= runs[-1][1]:
            runs[-1][1] = max(runs[-1][1], peak.end)
            runs[-1][2].append(peak)
        else:
            runs.append([peak.start, peak.end, [peak]])
    return runs


def _max_overlapping_signal(members: List[Peak], piece: Interval) -> float:
    return max(peak.signal for peak in members if overlaps(peak, piece))


def _group_by_chromosome(peaks: Sequence[Peak]) -> Dict[str, List[Peak]]:
    groups: Dict[str, List[Peak]] = {}
    for peak in peaks:
        groups.setdefault(peak.chromosome, []).append(peak)
    return groups


def shared_peaks(peaks_a: Sequence[Peak], peaks_b: Sequence[Peak]) -> List[Peak]:
    """
    Disjoint intervals covered by peaks of both sets

    Pairwise intersections are merged into disjoint intervals. Each shared
    peak gets the id ``shared_<n>`` and a signal equal to the mean of the
    strongest overlapping peak of each set.

    Args:
        peaks_a: Peaks of the first factor
        peaks_b: Peaks of the second factor

    Returns:
        Shared peaks in natural chromosome order, then by start
    """
    by_chrom_a = _group_by_chromosome(peaks_a)
    by_chrom_b = _group_by_chromosome(peaks_b)

    shared: List[Peak] = []
    for chrom in sort_chromosomes([c for c in by_chrom_a if c in by_chrom_b]):
        runs_a = _merge_runs(sorted(by_chrom_a[chrom], key=lambda p: (p.start, p.end)))
        runs_b = _merge_runs(sorted(by_chrom_b[chrom], key=lambda p: (p.start, p.end)))

        # runs are disjoint and non-touching, so pieces need no further merging
        i = j = 0
        while i < len(runs_a) and j < len(runs_b):
            start_a, end_a, members_a = runs_a[i]
            start_b, end_b, members_b = runs_b[j]

            lo, hi = max(start_a, start_b), min(end_a, end_b)
            if lo < hi:
                piece = Interval(chrom, lo, hi)
                signal = (
                    _max_overlapping_signal(members_a, piece)
                    + _max_overlapping_signal(members_b, piece)
                ) / 2
                shared.append(
                    Peak(
                        chrom,
                        lo,
                        hi,
                        signal=signal,
                        peak_id=f"shared_{len(shared) + 1}",
                    )
                )

            if end_a <= end_b:
                i += 1
            else:
                j += 1

    logger.info(
        f"Found {len(shared)} shared peaks between sets of "
        f"{len(peaks_a)} and {len(peaks_b)} peaks"
    )
    return shared


def _validate_names(names: Tuple[str, str]) -> Tuple[str, str]:
    if len(names) != 2 or not all(names) or names[0] == names[1]:
        raise InvalidParameterError("names", names, "two distinct, non-empty factor names")
    return tuple(names)


def _gene_records(regions: Sequence[Region]) -> "OrderedDict[str, List[Region]]":
    records: Dict[str, List[Region]] = OrderedDict()
    for region in regions:
        records.setdefault(region.gene_id, []).append(region)
    return records


def _gene_statistics(regions: List[Region]) -> Dict[str, float]:
    """First finite value of every statistic across a gene's regions"""
    statistics: Dict[str, float] = {}
    for region in regions:
        for key in region.statistics:
            if key not in statistics:
                value = region.statistic(key)
                if value is not None:
                    statistics[key] = value
    return statistics


def combined_regions(
    regions_a: Sequence[Region],
    regions_b: Sequence[Region],
    names: Tuple[str, str] = ("A", "B"),
) -> List[Region]:
    """
    One region per gene present in both sets, carrying both factors' statistics

    Coordinates and region id come from the gene's first region in
    ``regions_a``; statistics are renamed ``<name>_<statistic>``.
    """
    name_a, name_b = _validate_names(names)

    genes_a = _gene_records(regions_a)
    genes_b = _gene_records(regions_b)

    combined = []
    for gene_id, members in genes_a.items():
        if gene_id not in genes_b:
            continue
        first = members[0]
        statistics = {
            f"{name_a}_{key}": value for key, value in _gene_statistics(members).items()
        }
        statistics.update(
            {
                f"{name_b}_{key}": value
                for key, value in _gene_statistics(genes_b[gene_id]).items()
            }
        )
        combined.append(
            Region(
                first.chromosome,
                first.start,
                first.end,
                first.strand,
                region_id=first.region_id,
                gene_id=gene_id,
                statistics=statistics,
            )
        )

    logger.info(
        f"Combined {len(combined)} genes shared by {name_a} ({len(genes_a)} genes) "
        f"and {name_b} ({len(genes_b)} genes)"
    )
    return combined


def combined_stat_key(names: Tuple[str, str] = ("A", "B"), stat: str = "fc") -> Tuple[str, str]:
    """Names of the two per-factor statistics multiplied in product mode"""
    name_a, name_b = _validate_names(names)
    return (f"{name_a}_{stat}", f"{name_b}_{stat}")


def combined_targets(
    peaks_a: Sequence[Peak],
    peaks_b: Sequence[Peak],
    regions_a: Sequence[Region],
    regions_b: Sequence[Region],
    names: Tuple[str, str] = ("A", "B"),
    stat: str = "fc",
    **kwargs,
) -> List[Target]:
    """Rank shared targets of two factors by the product of their statistics"""
    return direct_targets(
        shared_peaks(peaks_a, peaks_b),
        combined_regions(regions_a, regions_b, names),
        stat_key=combined_stat_key(names, stat),
        **kwargs,
    )
