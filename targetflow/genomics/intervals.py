"""
Genomic interval records and distance primitives

Peaks and regions are immutable records. Regions are anchored at their
transcription start site equivalent: ``start`` on the plus (or unknown)
strand and ``end`` on the minus strand.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from ..exceptions import InvalidIntervalError, validate_numeric_param

DEFAULT_FLANK_WINDOW = 100000
DEFAULT_DECAY_CONSTANT = 100000.0

UNKNOWN_STRAND = "*"
_STRAND_ALIASES = {"+": "+", "-": "-", "*": "*", ".": "*", "": "*", None: "*"}


def normalize_strand(strand: Optional[str]) -> str:
    """Map strand notations onto ``+``, ``-`` or ``*``"""
    try:
        return _STRAND_ALIASES[strand]
    except KeyError:
        raise InvalidIntervalError(
            f"Unknown strand '{strand}'; expected one of '+', '-', '*', '.'"
        ) from None


@dataclass(frozen=True)
class Interval:
    """A stranded genomic interval"""

    chromosome: str
    start: int
    end: int
    strand: str = UNKNOWN_STRAND

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidIntervalError(
                f"Interval start {self.start} exceeds end {self.end} "
                f"on {self.chromosome}"
            )
        object.__setattr__(self, "strand", normalize_strand(self.strand))

    @property
    def width(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Peak(Interval):
    """A ChIP-seq peak with its assay signal"""

    signal: float = 1.0
    peak_id: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        if self.signal != self.signal or self.signal < 0:
            raise InvalidIntervalError(
                f"Peak signal must be a non-negative number, got {self.signal}"
            )


@dataclass(frozen=True)
class Region(Interval):
    """A candidate regulatory region (e.g. a transcript) with expression statistics"""

    region_id: str = ""
    gene_id: str = ""
    statistics: Mapping[str, float] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(
            self, "statistics", MappingProxyType(dict(self.statistics))
        )

    def __reduce__(self):
        # mappingproxy is not picklable
        return (
            _rebuild_region,
            (
                self.chromosome,
                self.start,
                self.end,
                self.strand,
                self.region_id,
                self.gene_id,
                dict(self.statistics),
            ),
        )

    def statistic(self, key: str) -> Optional[float]:
        """Finite value of a statistic, or None when missing"""
        value = self.statistics.get(key)
        if value is None:
            return None
        value = float(value)
        return value if math.isfinite(value) else None


def _rebuild_region(chromosome, start, end, strand, region_id, gene_id, statistics):
    return Region(chromosome, start, end, strand, region_id, gene_id, statistics)


def overlaps(a: Interval, b: Interval) -> bool:
    """Whether two intervals share a chromosome and intersect (half-open)"""
    return a.chromosome == b.chromosome and a.start < b.end and b.start < a.end


def midpoint(interval: Interval) -> float:
    return (interval.start + interval.end) / 2


def anchor(region: Interval) -> int:
    """Strand-aware 5' boundary of a region"""
    if region.strand == "-":
        return region.end
    return region.start


def distance_to_anchor(peak: Interval, region: Interval) -> float:
    """Absolute distance in bp between a peak midpoint and a region anchor"""
    return abs(midpoint(peak) - anchor(region))


def decay(distance: float, decay_constant: float = DEFAULT_DECAY_CONSTANT) -> float:
    """
    Exponential distance weight ``2 ** (-|d| / D)``

    The weight halves every ``decay_constant`` base pairs, so a peak at the
    anchor keeps its full signal.
    """
    validate_numeric_param(decay_constant, "decay_constant", min_val=0, exclusive_min=True)
    return 2.0 ** (-abs(distance) / decay_constant)


_CHROM_ORDER = {f"chr{i}": i for i in range(1, 23)}
_CHROM_ORDER.update({"chrX": 23, "chrY": 24, "chrM": 25, "chrMT": 25})


def sort_chromosomes(chroms: List[str]) -> List[str]:
    """Sort chromosome names in natural order (1,2,...,22,X,Y,M)"""

    def _sort_key(c: str) -> Tuple[int, str]:
        if c in _CHROM_ORDER:
            return (_CHROM_ORDER[c], c)
        stripped = c[3:] if c.startswith("chr") else c
        if f"chr{stripped}" in _CHROM_ORDER:
            return (_CHROM_ORDER[f"chr{stripped}"], c)
        return (100, c)

    return sorted(chroms, key=_sort_key)
