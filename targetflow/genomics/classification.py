"""
Three-way classification of targets by their expression statistic
"""

from collections import OrderedDict
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..exceptions import InsufficientDataError, ValidationError
from ..utils import get_logger
from .scoring import Target

logger = get_logger(__name__)

SINGLE_FACTOR_LABELS = ("Down", "None", "Up")
COMBINED_LABELS = ("Competitive", "None", "Cooperative")

N_GROUPS = 3


def _as_array(values: Sequence[float]) -> np.ndarray:
    array = np.asarray(values, dtype=float)
    if np.isnan(array).any():
        raise ValidationError("Cannot classify NaN values")

    n_distinct = len(np.unique(array))
    if n_distinct < 2:
        raise InsufficientDataError(2, n_distinct, "group classification (distinct values)")
    return array


def bin_edges(values: Sequence[float]) -> np.ndarray:
    """Equal-width bin edges ``min + k * (max - min) / 3`` for k = 0..3"""
    array = _as_array(values)
    low, high = array.min(), array.max()
    width = (high - low) / N_GROUPS
    edges = low + np.arange(N_GROUPS + 1) * width
    edges[-1] = high
    return edges


def classify(
    values: Sequence[float], labels: Tuple[str, str, str] = SINGLE_FACTOR_LABELS
) -> List[str]:
    """
    Bin values into three equal-width intervals over their observed range

    A value on an inner boundary goes to the lower bin; the global minimum
    lands in the first bin and the global maximum in the last.

    Args:
        values: Statistic values to classify
        labels: Labels for the low, middle and high bins

    Returns:
        One label per value, in input order
    """
    if len(labels) != N_GROUPS:
        raise ValidationError(f"Expected {N_GROUPS} labels, got {len(labels)}")

    edges = bin_edges(values)
    array = np.asarray(values, dtype=float)

    indices = np.searchsorted(edges[1:-1], array, side="left")
    indices[array == edges[-1]] = N_GROUPS - 1

    return [labels[i] for i in indices]


def group_targets(
    targets: Sequence[Target], labels: Tuple[str, str, str] = SINGLE_FACTOR_LABELS
) -> "OrderedDict[str, List[Target]]":
    """Partition targets by the label of their statistic; every label is present"""
    assigned = classify([target.stat for target in targets], labels)
    return partition_targets(targets, assigned, labels)


def partition_targets(
    targets: Sequence[Target], assigned: Sequence[str], labels: Tuple[str, str, str]
) -> "OrderedDict[str, List[Target]]":
    """Group targets under precomputed labels, keeping input order within groups"""
    groups: Dict[str, List[Target]] = OrderedDict((label, []) for label in labels)
    for target, label in zip(targets, assigned):
        groups[label].append(target)

    logger.debug(
        "Group sizes: "
        + ", ".join(f"{label}={len(members)}" for label, members in groups.items())
    )
    return groups
