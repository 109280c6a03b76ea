"""
Shared test fixtures for the TargetFlow test suite.
"""

import logging

import pandas as pd
import pytest

from targetflow.genomics import Peak, Region

# Genes sit one megabase apart, so no peak reaches a second gene
GENE_SPACING = 1_000_000

FACTOR_FC = [-3.0, -2.5, -2.0, 0.0, 0.1, -0.1, 2.0, 2.5, 3.0]


def _anchor_position(i: int) -> int:
    return (i + 1) * GENE_SPACING


# ============================================================================
# Single-factor records
# ============================================================================


@pytest.fixture
def factor_regions():
    """Nine genes with fold-changes spanning Down, None and Up groups."""
    return [
        Region(
            "chr1",
            _anchor_position(i),
            _anchor_position(i) + 5000,
            "+",
            region_id=f"tx{i + 1}",
            gene_id=f"g{i + 1}",
            statistics={"fc": fc, "pvalue": 0.01},
        )
        for i, fc in enumerate(FACTOR_FC)
    ]


@pytest.fixture
def factor_peaks():
    """One peak centred on every gene anchor, stronger for later genes."""
    return [
        Peak(
            "chr1",
            _anchor_position(i) - 100,
            _anchor_position(i) + 100,
            signal=10.0 + i,
            peak_id=f"p{i + 1}",
        )
        for i in range(len(FACTOR_FC))
    ]


# ============================================================================
# Two-factor records
# ============================================================================

PAIR_FC_B = [-3.0, -2.5, 0.0, 0.2, 2.5, 3.0]


@pytest.fixture
def pair_regions():
    """Regions of two factors; fc_A = 2 everywhere so products follow fc_B."""
    regions_a = []
    regions_b = []
    for i, fc_b in enumerate(PAIR_FC_B):
        start = _anchor_position(i)
        regions_a.append(
            Region("chr2", start, start + 5000, "+", region_id=f"tx{i + 1}",
                   gene_id=f"g{i + 1}", statistics={"fc": 2.0})
        )
        regions_b.append(
            Region("chr2", start, start + 5000, "+", region_id=f"tx{i + 1}",
                   gene_id=f"g{i + 1}", statistics={"fc": fc_b})
        )
    return regions_a, regions_b


@pytest.fixture
def pair_peaks():
    """Overlapping peaks of two factors at every gene anchor."""
    peaks_a = []
    peaks_b = []
    for i in range(len(PAIR_FC_B)):
        anchor = _anchor_position(i)
        peaks_a.append(Peak("chr2", anchor - 100, anchor + 100, signal=20.0 + i))
        peaks_b.append(Peak("chr2", anchor - 50, anchor + 150, signal=10.0))
    return peaks_a, peaks_b


# ============================================================================
# Tables
# ============================================================================


@pytest.fixture
def peak_table(factor_peaks):
    return pd.DataFrame(
        {
            "chr": [p.chromosome for p in factor_peaks],
            "start": [p.start for p in factor_peaks],
            "end": [p.end for p in factor_peaks],
            "name": [p.peak_id for p in factor_peaks],
            "signal": [p.signal for p in factor_peaks],
        }
    )


@pytest.fixture
def region_table(factor_regions):
    return pd.DataFrame(
        {
            "chr": [r.chromosome for r in factor_regions],
            "start": [r.start for r in factor_regions],
            "end": [r.end for r in factor_regions],
            "strand": [r.strand for r in factor_regions],
            "region_id": [r.region_id for r in factor_regions],
            "gene_id": [r.gene_id for r in factor_regions],
            "fc": [r.statistics["fc"] for r in factor_regions],
            "pvalue": [r.statistics["pvalue"] for r in factor_regions],
        }
    )


# ============================================================================
# Logging
# ============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore root handlers replaced by setup_logging during a test."""
    root = logging.getLogger()
    package_logger = logging.getLogger("targetflow")
    handlers = list(root.handlers)
    levels = (root.level, package_logger.level)
    yield
    root.handlers[:] = handlers
    root.setLevel(levels[0])
    package_logger.setLevel(levels[1])
