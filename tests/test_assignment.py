"""
Tests for peak-to-region assignment.

Tests cover:
- Distance and decayed score of single assignments
- Fan-out to every region inside the window
- Window boundaries, chromosomes and strands
- Parameter validation and empty inputs
- Config-driven PeakAssigner and parallel partitions
"""

import numpy as np
import pytest

from targetflow.config import Config
from targetflow.exceptions import InvalidParameterError
from targetflow.genomics import Peak, PeakAssigner, Region, associated_peaks


def _region(chrom, start, strand="+", region_id="tx1", gene_id="g1"):
    return Region(chrom, start, start + 1000, strand, region_id=region_id,
                  gene_id=gene_id, statistics={"fc": 1.0})


class TestAssociatedPeaks:
    def test_peak_at_anchor_keeps_full_signal(self):
        peaks = [Peak("chr1", 1000, 1000, "+", signal=10.0)]
        regions = [_region("chr1", 1000)]

        assigned = associated_peaks(peaks, regions)

        assert len(assigned) == 1
        assert assigned[0].distance == 0
        assert assigned[0].peak_score == 10.0
        assert assigned[0].region_id == "tx1"
        assert assigned[0].gene_id == "g1"

    def test_score_decays_with_distance(self):
        peaks = [Peak("chr1", 100000, 100000, signal=8.0)]
        regions = [_region("chr1", 0)]

        assigned = associated_peaks(peaks, regions)

        assert assigned[0].distance == 100000
        assert assigned[0].peak_score == pytest.approx(4.0)

    def test_closer_peak_scores_higher(self):
        peaks = [
            Peak("chr1", 5000, 5000, signal=3.0),
            Peak("chr1", 50000, 50000, signal=3.0),
        ]
        regions = [_region("chr1", 0)]

        near, far = associated_peaks(peaks, regions)

        assert near.distance < far.distance
        assert near.peak_score >= far.peak_score

    def test_fan_out_to_every_region_in_window(self):
        peaks = [Peak("chr1", 50000, 50000, signal=1.0)]
        regions = [
            _region("chr1", 10000, region_id="tx1", gene_id="g1"),
            _region("chr1", 90000, region_id="tx2", gene_id="g2"),
            _region("chr1", 400000, region_id="tx3", gene_id="g3"),
        ]

        assigned = associated_peaks(peaks, regions)

        assert [item.region_id for item in assigned] == ["tx1", "tx2"]
        assert [item.distance for item in assigned] == [40000, 40000]

    def test_window_is_inclusive(self):
        peaks = [Peak("chr1", 0, 0, signal=1.0)]
        regions = [
            _region("chr1", 100000, region_id="edge"),
            _region("chr1", 100001, region_id="outside"),
        ]

        assigned = associated_peaks(peaks, regions)

        assert [item.region_id for item in assigned] == ["edge"]

    def test_custom_window(self):
        peaks = [Peak("chr1", 0, 0, signal=1.0)]
        regions = [_region("chr1", 600)]

        assert associated_peaks(peaks, regions, flank_window=500) == []
        assert len(associated_peaks(peaks, regions, flank_window=600)) == 1

    def test_numpy_scalar_parameters(self):
        peaks = [Peak("chr1", 1000, 1000, signal=10.0)]
        regions = [_region("chr1", 1000)]

        assigned = associated_peaks(
            peaks,
            regions,
            flank_window=np.int64(50000),
            decay_constant=np.float64(50000.0),
        )

        assert len(assigned) == 1
        assert assigned[0].peak_score == 10.0

    def test_peak_without_region_is_dropped(self):
        peaks = [
            Peak("chr1", 0, 0, signal=1.0),
            Peak("chr1", 5_000_000, 5_000_000, signal=1.0),
        ]
        regions = [_region("chr1", 100)]

        assigned = associated_peaks(peaks, regions)

        assert [item.peak_index for item in assigned] == [0]

    def test_chromosomes_never_cross(self):
        peaks = [Peak("chr2", 1000, 1000, signal=1.0)]
        regions = [_region("chr1", 1000)]

        assert associated_peaks(peaks, regions) == []

    def test_minus_strand_anchor_is_end(self):
        peaks = [Peak("chr1", 2000, 2000, signal=1.0)]
        regions = [_region("chr1", 1000, strand="-")]

        assigned = associated_peaks(peaks, regions)

        assert assigned[0].distance == 0

    def test_unknown_strand_treated_as_plus(self):
        peaks = [Peak("chr1", 1000, 1000, signal=1.0)]
        regions = [_region("chr1", 1000, strand=".")]

        assert associated_peaks(peaks, regions)[0].distance == 0

    def test_peak_ref_defaults_to_position(self):
        peaks = [
            Peak("chr1", 0, 10, signal=1.0, peak_id="summit_a"),
            Peak("chr1", 20, 30, signal=1.0),
        ]
        regions = [_region("chr1", 0)]

        assigned = associated_peaks(peaks, regions)

        assert [item.peak_ref for item in assigned] == ["summit_a", "peak_2"]

    def test_region_key_selects_aggregation_key(self):
        peaks = [Peak("chr1", 0, 10, signal=1.0)]
        regions = [_region("chr1", 0, region_id="tx9", gene_id="g9")]

        by_gene = associated_peaks(peaks, regions, region_key="gene_id")
        by_region = associated_peaks(peaks, regions, region_key="region_id")

        assert by_gene[0].key == "g9"
        assert by_region[0].key == "tx9"

    def test_output_order_follows_inputs(self):
        peaks = [
            Peak("chr2", 0, 10, signal=1.0),
            Peak("chr1", 0, 10, signal=1.0),
        ]
        regions = [
            _region("chr1", 500, region_id="b"),
            _region("chr1", 100, region_id="a"),
            _region("chr2", 100, region_id="c"),
        ]

        assigned = associated_peaks(peaks, regions)

        assert [(item.peak_index, item.region_index) for item in assigned] == [
            (0, 2), (1, 0), (1, 1)
        ]


class TestEdgeCases:
    def test_empty_peaks(self):
        assert associated_peaks([], [_region("chr1", 0)]) == []

    def test_empty_regions(self):
        assert associated_peaks([Peak("chr1", 0, 10)], []) == []

    def test_negative_window_rejected(self):
        with pytest.raises(InvalidParameterError):
            associated_peaks([], [], flank_window=-1)

    def test_zero_decay_constant_rejected(self):
        with pytest.raises(InvalidParameterError):
            associated_peaks([], [], decay_constant=0)

    def test_unknown_region_key_rejected(self):
        with pytest.raises(InvalidParameterError):
            associated_peaks([], [], region_key="transcript")


class TestParallelAssignment:
    def test_threads_match_serial(self, factor_peaks, factor_regions):
        extra_peaks = factor_peaks + [Peak("chr2", 500, 700, signal=4.0)]
        extra_regions = factor_regions + [_region("chr2", 600, region_id="tx_b", gene_id="gb")]

        serial = associated_peaks(extra_peaks, extra_regions, n_jobs=1)
        parallel = associated_peaks(extra_peaks, extra_regions, n_jobs=2)

        assert parallel == serial


class TestPeakAssigner:
    def test_uses_config_window(self):
        config = Config(assignment={"flank_window": 100, "decay_constant": 50.0})
        assigner = PeakAssigner(config)

        peaks = [Peak("chr1", 0, 0, signal=4.0)]
        regions = [_region("chr1", 50), _region("chr1", 150, region_id="far")]

        assigned = assigner.assign(peaks, regions)

        assert len(assigned) == 1
        assert assigned[0].peak_score == pytest.approx(2.0)

    def test_defaults(self):
        assigner = PeakAssigner()
        assert assigner.flank_window == 100000
        assert assigner.decay_constant == 100000.0
        assert assigner.region_key == "gene_id"
