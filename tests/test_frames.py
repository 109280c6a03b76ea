"""
Tests for DataFrame adapters.
"""

import pandas as pd
import pytest

from targetflow.exceptions import InvalidIntervalError, MissingColumnError
from targetflow.genomics import (assigned_to_frame, associated_peaks,
                                 direct_targets, frames, peaks_from_frame,
                                 regions_from_frame, targets_to_frame)
from targetflow.genomics.frames import detect_column
from targetflow.genomics.statistical import GroupComparison


class TestDetectColumn:
    def test_case_insensitive(self):
        df = pd.DataFrame({"Chrom": [], "Start": []})
        assert detect_column(df, ["chr", "chrom"]) == "Chrom"

    def test_optional_missing(self):
        assert detect_column(pd.DataFrame({"a": []}), ["b"]) is None

    def test_required_missing(self):
        with pytest.raises(MissingColumnError, match="chr"):
            detect_column(pd.DataFrame({"a": []}), ["chr"], required=True)


class TestPeaksFromFrame:
    def test_records(self, peak_table, factor_peaks):
        assert peaks_from_frame(peak_table) == factor_peaks

    def test_default_signal_and_strand(self):
        df = pd.DataFrame({"seqnames": ["chr1"], "start": [10], "end": [20]})

        (peak,) = peaks_from_frame(df)

        assert peak.signal == 1.0
        assert peak.strand == "*"
        assert peak.peak_id is None

    def test_missing_end(self):
        df = pd.DataFrame({"chr": ["chr1"], "start": [10]})
        with pytest.raises(MissingColumnError, match="end"):
            peaks_from_frame(df)

    def test_non_numeric_start(self):
        df = pd.DataFrame({"chr": ["chr1", "chr1"], "start": [10, "abc"], "end": [20, 30]})
        with pytest.raises(InvalidIntervalError, match="start value 'abc' in peaks row 1"):
            peaks_from_frame(df)

    def test_non_numeric_signal(self):
        df = pd.DataFrame({"chr": ["chr1"], "start": [10], "end": [20], "signal": ["high"]})
        with pytest.raises(InvalidIntervalError, match="signal"):
            peaks_from_frame(df)


class TestRegionsFromFrame:
    def test_records(self, region_table, factor_regions):
        regions = regions_from_frame(region_table)

        assert [r.region_id for r in regions] == [r.region_id for r in factor_regions]
        assert [dict(r.statistics) for r in regions] == [
            dict(r.statistics) for r in factor_regions
        ]

    def test_selected_statistics(self, region_table):
        regions = regions_from_frame(region_table, stat_columns=["fc"])
        assert set(regions[0].statistics) == {"fc"}

    def test_unknown_statistic_column(self, region_table):
        with pytest.raises(MissingColumnError, match="padj"):
            regions_from_frame(region_table, stat_columns=["padj"])

    def test_missing_gene_id(self, region_table):
        with pytest.raises(MissingColumnError, match="gene_id"):
            regions_from_frame(region_table.drop(columns=["gene_id"]))

    def test_region_id_fallback_and_missing_statistics(self):
        df = pd.DataFrame({
            "chr": ["chr1", "chr1"],
            "start": [100, 200],
            "end": [150, 250],
            "gene_id": ["g1", "g2"],
            "fc": [1.0, None],
        })

        regions = regions_from_frame(df)

        assert [r.region_id for r in regions] == ["region_0", "region_1"]
        assert dict(regions[1].statistics) == {}

    def test_missing_end_coordinate(self):
        df = pd.DataFrame({
            "chr": ["chr1"],
            "start": [100],
            "end": [None],
            "gene_id": ["g1"],
        })
        with pytest.raises(InvalidIntervalError, match="regions row 0"):
            regions_from_frame(df)

    def test_non_numeric_selected_statistic(self, region_table):
        table = region_table.assign(fc=region_table["fc"].astype(object))
        table.loc[0, "fc"] = "n/a"
        with pytest.raises(InvalidIntervalError, match="fc"):
            regions_from_frame(table, stat_columns=["fc"])


class TestExports:
    def test_assigned_frame(self, factor_peaks, factor_regions):
        df = assigned_to_frame(associated_peaks(factor_peaks, factor_regions))

        assert len(df) == len(factor_peaks)
        assert list(df["peak_ref"]) == [p.peak_id for p in factor_peaks]
        assert (df["distance"] == 0).all()

    def test_targets_frame_with_groups(self, factor_peaks, factor_regions):
        targets = direct_targets(factor_peaks, factor_regions)
        comparison = GroupComparison().compare(targets)

        df = targets_to_frame(targets, comparison.labels)

        assert list(df["score_rank"]) == list(range(1, 10))
        assert df.set_index("gene_id").loc["g1", "group"] == "Down"
        assert df.set_index("gene_id").loc["g9", "group"] == "Up"

    def test_empty_frames_keep_columns(self):
        assert "score_rank" in targets_to_frame([]).columns
        assert "p_adjusted" in frames.tests_to_frame([]).columns

    def test_tests_frame(self, factor_peaks, factor_regions):
        targets = direct_targets(factor_peaks, factor_regions)
        tests = GroupComparison().compare(targets).tests

        df = frames.tests_to_frame(tests)

        assert list(df["group"]) == ["Down", "Up"]
        assert list(df["n_group"]) == [3, 3]
        assert list(df["n_reference"]) == [3, 3]
