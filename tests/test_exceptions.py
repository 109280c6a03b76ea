"""
Unit tests for custom exception classes and validation helpers.
"""

import numpy as np
import pytest

from targetflow.exceptions import (InsufficientDataError, InvalidIntervalError,
                                   InvalidParameterError, MissingColumnError,
                                   MissingStatisticError, TargetFlowError,
                                   ValidationError, validate_choice,
                                   validate_numeric_param)

# ============================================================================
# Exception hierarchy
# ============================================================================


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ValidationError,
            InvalidIntervalError,
            MissingColumnError,
            InvalidParameterError,
            MissingStatisticError,
            InsufficientDataError,
        ],
    )
    def test_all_inherit_from_base(self, exc_class):
        assert issubclass(exc_class, TargetFlowError)

    def test_missing_statistic_is_invalid_parameter(self):
        assert issubclass(MissingStatisticError, InvalidParameterError)


class TestExceptionMessages:
    def test_missing_column(self):
        err = MissingColumnError("gene_id", "regions", available=["chr", "start"])
        assert "gene_id" in str(err)
        assert "regions" in str(err)
        assert err.available == ["chr", "start"]

    def test_invalid_parameter(self):
        err = InvalidParameterError("flank_window", -1, ">= 0")
        assert err.param == "flank_window"
        assert err.value == -1
        assert ">= 0" in str(err)

    def test_missing_statistic(self):
        err = MissingStatisticError("padj", {"pvalue", "fc"})
        assert err.stat_key == "padj"
        assert err.available == ["fc", "pvalue"]
        assert "padj" in str(err)

    def test_insufficient_data(self):
        err = InsufficientDataError(2, 1, "classification")
        assert err.required == 2
        assert err.actual == 1
        assert "classification" in str(err)


# ============================================================================
# Validation helpers
# ============================================================================


class TestValidateNumericParam:
    def test_valid(self):
        validate_numeric_param(5, "x", min_val=0, max_val=10)

    def test_below_minimum(self):
        with pytest.raises(InvalidParameterError, match=">= 0"):
            validate_numeric_param(-1, "x", min_val=0)

    def test_exclusive_minimum(self):
        with pytest.raises(InvalidParameterError, match="> 0"):
            validate_numeric_param(0, "x", min_val=0, exclusive_min=True)

    def test_above_maximum(self):
        with pytest.raises(InvalidParameterError):
            validate_numeric_param(11, "x", max_val=10)

    @pytest.mark.parametrize("value", [np.int64(5), np.int32(5), np.float64(5.0)])
    def test_numpy_scalars(self, value):
        validate_numeric_param(value, "x", min_val=0, max_val=10)

    def test_numpy_nan(self):
        with pytest.raises(InvalidParameterError):
            validate_numeric_param(np.float64("nan"), "x")

    @pytest.mark.parametrize("value", ["5", None, True, float("nan")])
    def test_not_a_number(self, value):
        with pytest.raises(InvalidParameterError):
            validate_numeric_param(value, "x")


class TestValidateChoice:
    def test_valid(self):
        validate_choice("greater", "alternative", ["greater", "less"])

    def test_invalid(self):
        with pytest.raises(InvalidParameterError, match="alternative"):
            validate_choice("both", "alternative", ["greater", "less"])
