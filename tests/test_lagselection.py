"""Tests for the lag order selection."""

import math

import numpy as np
import pytest

from todayamamoto.criterion import Criterion
from todayamamoto.estimation import CandidatePair
from todayamamoto.exceptions import (
    ConfigurationError,
    InsufficientDataError,
    LagSelectionError,
    NumericalError,
)
from todayamamoto.lagselection import LagOrderSelector, LagSelectionResult


@pytest.fixture
def var2_pair(var2):
    return CandidatePair("y", "x", var2["y"], var2["x"])


def test_bic_selects_true_order(var2_pair):
    result = LagOrderSelector().select(var2_pair, 6, "BIC")
    assert result.selected_lag == 2
    assert result.criterion is Criterion.BIC
    assert result.selection[Criterion.BIC] == 2


def test_selected_lag_within_range(chain):
    pair = CandidatePair("y", "x", chain["y"], chain["x"])
    for criterion in Criterion:
        result = LagOrderSelector().select(pair, 8, criterion)
        assert 1 <= result.selected_lag <= 8
        assert result.selected_lag == result.selection[criterion]


def test_result_table(var2_pair):
    result = LagOrderSelector().select(var2_pair, 4, Criterion.AIC)
    frame = result.to_frame()
    assert list(frame.index) == [1, 2, 3, 4]
    assert list(frame.columns) == ["AIC", "BIC", "HQ", "FPE"]
    assert frame.loc[result.selected_lag, "AIC"] == frame["AIC"].min()


def test_ties_broken_by_smallest_order():
    values = {
        1: {crit: 3.0 for crit in Criterion},
        2: {crit: 1.0 for crit in Criterion},
        3: {crit: 1.0 for crit in Criterion},
    }
    assert LagSelectionResult(Criterion.HQ, values).selected_lag == 2


def test_non_finite_orders_are_ignored():
    values = {
        1: {crit: math.nan for crit in Criterion},
        2: {crit: 5.0 for crit in Criterion},
    }
    assert LagSelectionResult(Criterion.AIC, values).selected_lag == 2


def test_common_sample_matches_at_max_lag(var2_pair):
    own = LagOrderSelector().select(var2_pair, 3, "AIC")
    common = LagOrderSelector(common_sample=True).select(var2_pair, 3, "AIC")

    # at p = max_lag both variants estimate on the same observations
    assert common.values[3][Criterion.AIC] == pytest.approx(own.values[3][Criterion.AIC])
    assert common.values[1][Criterion.AIC] != pytest.approx(own.values[1][Criterion.AIC])


def test_max_lag_not_smaller_than_length():
    pair = CandidatePair("a", "b", np.arange(10.0), np.sin(np.arange(10.0)))
    with pytest.raises(LagSelectionError) as excinfo:
        LagOrderSelector().select(pair, 10, "AIC")
    assert isinstance(excinfo.value, InsufficientDataError)


def test_constant_series_is_degenerate(chain):
    pair = CandidatePair("y", "c", chain["y"], np.ones(len(chain["y"])))
    with pytest.raises(LagSelectionError) as excinfo:
        LagOrderSelector().select(pair, 4, "AIC")
    assert isinstance(excinfo.value, NumericalError)


def test_invalid_arguments(var2_pair):
    with pytest.raises(ConfigurationError):
        LagOrderSelector().select(var2_pair, 0, "AIC")
    with pytest.raises(ConfigurationError):
        LagOrderSelector().select(var2_pair, 3, "XYZ")
