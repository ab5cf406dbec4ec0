"""Tests for the information criteria."""

import math

import numpy as np
import pytest

from todayamamoto.criterion import Criterion, information_criteria
from todayamamoto.exceptions import ConfigurationError


@pytest.mark.parametrize(
    "value, expected",
    [
        ("AIC", Criterion.AIC),
        ("bic", Criterion.BIC),
        ("SC", Criterion.BIC),
        (" hq ", Criterion.HQ),
        ("FPE", Criterion.FPE),
        (Criterion.HQ, Criterion.HQ),
    ],
)
def test_resolve_accepts_members_and_names(value, expected):
    assert Criterion.resolve(value) is expected


@pytest.mark.parametrize("value", ["AICC", "", None, 1])
def test_resolve_rejects_unknown_values(value):
    with pytest.raises(ConfigurationError):
        Criterion.resolve(value)


def test_criteria_formulas():
    sigma = np.diag([2.0, 0.5])  # determinant 1
    t_eff, order = 100, 2
    values = information_criteria(sigma, t_eff, order)

    assert values[Criterion.AIC] == pytest.approx(2 / 100 * 8)
    assert values[Criterion.BIC] == pytest.approx(math.log(100) / 100 * 8)
    assert values[Criterion.HQ] == pytest.approx(2 * math.log(math.log(100)) / 100 * 8)
    assert values[Criterion.FPE] == pytest.approx((105 / 95) ** 2)


def test_criteria_use_log_determinant():
    sigma = np.array([[2.0, 0.5], [0.5, 1.0]])
    values = information_criteria(sigma, 50, 1)
    assert values[Criterion.AIC] == pytest.approx(math.log(1.75) + 2 / 50 * 4)
    assert Criterion.AIC.score(sigma, 50, 1) == values[Criterion.AIC]


def test_degenerate_covariance_gives_nan():
    sigma = np.array([[1.0, 1.0], [1.0, 1.0]])
    values = information_criteria(sigma, 100, 1)
    assert all(math.isnan(value) for value in values.values())


def test_fpe_undefined_for_small_samples():
    values = information_criteria(np.eye(2), 5, 2)
    assert math.isnan(values[Criterion.FPE])
    assert math.isfinite(values[Criterion.AIC])
