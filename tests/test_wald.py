"""Tests for the Wald test and the restricted coefficient positions."""

import math

import numpy as np
import pytest
from scipy import stats

from todayamamoto.exceptions import ConfigurationError, NumericalError, SingularCovarianceError
from todayamamoto.wald import WaldTester, restricted_indices


def test_restricted_indices_for_each_variable():
    # columns: effect.l1, cause.l1, effect.l2, cause.l2, effect.l3, cause.l3
    assert restricted_indices(2, variable=1) == [1, 3]
    assert restricted_indices(2, variable=0) == [0, 2]
    assert restricted_indices(1, variable=1) == [1]


@pytest.mark.parametrize("lag_order", [1, 2, 3, 7])
@pytest.mark.parametrize("extra_lag", [1, 2])
def test_restricted_indices_never_touch_augmentation_lags(lag_order, extra_lag):
    augmented_order = lag_order + extra_lag
    augmentation = {(lag - 1) * 2 + var for lag in range(lag_order + 1, augmented_order + 1) for var in (0, 1)}
    for variable in (0, 1):
        indices = restricted_indices(lag_order, variable)
        assert len(indices) == lag_order
        assert all(idx < 2 * lag_order for idx in indices)
        assert not augmentation.intersection(indices)
        assert all(idx % 2 == variable for idx in indices)


def test_restricted_indices_invalid():
    with pytest.raises(ConfigurationError):
        restricted_indices(0, variable=1)
    with pytest.raises(ConfigurationError):
        restricted_indices(2, variable=2)


def test_wald_statistic_identity_covariance():
    result = WaldTester().test([1.0, 2.0, 7.0], np.eye(3), {0, 1})
    assert result.chi_square == pytest.approx(5.0)
    assert result.df == 2
    assert result.p_value == pytest.approx(math.exp(-2.5))


def test_wald_statistic_uses_covariance_block():
    covariance = np.array([[4.0, 0.0, 1.0], [0.0, 9.0, 0.0], [1.0, 0.0, 2.0]])
    result = WaldTester().test([3.0, 1.0, 1.0], covariance, [0, 2])
    block = covariance[np.ix_([0, 2], [0, 2])]
    c = np.array([3.0, 1.0])
    expected = c @ np.linalg.solve(block, c)
    assert result.chi_square == pytest.approx(expected)
    assert result.p_value == pytest.approx(stats.chi2.sf(expected, 2))


def test_injected_survival_function():
    tester = WaldTester(survival_function=lambda x, df: 0.25)
    assert tester.test([1.0], [[1.0]], [0]).p_value == 0.25


def test_zero_coefficients_give_p_value_one():
    result = WaldTester().test([0.0, 0.0], np.eye(2), [0, 1])
    assert result.chi_square == 0.0
    assert result.p_value == pytest.approx(1.0)


def test_singular_covariance():
    covariance = np.array([[1.0, 1.0], [1.0, 1.0]])
    with pytest.raises(SingularCovarianceError):
        WaldTester().test([1.0, 2.0], covariance, [0, 1])
    with pytest.raises(NumericalError):
        WaldTester().test([1.0, 2.0], np.zeros((2, 2)), [0])


def test_invalid_restrictions():
    with pytest.raises(ConfigurationError):
        WaldTester().test([1.0, 2.0], np.eye(2), [])
    with pytest.raises(ConfigurationError):
        WaldTester().test([1.0, 2.0], np.eye(2), [2])
