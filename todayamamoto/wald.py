"""This module contains the Wald test for the joint significance of a subset of regression coefficients, and the coefficient bookkeeping of the Toda-Yamamoto procedure.

Classes
-------
WaldTestResult
    Chi-square statistic, degrees of freedom and p-value of a Wald test.
WaldTester
    Computes the Wald statistic for a restricted coefficient subset.

Functions
---------
restricted_indices
    Coefficient positions of the lags of one variable that enter a Toda-Yamamoto causality test.
"""

from typing import Callable, Collection, List

import numpy as np
import scipy.linalg
import scipy.stats
from numpy.typing import ArrayLike

from .exceptions import ConfigurationError, SingularCovarianceError


def restricted_indices(lag_order: int, variable: int, n_variables: int = 2) -> List[int]:
    """Find the coefficient positions of the first lag_order lags of one variable.

    Coefficients are ordered like the columns of the lagged design matrix (see `todayamamoto.estimation.lag_matrix`): all variables at lag 1, then all variables at lag 2, and so on. For a model of augmented order lag_order + extra_lag, only the first lag_order lags are restricted; the augmentation lags stay unrestricted.

    Parameters
    ----------
    lag_order : int
        Number of restricted lags p (the non-augmented lag order).
    variable : int
        Index of the causing variable in the model.
    n_variables : int, default=2
        Number of variables in the model.

    Returns
    -------
    indices : list of int
        The lag_order positions, in increasing lag order.
    """

    if lag_order < 1:
        raise ConfigurationError("Invalid number of restricted lags: " + str(lag_order))
    if not 0 <= variable < n_variables:
        raise ConfigurationError("Invalid variable index: " + str(variable))
    return [(lag - 1) * n_variables + variable for lag in range(1, lag_order + 1)]


class WaldTestResult(object):
    """Result of a Wald test.

    Parameters
    ----------
    chi_square : float
        The Wald statistic (non-negative).
    df : int
        Degrees of freedom, i.e. the number of restricted coefficients.
    p_value : float
        Upper-tail probability of the chi-square distribution with df degrees of freedom at chi_square.
    """

    def __init__(self, chi_square: float, df: int, p_value: float) -> None:
        self.chi_square = chi_square
        self.df = df
        self.p_value = p_value

    def __repr__(self) -> str:
        return f"WaldTestResult(chi_square={self.chi_square!r}, df={self.df}, p_value={self.p_value!r})"


class WaldTester(object):
    """Wald test of the null hypothesis that a subset of coefficients is jointly zero.

    Parameters
    ----------
    survival_function : callable, default=scipy.stats.chi2.sf
        Function (x, df) -> P(X > x) for a chi-square distributed X with df degrees of freedom.
    """

    def __init__(self, survival_function: Callable[[float, int], float] = scipy.stats.chi2.sf) -> None:
        self.survival_function = survival_function

    def test(self, coefficients: ArrayLike, covariance: ArrayLike, restricted: Collection[int]) -> WaldTestResult:
        """Compute the Wald statistic chi2 = c^T V^-1 c for the restricted coefficients c and their covariance block V.

        Parameters
        ----------
        coefficients : array-like of shape (n_coefficients,)
            Coefficient vector of a single equation.
        covariance : array-like of shape (n_coefficients, n_coefficients)
            OLS covariance matrix of the coefficients.
        restricted : collection of int
            Positions of the coefficients that are jointly zero under the null hypothesis.

        Returns
        -------
        result : WaldTestResult
            The test result with len(restricted) degrees of freedom.

        Raises
        ------
        ConfigurationError
            If restricted is empty or contains invalid positions.
        SingularCovarianceError
            If the restricted covariance block cannot be inverted.
        """

        coefficients = np.asarray(coefficients, dtype=float)
        covariance = np.asarray(covariance, dtype=float)
        indices = sorted(set(restricted))
        if not indices:
            raise ConfigurationError("At least one coefficient must be restricted")
        if indices[0] < 0 or indices[-1] >= coefficients.shape[0]:
            raise ConfigurationError(f"Restricted positions {indices} out of range for {coefficients.shape[0]} coefficients")

        c_r = coefficients[indices]
        v_r = covariance[np.ix_(indices, indices)]
        df = len(indices)

        if not np.all(np.isfinite(v_r)) or np.linalg.matrix_rank(v_r) < df:
            raise SingularCovarianceError(f"Covariance of the restricted coefficients {indices} is singular")
        try:
            weighted = scipy.linalg.solve(v_r, c_r, assume_a='sym')
        except np.linalg.LinAlgError as e:
            raise SingularCovarianceError(f"Covariance of the restricted coefficients {indices} is singular") from e

        # the quadratic form of a positive definite matrix can only turn negative through rounding
        chi_square = max(float(c_r @ weighted), 0.0)
        p_value = min(max(float(self.survival_function(chi_square, df)), 0.0), 1.0)
        return WaldTestResult(chi_square, df, p_value)
