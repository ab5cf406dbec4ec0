"""This module contains the least squares estimation of vector autoregressions (VAR) without intercept.

Classes
-------
CandidatePair
    Bivariate (effect, cause) projection of a data set.
VarModel
    A fitted VAR model.
VarEstimator
    Builds the lagged design matrix and estimates a VAR model of a given order.

Functions
---------
lag_matrix
    Create the lagged design matrix of a multivariate time series.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import scipy.linalg
from numpy.typing import ArrayLike

from .exceptions import ConfigurationError, InsufficientDataError, SingularDesignError

logger = logging.getLogger(__name__)


class CandidatePair(object):
    """Bivariate projection of a data set onto its effect column and one cause column.

    Parameters
    ----------
    effect : str
        Name of the effect variable.
    cause : str
        Name of the cause variable.
    values : ndarray of shape (n_measurements, 2)
        Read-only array holding the effect series in column 0 and the cause series in column 1.
    """

    def __init__(self, effect: str, cause: str, effect_values: ArrayLike, cause_values: ArrayLike) -> None:
        values = np.column_stack([np.asarray(effect_values, dtype=float), np.asarray(cause_values, dtype=float)])
        values.setflags(write=False)
        self.effect = effect
        self.cause = cause
        self.values = values

    @property
    def names(self) -> List[str]:
        return [self.effect, self.cause]

    @property
    def n_measurements(self) -> int:
        return self.values.shape[0]

    def __repr__(self) -> str:
        return f"CandidatePair(effect={self.effect!r}, cause={self.cause!r}, n_measurements={self.n_measurements})"


def lag_matrix(data: ArrayLike, order: int) -> np.ndarray:
    """Create the lagged design matrix of a multivariate time series.

    Parameters
    ----------
    data : array-like of shape (n_measurements, n_variables)
        Input time series, one variable per column.
    order : int
        Number of lags.

    Returns
    -------
    design : ndarray of shape (n_measurements - order, n_variables * order)
        Row r holds the lagged values for time point order + r. Columns are grouped by lag: all variables at lag 1, then all variables at lag 2, and so on.
    """

    data = np.asarray(data, dtype=float)
    n = data.shape[0]
    return np.hstack([data[order - lag : n - lag] for lag in range(1, order + 1)])


class VarModel(object):
    """A VAR model of order `order` without intercept, fitted by ordinary least squares.

    Parameters
    ----------
    names : list of str
        Variable names, in equation order.
    order : int
        Lag order of the model.
    coefficients : ndarray of shape (n_variables, n_variables * order)
        Coefficient matrix. Row i holds the coefficients of the equation for the i-th variable, ordered like the columns of the design matrix (see `lag_matrix`).
    residuals : ndarray of shape (t_eff, n_variables)
        Least squares residuals, one column per equation.
    sigma : ndarray of shape (n_variables, n_variables)
        Maximum-likelihood residual covariance matrix (residual cross-product divided by t_eff).
    t_eff : int
        Number of observations the model was estimated on.
    design : ndarray of shape (t_eff, n_variables * order)
        The lagged design matrix.
    """

    def __init__(self, names: Sequence[str], order: int, coefficients: np.ndarray, residuals: np.ndarray, design: np.ndarray) -> None:
        self.names = list(names)
        self.order = order
        self.coefficients = coefficients
        self.residuals = residuals
        self.design = design
        self.t_eff = residuals.shape[0]
        self.sigma = residuals.T @ residuals / self.t_eff

    @property
    def n_variables(self) -> int:
        return len(self.names)

    @property
    def n_regressors(self) -> int:
        return self.n_variables * self.order

    @property
    def regressor_names(self) -> List[str]:
        return [f"{name}.l{lag}" for lag in range(1, self.order + 1) for name in self.names]

    def equation_covariance(self, equation: int) -> np.ndarray:
        """Compute the OLS covariance matrix of the coefficients of one equation.

        The residual variance of the equation is corrected for the number of estimated coefficients, i.e. the covariance is s^2 * (Z^T Z)^-1 with s^2 = e^T e / (t_eff - n_regressors).

        Parameters
        ----------
        equation : int
            Index of the equation (same as the index of its variable in names).

        Returns
        -------
        covariance : ndarray of shape (n_regressors, n_regressors)

        Raises
        ------
        InsufficientDataError
            If there are not more observations than coefficients in the equation.
        """

        dof = self.t_eff - self.n_regressors
        if dof <= 0:
            raise InsufficientDataError(f"Cannot estimate coefficient covariance: {self.t_eff} observations for {self.n_regressors} coefficients")
        resid = self.residuals[:, equation]
        s_squared = np.inner(resid, resid) / dof
        system_matrix = self.design.T @ self.design
        return s_squared * np.linalg.inv(system_matrix)

    def __repr__(self) -> str:
        return f"VarModel(names={self.names!r}, order={self.order}, t_eff={self.t_eff})"


class VarEstimator(object):
    """Estimates VAR models without intercept by equation-wise ordinary least squares.

    Parameters
    ----------
    rcond : float or None, default=None
        Cutoff ratio for small singular values in the least squares solver (as defined by the rcond parameter in `numpy.linalg.lstsq`, or the cond parameter in `scipy.linalg.lstsq`). Singular values smaller than rcond times the largest singular value are treated as zeros and reduce the effective rank of the design matrix.
    use_lapack_gelsy : bool, default=False
        Determines which function is used for solving the least squares problem. By default, `numpy.linalg.lstsq` is used, which uses an SVD-based solution method. If use_lapack_gelsy is True, `scipy.linalg.lstsq` is used instead with its lapack_driver parameter set to 'gelsy', which uses a QR-decomposition-based solution method.
    """

    def __init__(self, rcond: Optional[float] = None, use_lapack_gelsy: bool = False) -> None:
        self.rcond = rcond
        self.use_lapack_gelsy = use_lapack_gelsy

    def fit(self, pair: CandidatePair, order: int) -> VarModel:
        """Estimate a VAR model of the given order on a candidate pair.

        Parameters
        ----------
        pair : CandidatePair
            The two time series.
        order : int
            Lag order of the model.

        Returns
        -------
        model : VarModel
            The fitted model.

        Raises
        ------
        InsufficientDataError
            If there are fewer observations left after lagging than regressors per equation.
        SingularDesignError
            If one of the series is constant, or if the design matrix is rank-deficient.
        """

        if order < 1:
            raise ConfigurationError("Invalid VAR order: " + str(order))

        data = pair.values
        n_measurements, n_variables = data.shape
        n_regressors = n_variables * order
        t_eff = n_measurements - order
        if t_eff <= 0 or t_eff < n_regressors:
            raise InsufficientDataError(f"Time series are too short for a VAR({order}) model: {n_measurements} measurements")

        # a constant series is perfectly explained by its own first lag, which leaves no residual variation to test against
        constant = [name for name, column in zip(pair.names, data.T) if np.ptp(column) == 0]
        if constant:
            raise SingularDesignError(f"Cannot fit a VAR model on constant series: {constant}")

        design = lag_matrix(data, order)
        targets = data[order:]

        # solve all equations at once, one column of targets per equation
        if self.use_lapack_gelsy:
            solution, _, rank, _ = scipy.linalg.lstsq(design, targets, cond=self.rcond, lapack_driver='gelsy')
        else:
            solution, _, rank, _ = np.linalg.lstsq(design, targets, rcond=self.rcond)

        if rank < n_regressors:
            raise SingularDesignError(f"Design matrix of the VAR({order}) model for {pair.names} is rank-deficient (rank {rank} < {n_regressors})")

        residuals = targets - design @ solution
        logger.debug("Fitted VAR(%d) on %s with %d observations", order, pair.names, t_eff)
        return VarModel(pair.names, order, solution.T, residuals, design)
