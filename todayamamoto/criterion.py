"""This module contains the information criteria that are used to select the lag order of a vector autoregression.

All criteria are penalized-likelihood scores computed from the maximum-likelihood residual covariance of a fitted VAR(p) model. Lower scores indicate a better trade-off between fit and model complexity.

The following criteria are provided: Akaike (AIC), Schwarz/Bayesian (BIC), Hannan-Quinn (HQ) and the final prediction error (FPE).

Classes
-------
Criterion
    Closed enumeration of the available information criteria.

Functions
---------
information_criteria
    Compute all criteria for one fitted VAR model.
"""

import math
from enum import Enum
from typing import Dict, Union

import numpy as np
from numpy.typing import ArrayLike

from .exceptions import ConfigurationError


class Criterion(Enum):
    """Closed enumeration of the information criteria that can be used for lag order selection.

    A criterion can be given either as a member of this enumeration or by its name (case-insensitive). The name "SC" (Schwarz criterion) is accepted as an alias of BIC.
    """

    AIC = "AIC"
    BIC = "BIC"
    HQ = "HQ"
    FPE = "FPE"

    @classmethod
    def resolve(cls, value: Union["Criterion", str]) -> "Criterion":
        """Convert a user-provided criterion specification into a member of this enumeration.

        Parameters
        ----------
        value : Criterion or str
            Criterion member or criterion name.

        Returns
        -------
        criterion : Criterion
            The matching enumeration member.

        Raises
        ------
        ConfigurationError
            If value does not name a known criterion.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "SC":
                return cls.BIC
            if name in cls.__members__:
                return cls[name]
        raise ConfigurationError("Unknown information criterion: " + repr(value))

    def score(self, sigma: ArrayLike, t_eff: int, order: int, n_variables: int = 2) -> float:
        """Compute the value of this criterion. See `information_criteria` for the parameters."""

        return information_criteria(sigma, t_eff, order, n_variables)[self]


def information_criteria(sigma: ArrayLike, t_eff: int, order: int, n_variables: int = 2) -> Dict[Criterion, float]:
    """Compute the values of all information criteria for a fitted VAR model.

    Parameters
    ----------
    sigma : array-like of shape (n_variables, n_variables)
        Maximum-likelihood residual covariance matrix (residual cross-product divided by t_eff).
    t_eff : int
        Number of observations the model was estimated on.
    order : int
        Lag order p of the model.
    n_variables : int, default=2
        Number of variables K in the model.

    Returns
    -------
    criteria : dict
        Maps each `Criterion` member to its value. A value is NaN if it is not defined for this model, e.g. because the determinant of sigma is not positive or the sample is too small for the penalty term.
    """

    values = {criterion: math.nan for criterion in Criterion}

    det = float(np.linalg.det(np.asarray(sigma, dtype=float)))
    if not math.isfinite(det) or det <= 0 or t_eff <= 1:
        return values

    log_det = math.log(det)
    n_params = order * n_variables ** 2 # number of estimated coefficients over all equations

    values[Criterion.AIC] = log_det + (2 / t_eff) * n_params
    values[Criterion.HQ] = log_det + (2 * math.log(math.log(t_eff)) / t_eff) * n_params
    values[Criterion.BIC] = log_det + (math.log(t_eff) / t_eff) * n_params

    # the FPE correction factor is only defined while there are more observations than regressors per equation
    denominator = t_eff - order * n_variables - 1
    if denominator > 0:
        values[Criterion.FPE] = ((t_eff + order * n_variables + 1) / denominator) ** n_variables * det

    return values
