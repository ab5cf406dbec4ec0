"""This module contains the selection of the optimal lag order of a bivariate VAR model by information criteria.

Classes
-------
LagSelectionResult
    Criterion values of all candidate lag orders and the selected orders.
LagOrderSelector
    Exhaustive search over lag orders 1..max_lag.
"""

import logging
import math
from typing import Dict, Optional, Union

import pandas as pd

from .criterion import Criterion, information_criteria
from .estimation import CandidatePair, VarEstimator
from .exceptions import ConfigurationError, DegenerateLagSelectionError, InsufficientDataError, InsufficientLagDataError, SingularDesignError

logger = logging.getLogger(__name__)


class LagSelectionResult(object):
    """Criterion values of all candidate lag orders of a pair, and the orders selected by each criterion.

    Parameters
    ----------
    criterion : Criterion
        The criterion requested by the caller.
    values : dict
        Maps each lag order 1..max_lag to a dict that maps each `Criterion` to its value (NaN if undefined for that order).

    Attributes
    ----------
    selection : dict
        Maps each `Criterion` to the lag order that minimizes it (ties are broken by the smallest order), or to None if the criterion is not finite for any order.
    selected_lag : int or None
        The order selected by the requested criterion.
    """

    def __init__(self, criterion: Criterion, values: Dict[int, Dict[Criterion, float]]) -> None:
        self.criterion = criterion
        self.values = values
        self.selection = {crit: self._argmin(crit) for crit in Criterion}
        self.selected_lag = self.selection[criterion]

    @property
    def max_lag(self) -> int:
        return max(self.values)

    def _argmin(self, criterion: Criterion) -> Optional[int]:
        best_order = None
        best_value = math.inf
        for order in sorted(self.values):
            value = self.values[order][criterion]
            # strict comparison keeps the smallest order on ties
            if math.isfinite(value) and value < best_value:
                best_order = order
                best_value = value
        return best_order

    def to_frame(self) -> pd.DataFrame:
        """Return the criterion values as a data frame with one row per lag order and one column per criterion."""

        frame = pd.DataFrame.from_dict({order: {crit.value: val for crit, val in row.items()} for order, row in self.values.items()}, orient="index")
        frame.index.name = "lag"
        return frame

    def __repr__(self) -> str:
        return f"LagSelectionResult(criterion={self.criterion.value}, selected_lag={self.selected_lag}, max_lag={self.max_lag})"


class LagOrderSelector(object):
    """Selects the lag order of a bivariate VAR model without intercept by an exhaustive search over all orders 1..max_lag.

    For each candidate order p, a VAR(p) model is estimated and the information criteria are computed from its maximum-likelihood residual covariance. The order with the lowest value of the requested criterion is selected.
    Orders for which the model cannot be estimated (too few observations, rank-deficient design) or for which the residual covariance is degenerate are skipped.

    Parameters
    ----------
    estimator : VarEstimator or None, default=None
        Estimator used for the candidate models. If None, a `VarEstimator` with default settings is used.
    common_sample : bool, default=False
        If False, the model of order p is estimated on the last n_measurements - p observations. If True, all candidate models are estimated on the same last n_measurements - max_lag observations, which makes the criterion values of different orders refer to the same sample.
    """

    def __init__(self, estimator: Optional[VarEstimator] = None, common_sample: bool = False) -> None:
        self.estimator = estimator if estimator is not None else VarEstimator()
        self.common_sample = common_sample

    def select(self, pair: CandidatePair, max_lag: int, criterion: Union[Criterion, str]) -> LagSelectionResult:
        """Select the optimal lag order for a candidate pair.

        Parameters
        ----------
        pair : CandidatePair
            The two time series.
        max_lag : int
            Largest candidate lag order.
        criterion : Criterion or str
            Criterion used for the selection.

        Returns
        -------
        result : LagSelectionResult
            Criterion values of all candidate orders. result.selected_lag is guaranteed to be in [1, max_lag].

        Raises
        ------
        ConfigurationError
            If criterion is unknown or max_lag is smaller than 1.
        InsufficientLagDataError
            If max_lag is not smaller than the length of the time series.
        DegenerateLagSelectionError
            If the requested criterion is not finite for any candidate order.
        """

        criterion = Criterion.resolve(criterion)
        if max_lag < 1:
            raise ConfigurationError("Invalid maximum lag order: " + str(max_lag))
        if max_lag >= pair.n_measurements:
            raise InsufficientLagDataError(f"Maximum lag order {max_lag} requires more than {pair.n_measurements} measurements")

        n_variables = pair.values.shape[1]
        values = {}
        for order in range(1, max_lag + 1):
            candidate = self._candidate_sample(pair, order, max_lag)
            try:
                model = self.estimator.fit(candidate, order)
            except (SingularDesignError, InsufficientDataError) as e:
                logger.debug("Skipping lag order %d for %s: %s", order, pair.names, e)
                values[order] = {crit: math.nan for crit in Criterion}
                continue
            values[order] = information_criteria(model.sigma, model.t_eff, order, n_variables)
            logger.debug("Lag order %d for %s: %s", order, pair.names, {crit.value: val for crit, val in values[order].items()})

        result = LagSelectionResult(criterion, values)
        if result.selected_lag is None:
            raise DegenerateLagSelectionError(f"No lag order up to {max_lag} yields a finite {criterion.value} value for {pair.names}")
        return result

    def _candidate_sample(self, pair: CandidatePair, order: int, max_lag: int) -> CandidatePair:
        if not self.common_sample:
            return pair
        # drop the leading observations so that every order keeps n_measurements - max_lag targets
        start = max_lag - order
        values = pair.values[start:]
        return CandidatePair(pair.effect, pair.cause, values[:, 0], values[:, 1])
