"""This package provides an implementation of the Toda-Yamamoto test for Granger causality [1].

The test checks for Granger causality between pairs of time series that may be non-stationary, without unit root or cointegration pre-tests.
For each pair, the lag order p of a vector autoregression (VAR) is selected by an information criterion, a VAR model with p + d lags is estimated, where d is the assumed maximum order of integration of the series, and a Wald test is applied to the first p lags of the causing variable only.
The d augmentation lags are never restricted, which keeps the Wald statistic asymptotically chi-square distributed regardless of the order of integration.

Classes
-------
TodaYamamoto
    User interface and wrapper around the internal logic.
CausalityResult
    Result of one causality test in one direction.
PairOutcome
    Success or failure of testing one pair of time series.
Criterion
    Available information criteria for the lag order selection.

Functions
---------
toda_yamamoto
    Apply the test to a collection of data sets.
results_to_frame
    Convert causality results into a data frame.

Modules
-------
criterion
    Contains the information criteria.
lagselection
    Contains the lag order selection.
estimation
    Contains the least squares estimation of VAR models.
wald
    Contains the Wald test.
exceptions
    Contains the exception classes.

References
----------
[1] H. Y. Toda and T. Yamamoto, "Statistical inference in vector autoregressions with possibly
integrated processes," Journal of Econometrics, vol. 66, no. 1-2, pp. 225-250, 1995.
"""

from .todayamamoto import TodaYamamoto, CausalityResult, PairOutcome, toda_yamamoto, results_to_frame
from .criterion import Criterion
from .exceptions import TodaYamamotoError, ConfigurationError, InsufficientDataError, NumericalError, LagSelectionError, SingularDesignError, SingularCovarianceError, ComputationCancelledError
from . import criterion, lagselection, estimation, wald, exceptions
