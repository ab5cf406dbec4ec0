"""This module contains the exception classes raised by the Toda-Yamamoto causality test.

Configuration errors reflect caller misuse and abort a whole call. All other errors are scoped to a single (effect, cause) pair and are recovered by `todayamamoto.TodaYamamoto`, which records them as failed outcomes for that pair.

Classes
-------
TodaYamamotoError
    Base class of all errors raised by this package.
ConfigurationError
    Invalid user parameters or input data sets.
InsufficientDataError
    Time series are too short for the requested lag orders.
NumericalError
    A linear algebra step has no (unique) solution.
LagSelectionError
    No optimal lag order could be determined for a pair.
SingularDesignError
    The design matrix of a VAR model is rank-deficient.
SingularCovarianceError
    The restricted coefficient covariance of a Wald test cannot be inverted.
ComputationCancelledError
    A pair computation was abandoned because of cancellation or a deadline.
"""


class TodaYamamotoError(Exception):
    """Base class of all errors raised by this package."""


class ConfigurationError(TodaYamamotoError, ValueError):
    """Invalid user parameters or input data sets."""


class InsufficientDataError(TodaYamamotoError, ValueError):
    """Time series are too short for the requested lag orders."""


class NumericalError(TodaYamamotoError, ArithmeticError):
    """A linear algebra step has no (unique) solution."""


class LagSelectionError(TodaYamamotoError):
    """No optimal lag order could be determined for a pair."""


class InsufficientLagDataError(LagSelectionError, InsufficientDataError):
    """The maximum lag order is not smaller than the length of the time series."""


class DegenerateLagSelectionError(LagSelectionError, NumericalError):
    """None of the candidate lag orders yields a finite criterion value."""


class SingularDesignError(NumericalError):
    """The design matrix of a VAR model is rank-deficient."""


class SingularCovarianceError(NumericalError):
    """The restricted coefficient covariance of a Wald test cannot be inverted."""


class ComputationCancelledError(TodaYamamotoError):
    """A pair computation was abandoned because of cancellation or a deadline."""
