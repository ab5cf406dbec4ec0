import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .criterion import Criterion
from .estimation import CandidatePair, VarEstimator
from .exceptions import ComputationCancelledError, ConfigurationError, InsufficientDataError, LagSelectionError, NumericalError
from .lagselection import LagOrderSelector
from .wald import WaldTester, restricted_indices

logger = logging.getLogger(__name__)

# errors that are scoped to a single pair; everything else aborts the whole call
_PAIR_ERRORS = (InsufficientDataError, NumericalError, LagSelectionError)

# how long the parallel scheduler waits between checks of the cancellation token (seconds)
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class CausalityResult:
    """Result of one Toda-Yamamoto causality test in one direction.

    Attributes
    ----------
    cause : str
        Name of the variable tested as the cause.
    effect : str
        Name of the variable tested as the effect.
    chi_square : float
        Wald statistic, rounded to 3 decimals.
    p_value : float
        p-value of the Wald test, rounded to 3 decimals.
    lag_order : int
        Lag order p selected by the information criterion. This is also the number of degrees of freedom of the test.
    var_order : int
        Order p + extra_lag of the estimated VAR model.
    """

    cause: str
    effect: str
    chi_square: float
    p_value: float
    lag_order: int
    var_order: int


@dataclass(frozen=True)
class PairOutcome:
    """Outcome of testing one (effect, cause) pair of a data set.

    Exactly one of results and error is set: results holds the forward (cause -> effect) and reverse (effect -> cause) test results if the pair was processed successfully, error holds the exception that stopped the computation otherwise.
    """

    dataset: str
    effect: str
    cause: str
    results: Tuple[CausalityResult, ...] = ()
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def results_to_frame(results: Sequence[CausalityResult]) -> pd.DataFrame:
    """Convert a sequence of causality results into a data frame with one row per result."""

    columns = list(CausalityResult.__dataclass_fields__)
    return pd.DataFrame([asdict(result) for result in results], columns=columns)


class TodaYamamoto(object):
    """User interface of the Toda-Yamamoto causality test.

    For every data set, the first column is the effect variable and each remaining column is tested as a cause candidate. For each (effect, cause) pair, the optimal lag order p of a bivariate VAR model without intercept is selected by an information criterion, a VAR(p + extra_lag) model is estimated, and two Wald tests are computed on the first p lags only: cause -> effect in the effect equation, and effect -> cause in the cause equation.
    User parameters should only be set via constructor arguments.

    Parameters
    ----------
    criterion : Criterion
        Information criterion used for the lag order selection.
    max_lag : int
        Largest candidate lag order.
    extra_lag : int
        Number of augmentation lags (the assumed maximum order of integration of the series).
    n_jobs : int
        Number of worker threads used to process the pairs.
    selector : LagOrderSelector
        Lag order selection component.
    estimator : VarEstimator
        VAR estimation component.
    tester : WaldTester
        Wald test component.

    Attributes
    ----------
    outcomes_ : dict
        Maps each data set name to the list of `PairOutcome` objects of its cause columns, in column order.
    results_ : dict
        Maps each data set name to the list of `CausalityResult` objects of all successfully processed pairs, in column order (forward test, then reverse test).
    """

    def __init__(self, criterion: Union[Criterion, str] = "AIC", max_lag: int = 15, extra_lag: int = 1, n_jobs: int = 1, common_sample: bool = False, rcond: Optional[float] = None, use_lapack_gelsy: bool = False) -> None:
        """Create an instance of the TodaYamamoto class.

        Parameters
        ----------
        criterion : Criterion or str, default="AIC"
            Information criterion used for the lag order selection: "AIC", "BIC" (alias "SC"), "HQ" or "FPE".
        max_lag : int, default=15
            Largest candidate lag order.
        extra_lag : int, default=1
            Number of augmentation lags that are added to the selected lag order. The default of 1 is suitable for series that are integrated of order at most 1.
        n_jobs : int, default=1
            Number of worker threads used to process the pairs. With n_jobs=1, all pairs are processed sequentially in the calling thread.
        common_sample : bool, default=False
            If True, all candidate lag orders are evaluated on the same trimmed sample during lag order selection (see `todayamamoto.lagselection.LagOrderSelector`).
        rcond : float or None, default=None
            Cutoff ratio for small singular values in the least squares solver (see `todayamamoto.estimation.VarEstimator`).
        use_lapack_gelsy : bool, default=False
            If True, use the QR-based 'gelsy' driver of `scipy.linalg.lstsq` instead of `numpy.linalg.lstsq` (see `todayamamoto.estimation.VarEstimator`).

        Raises
        ------
        ConfigurationError
            If any of the parameters is invalid.
        """

        self.criterion = Criterion.resolve(criterion)

        # sanity checks for user input values
        if not _is_int(max_lag) or max_lag < 1:
            raise ConfigurationError("Invalid maximum lag order: " + repr(max_lag))
        self.max_lag = max_lag

        if not _is_int(extra_lag) or extra_lag < 0:
            raise ConfigurationError("Invalid number of extra lags: " + repr(extra_lag))
        self.extra_lag = extra_lag

        if not _is_int(n_jobs) or n_jobs < 1:
            raise ConfigurationError("Invalid number of jobs: " + repr(n_jobs))
        self.n_jobs = n_jobs

        self.estimator = VarEstimator(rcond=rcond, use_lapack_gelsy=use_lapack_gelsy)
        self.selector = LagOrderSelector(self.estimator, common_sample=common_sample)
        self.tester = WaldTester()

    def fit(self, datasets: Mapping[str, Any], cancel_event: Optional[threading.Event] = None, timeout: Optional[float] = None) -> "TodaYamamoto":
        """Run the causality tests for all cause columns of all data sets.

        Parameters
        ----------
        datasets : mapping
            Maps data set names to data sets. A data set is a `pandas.DataFrame` or a mapping from column names to equally long numeric sequences, with the effect variable in the first column and at least one cause column.
        cancel_event : threading.Event or None, default=None
            If the event is set during the computation, all pairs that are not finished yet are abandoned and recorded with a `ComputationCancelledError`.
        timeout : float or None, default=None
            Time limit in seconds. Pairs that are not finished when the limit is reached are treated like cancelled pairs.

        Returns
        -------
        self: object
            Fitted instance.

        Raises
        ------
        ConfigurationError
            If any of the data sets is invalid. No pair is processed in this case.
        """

        if not isinstance(datasets, Mapping):
            raise ConfigurationError("Data sets must be given as a mapping from names to data sets")
        if timeout is not None and timeout < 0:
            raise ConfigurationError("Invalid timeout: " + repr(timeout))

        # validate everything before the first pair is processed
        frames = {name: _as_frame(name, dataset) for name, dataset in datasets.items()}

        units = []
        for name, frame in frames.items():
            values = frame.to_numpy(dtype=float)
            columns = [str(column) for column in frame.columns]
            for j in range(1, len(columns)):
                units.append((name, CandidatePair(columns[0], columns[j], values[:, 0], values[:, j])))

        deadline = None if timeout is None else time.monotonic() + timeout
        if self.n_jobs == 1:
            outcomes = self._run_sequential(units, cancel_event, deadline)
        else:
            outcomes = self._run_parallel(units, cancel_event, deadline)

        # re-assemble per data set, keeping the column order
        self.outcomes_ = {name: [] for name in frames}
        for outcome in outcomes:
            self.outcomes_[outcome.dataset].append(outcome)
        self.results_ = {name: [result for outcome in pair_outcomes for result in outcome.results] for name, pair_outcomes in self.outcomes_.items()}

        for name, pair_outcomes in self.outcomes_.items():
            n_failed = sum(not outcome.ok for outcome in pair_outcomes)
            logger.info("Data set %r: %d pairs tested, %d failed", name, len(pair_outcomes) - n_failed, n_failed)

        return self

    def test_pair(self, pair: CandidatePair) -> Tuple[CausalityResult, CausalityResult]:
        """Run the forward (cause -> effect) and reverse (effect -> cause) causality test for one pair.

        Raises
        ------
        LagSelectionError
            If no lag order can be selected.
        InsufficientDataError
            If the series are too short for the augmented VAR model.
        NumericalError
            If the augmented VAR model or a Wald test is numerically singular.
        """

        lag_order = self.selector.select(pair, self.max_lag, self.criterion).selected_lag
        model = self.estimator.fit(pair, lag_order + self.extra_lag)

        # equation 0 explains the effect, equation 1 the cause
        forward = self.tester.test(model.coefficients[0], model.equation_covariance(0), restricted_indices(lag_order, variable=1))
        reverse = self.tester.test(model.coefficients[1], model.equation_covariance(1), restricted_indices(lag_order, variable=0))

        return (
            CausalityResult(pair.cause, pair.effect, round(forward.chi_square, 3), round(forward.p_value, 3), lag_order, model.order),
            CausalityResult(pair.effect, pair.cause, round(reverse.chi_square, 3), round(reverse.p_value, 3), lag_order, model.order),
        )

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Return the results of each data set as a data frame (see `results_to_frame`)."""

        return {name: results_to_frame(results) for name, results in self.results_.items()}

    def _run_unit(self, unit: Tuple[str, CandidatePair], cancel_event: Optional[threading.Event], deadline: Optional[float]) -> PairOutcome:
        name, pair = unit
        reason = _stop_reason(cancel_event, deadline)
        if reason is not None:
            return self._cancelled(unit, reason)
        try:
            results = self.test_pair(pair)
        except _PAIR_ERRORS as e:
            logger.warning("Data set %r: skipping pair (%s, %s): %s", name, pair.effect, pair.cause, e)
            return PairOutcome(name, pair.effect, pair.cause, error=e)
        return PairOutcome(name, pair.effect, pair.cause, results=results)

    def _cancelled(self, unit: Tuple[str, CandidatePair], reason: str) -> PairOutcome:
        name, pair = unit
        return PairOutcome(name, pair.effect, pair.cause, error=ComputationCancelledError(reason))

    def _run_sequential(self, units: List[Tuple[str, CandidatePair]], cancel_event: Optional[threading.Event], deadline: Optional[float]) -> List[PairOutcome]:
        return [self._run_unit(unit, cancel_event, deadline) for unit in units]

    def _run_parallel(self, units: List[Tuple[str, CandidatePair]], cancel_event: Optional[threading.Event], deadline: Optional[float]) -> List[PairOutcome]:
        outcomes = [None] * len(units)
        executor = ThreadPoolExecutor(max_workers=self.n_jobs)
        try:
            futures = {executor.submit(self._run_unit, unit, cancel_event, deadline): idx for idx, unit in enumerate(units)}
            pending = set(futures)
            reason = None
            while pending:
                reason = _stop_reason(cancel_event, deadline)
                if reason is not None:
                    break
                wait_time = _POLL_INTERVAL if deadline is None else max(0.0, min(_POLL_INTERVAL, deadline - time.monotonic()))
                done, pending = wait(pending, timeout=wait_time, return_when=FIRST_COMPLETED)
                for future in done:
                    outcomes[futures[future]] = future.result()
            # abandon whatever is left; running computations finish in the background and are discarded
            for future in pending:
                idx = futures[future]
                if future.done() and not future.cancelled():
                    outcomes[idx] = future.result()
                else:
                    future.cancel()
                    outcomes[idx] = self._cancelled(units[idx], reason)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return outcomes


def toda_yamamoto(datasets: Mapping[str, Any], criterion: Union[Criterion, str], max_lag: int = 15, extra_lag: int = 1, strict: bool = False, **kwargs: Optional[Any]) -> Dict[str, List[CausalityResult]]:
    """Apply the Toda-Yamamoto causality test to every data set.

    Parameters
    ----------
    datasets : mapping
        Maps data set names to data sets (see `TodaYamamoto.fit`).
    criterion : Criterion or str
        Information criterion used for the lag order selection.
    max_lag : int, default=15
        Largest candidate lag order.
    extra_lag : int, default=1
        Number of augmentation lags.
    strict : bool, default=False
        If False, pairs that cannot be processed contribute no results. If True, the error of the first such pair is raised.
    **kwargs:
        Further keyword arguments for the `TodaYamamoto` constructor.

    Returns
    -------
    results : dict
        Maps each data set name to its list of `CausalityResult` objects.
    """

    model = TodaYamamoto(criterion=criterion, max_lag=max_lag, extra_lag=extra_lag, **kwargs).fit(datasets)
    if strict:
        for pair_outcomes in model.outcomes_.values():
            for outcome in pair_outcomes:
                if not outcome.ok:
                    raise outcome.error
    return model.results_


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _stop_reason(cancel_event: Optional[threading.Event], deadline: Optional[float]) -> Optional[str]:
    if cancel_event is not None and cancel_event.is_set():
        return "computation was cancelled"
    if deadline is not None and time.monotonic() >= deadline:
        return "time limit exceeded"
    return None


def _as_frame(name: str, dataset: Any) -> pd.DataFrame:
    # convert a data set to a data frame and check that it can be tested
    if isinstance(dataset, pd.DataFrame):
        frame = dataset
    elif isinstance(dataset, Mapping):
        try:
            frame = pd.DataFrame({key: np.asarray(column).ravel() for key, column in dataset.items()})
        except ValueError as e:
            raise ConfigurationError(f"Data set {name!r}: {e}") from e
    else:
        raise ConfigurationError(f"Data set {name!r} must be a DataFrame or a mapping of columns")

    if frame.shape[1] < 2:
        raise ConfigurationError(f"Data set {name!r} needs an effect column and at least one cause column")
    if frame.columns.has_duplicates:
        raise ConfigurationError(f"Data set {name!r} has duplicate column names")
    try:
        values = frame.to_numpy(dtype=float)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Data set {name!r} contains non-numeric values") from e
    if not np.all(np.isfinite(values)):
        raise ConfigurationError(f"Data set {name!r} contains missing or non-finite values")
    return frame
