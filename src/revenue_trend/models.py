from __future__ import annotations

import logging
from dataclasses import dataclass
from numbers import Integral
from typing import Sequence, Union

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from .errors import InsufficientDataError, InvalidArgumentError

logger = logging.getLogger(__name__)

MIN_MONTHS = 2

SeriesLike = Union[pd.DataFrame, pd.Series, np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class TrendFit:
    slope: float
    intercept: float
    n_months: int


def validate_periods(periods: int) -> int:
    if isinstance(periods, bool) or not isinstance(periods, Integral):
        raise InvalidArgumentError(f"periods must be an integer, got {periods!r}")
    if periods < 1:
        raise InvalidArgumentError(f"periods must be at least 1, got {periods}")
    return int(periods)


def _series_values(series: SeriesLike) -> np.ndarray:
    if isinstance(series, pd.DataFrame):
        ordered = series.sort_values("ds") if "ds" in series.columns else series
        return ordered["y"].to_numpy(dtype=float)
    return np.asarray(series, dtype=float).ravel()


class LinearTrendForecaster:
    """Ordinary least-squares trend of monthly revenue on month index.

    Month ``i`` of the fitted series is placed at ``x = i``; forecasts continue
    the same line at ``x = n, n + 1, ...``.
    """

    def __init__(self, floor_at_zero: bool = False) -> None:
        self.model = LinearRegression()
        self.floor_at_zero = floor_at_zero
        self.n_months = 0
        self.fitted = False

    def fit(self, series: SeriesLike) -> "LinearTrendForecaster":
        values = _series_values(series)
        if values.size < MIN_MONTHS:
            raise InsufficientDataError(
                f"At least {MIN_MONTHS} distinct months are needed to fit a trend, got {values.size}."
            )
        if not np.all(np.isfinite(values)):
            raise InvalidArgumentError("Monthly revenue contains non-finite values.")

        index = np.arange(values.size, dtype=float).reshape(-1, 1)
        self.model.fit(index, values)
        self.n_months = int(values.size)
        self.fitted = True
        logger.debug(
            "Fitted trend on %d months: slope=%.4f intercept=%.4f",
            self.n_months,
            self.slope,
            self.intercept,
        )
        return self

    @property
    def slope(self) -> float:
        self._check_fitted()
        return float(self.model.coef_[0])

    @property
    def intercept(self) -> float:
        self._check_fitted()
        return float(self.model.intercept_)

    def trend(self) -> TrendFit:
        return TrendFit(slope=self.slope, intercept=self.intercept, n_months=self.n_months)

    def forecast(self, periods: int) -> np.ndarray:
        periods = validate_periods(periods)
        self._check_fitted()
        future = np.arange(self.n_months, self.n_months + periods, dtype=float).reshape(-1, 1)
        predictions = np.asarray(self.model.predict(future), dtype=float)
        if self.floor_at_zero:
            predictions = np.maximum(predictions, 0.0)
        return predictions

    def _check_fitted(self) -> None:
        if not self.fitted:
            raise RuntimeError("LinearTrendForecaster.fit must be called before use.")


def naive_forecast(series: SeriesLike, periods: int) -> np.ndarray:
    """Repeat the last observed month for every future period."""
    periods = validate_periods(periods)
    values = _series_values(series)
    if values.size == 0:
        raise InsufficientDataError("Naive forecast requires non-empty history.")
    return np.full(periods, float(values[-1]))
