from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .errors import InvalidArgumentError
from .models import MIN_MONTHS, LinearTrendForecaster, naive_forecast

logger = logging.getLogger(__name__)

FOLD_COLUMNS = [
    "cutoff",
    "revenue",
    "trend_error",
    "naive_error",
    "trend_wmape",
    "naive_wmape",
    "skill",
]


@dataclass
class BacktestConfig:
    horizon: int = 3
    min_train: int = 6

    def __post_init__(self) -> None:
        if self.horizon < 1:
            raise InvalidArgumentError(f"horizon must be at least 1, got {self.horizon}")
        if self.min_train < MIN_MONTHS:
            raise InvalidArgumentError(
                f"min_train must be at least {MIN_MONTHS}, got {self.min_train}"
            )


@dataclass
class BacktestResult:
    metrics: pd.DataFrame
    best_model: Optional[str]


def _share(part: float, whole: float) -> float:
    return part / whole if whole > 0 else np.nan


def _score_fold(train: pd.DataFrame, test: pd.DataFrame, horizon: int) -> dict:
    actual = test["y"].to_numpy(dtype=float)
    trend = LinearTrendForecaster().fit(train).forecast(horizon)
    naive = naive_forecast(train, horizon)

    revenue = float(actual.sum())
    trend_error = float(np.abs(actual - trend).sum())
    naive_error = float(np.abs(actual - naive).sum())
    return {
        "cutoff": train["ds"].iloc[-1],
        "revenue": revenue,
        "trend_error": trend_error,
        "naive_error": naive_error,
        "trend_wmape": _share(trend_error, revenue),
        "naive_wmape": _share(naive_error, revenue),
        # 1.0 is a perfect trend, 0.0 no better than repeating the last month.
        "skill": 1.0 - _share(trend_error, naive_error),
    }


def rolling_backtest(series: pd.DataFrame, config: BacktestConfig) -> BacktestResult:
    """Score the trend against the naive forecast on expanding windows.

    Each fold trains on the first ``cutoff`` months and is scored on the next
    ``config.horizon`` months. Errors are absolute revenue misses summed over
    the fold; the winner is the model with the smaller total miss over folds
    that had any revenue, the trend winning ties.
    """
    ordered = series.sort_values("ds").reset_index(drop=True)
    records: List[dict] = []

    for cutoff in range(config.min_train, len(ordered) - config.horizon + 1):
        train = ordered.iloc[:cutoff]
        test = ordered.iloc[cutoff : cutoff + config.horizon]
        records.append(_score_fold(train, test, config.horizon))

    metrics = pd.DataFrame.from_records(records, columns=FOLD_COLUMNS)
    if metrics.empty:
        logger.warning(
            "Series of %d months is too short to backtest (min_train=%d, horizon=%d)",
            len(ordered),
            config.min_train,
            config.horizon,
        )
        return BacktestResult(metrics=metrics, best_model=None)

    scored = metrics[metrics["revenue"] > 0]
    if scored.empty:
        return BacktestResult(metrics=metrics, best_model=None)

    if scored["trend_error"].sum() <= scored["naive_error"].sum():
        best_model = "linear_trend"
    else:
        best_model = "naive"
    logger.info("Backtested %d folds; best model %s", len(metrics), best_model)
    return BacktestResult(metrics=metrics, best_model=best_model)
