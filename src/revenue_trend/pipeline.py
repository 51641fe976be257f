from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta

from .data import GAP_POLICIES, SalesInput, build_monthly_series
from .errors import InvalidArgumentError
from .models import LinearTrendForecaster, validate_periods

logger = logging.getLogger(__name__)


@dataclass
class ForecastConfig:
    periods: int = 6
    gap_policy: str = "skip"
    floor_at_zero: bool = False

    def __post_init__(self) -> None:
        validate_periods(self.periods)
        if self.gap_policy not in GAP_POLICIES:
            raise InvalidArgumentError(
                f"gap_policy must be one of {list(GAP_POLICIES)}, got {self.gap_policy!r}"
            )


def simple_forecast(
    records: SalesInput,
    periods: int = 6,
    config: Optional[ForecastConfig] = None,
) -> np.ndarray:
    """Project monthly revenue ``periods`` months past the last observed month.

    Records are summed per calendar month, a straight line is fitted through the
    monthly totals by ordinary least squares and extended forward. The result
    is an arithmetic progression whose step is the fitted slope. ``config``
    supplies the gap and flooring policies; ``periods`` always sets the horizon.
    """
    periods = validate_periods(periods)
    if config is None:
        config = ForecastConfig(periods=periods)
    monthly = build_monthly_series(records, gap_policy=config.gap_policy)
    model = LinearTrendForecaster(floor_at_zero=config.floor_at_zero).fit(monthly)
    return model.forecast(periods)


def build_forecast(monthly_df: pd.DataFrame, config: ForecastConfig) -> pd.DataFrame:
    """Forecast a monthly series and label each value with its month."""
    ordered = monthly_df.sort_values("ds").reset_index(drop=True)
    model = LinearTrendForecaster(floor_at_zero=config.floor_at_zero).fit(ordered)
    predictions = model.forecast(config.periods)

    last_month = pd.Timestamp(ordered["ds"].iloc[-1])
    future_months = [last_month + relativedelta(months=i + 1) for i in range(config.periods)]
    logger.info(
        "Forecast %d months from %s (slope=%.2f per month)",
        config.periods,
        last_month.strftime("%Y-%m"),
        model.slope,
    )

    return pd.DataFrame(
        {
            "ds": pd.to_datetime(future_months),
            "forecast": predictions,
            "slope": model.slope,
        }
    )
