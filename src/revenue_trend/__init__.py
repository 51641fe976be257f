"""Monthly revenue trend forecasting for the sales dashboard."""

from .backtest import BacktestConfig, BacktestResult, rolling_backtest
from .data import SalesRecord, build_monthly_series, load_sales_data
from .errors import ForecastError, InsufficientDataError, InvalidArgumentError, ParseError
from .models import LinearTrendForecaster, TrendFit
from .pipeline import ForecastConfig, build_forecast, simple_forecast

__all__ = [
    "BacktestConfig",
    "BacktestResult",
    "ForecastConfig",
    "ForecastError",
    "InsufficientDataError",
    "InvalidArgumentError",
    "LinearTrendForecaster",
    "ParseError",
    "SalesRecord",
    "TrendFit",
    "build_forecast",
    "build_monthly_series",
    "load_sales_data",
    "rolling_backtest",
    "simple_forecast",
]

__version__ = "0.1.0"
