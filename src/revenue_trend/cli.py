from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .backtest import BacktestConfig, BacktestResult, rolling_backtest
from .data import build_monthly_series, load_sales_data
from .errors import ForecastError
from .pipeline import ForecastConfig, build_forecast

logger = logging.getLogger(__name__)


def summarize_series(monthly: pd.DataFrame) -> str:
    first = monthly["ds"].iloc[0].strftime("%Y-%m")
    last = monthly["ds"].iloc[-1].strftime("%Y-%m")
    lines = [
        f"Monthly revenue: {len(monthly)} months ({first} to {last})",
        f"Total revenue: {monthly['y'].sum():,.2f}",
        f"Average per month: {monthly['y'].mean():,.2f}",
    ]
    return "\n".join(lines)


def summarize_backtest(result: BacktestResult) -> str:
    if result.metrics.empty:
        return "Not enough history to backtest."

    scored = result.metrics[result.metrics["revenue"] > 0]
    if scored.empty:
        return "Actual revenue was zero in every backtest fold; nothing to score."

    lines = [f"Backtest over {len(scored)} folds (revenue share missed, lower is better):"]
    lines.append(f"  linear_trend  {scored['trend_wmape'].mean():.4f}")
    lines.append(f"  naive         {scored['naive_wmape'].mean():.4f}")
    skill = scored["skill"].dropna()
    if not skill.empty:
        lines.append(f"Trend skill vs naive: {skill.mean():.4f}")
    lines.append(f"Best model: {result.best_model}")
    return "\n".join(lines)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monthly revenue trend forecast for the sales dashboard.",
    )
    parser.add_argument(
        "--sales-path",
        type=Path,
        required=True,
        help="Path to the sales CSV (columns: Order_Date, Sale_Price, Quantity).",
    )
    parser.add_argument(
        "--periods",
        type=int,
        default=6,
        help="Number of future months to forecast (default: 6).",
    )
    parser.add_argument(
        "--fill-gaps",
        action="store_true",
        help="Insert zero-revenue months between observed months before fitting.",
    )
    parser.add_argument(
        "--floor-at-zero",
        action="store_true",
        help="Clip negative projected revenue to zero.",
    )
    parser.add_argument(
        "--backtest-horizon",
        type=int,
        default=3,
        help="Months scored per backtest fold (default: 3).",
    )
    parser.add_argument(
        "--min-train",
        type=int,
        default=6,
        help="Minimum history (months) before the first backtest fold (default: 6).",
    )
    parser.add_argument(
        "--monthly-output",
        type=Path,
        help="Optional path to write the monthly revenue series as CSV.",
    )
    parser.add_argument(
        "--metrics-output",
        type=Path,
        help="Optional path to write fold-level backtest metrics as CSV.",
    )
    parser.add_argument(
        "--forecast-output",
        type=Path,
        help="Optional path to write the forecast as CSV.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser


def run(args: argparse.Namespace) -> None:
    forecast_cfg = ForecastConfig(
        periods=args.periods,
        gap_policy="zero" if args.fill_gaps else "skip",
        floor_at_zero=args.floor_at_zero,
    )
    backtest_cfg = BacktestConfig(horizon=args.backtest_horizon, min_train=args.min_train)

    sales = load_sales_data(args.sales_path)
    monthly = build_monthly_series(sales, gap_policy=forecast_cfg.gap_policy)
    print(summarize_series(monthly))

    backtest_result = rolling_backtest(monthly, backtest_cfg)
    print()
    print(summarize_backtest(backtest_result))

    forecast_df = build_forecast(monthly, forecast_cfg)
    print(f"\nForecast (next {forecast_cfg.periods} months):")
    print(
        forecast_df.assign(ds=forecast_df["ds"].dt.strftime("%Y-%m"))[["ds", "forecast"]].to_string(
            index=False, float_format=lambda x: f"{x:.2f}"
        )
    )

    if args.monthly_output:
        monthly.to_csv(args.monthly_output, index=False)
        print(f"\nSaved monthly series to {args.monthly_output}")

    if args.metrics_output:
        backtest_result.metrics.to_csv(args.metrics_output, index=False)
        print(f"Saved metrics to {args.metrics_output}")

    if args.forecast_output:
        forecast_df.to_csv(args.forecast_output, index=False)
        print(f"Saved forecast to {args.forecast_output}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        run(args)
    except ForecastError as exc:
        logger.debug("Forecast failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
