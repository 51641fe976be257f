import numpy as np
import pandas as pd
import pytest

from revenue_trend.backtest import FOLD_COLUMNS, BacktestConfig, rolling_backtest
from revenue_trend.errors import InvalidArgumentError


def make_series(values):
    return pd.DataFrame(
        {
            "ds": pd.date_range("2022-01-01", periods=len(values), freq="MS"),
            "y": np.asarray(values, dtype=float),
        }
    )


def test_trend_wins_on_linear_growth():
    series = make_series([5.0 + 10.0 * i for i in range(12)])
    result = rolling_backtest(series, BacktestConfig(horizon=3, min_train=6))

    # Cutoffs 6..9 inclusive.
    assert len(result.metrics) == 4
    assert result.metrics["trend_wmape"].max() == pytest.approx(0.0, abs=1e-9)
    assert (result.metrics["naive_wmape"] > 0).all()
    assert result.metrics["skill"].tolist() == pytest.approx([1.0] * 4)
    assert result.best_model == "linear_trend"


def test_fold_scores_trend_against_naive():
    series = make_series([10.0, 20.0, 30.0, 30.0])
    result = rolling_backtest(series, BacktestConfig(horizon=1, min_train=3))
    fold = result.metrics.iloc[0]

    assert fold["cutoff"] == pd.Timestamp("2022-03-01")
    assert fold["revenue"] == pytest.approx(30.0)
    # Trend projects 40, naive repeats 30.
    assert fold["trend_error"] == pytest.approx(10.0)
    assert fold["naive_error"] == pytest.approx(0.0)
    assert fold["trend_wmape"] == pytest.approx(1 / 3)
    assert np.isnan(fold["skill"])
    assert result.best_model == "naive"


def test_naive_wins_after_a_step_change():
    series = make_series([0.0] * 6 + [100.0] * 6)
    result = rolling_backtest(series, BacktestConfig(horizon=2, min_train=8))
    assert (result.metrics["naive_error"] == 0).all()
    assert result.best_model == "naive"


def test_short_series_yields_no_folds():
    series = make_series([1.0, 2.0, 3.0])
    result = rolling_backtest(series, BacktestConfig(horizon=3, min_train=6))
    assert result.metrics.empty
    assert list(result.metrics.columns) == FOLD_COLUMNS
    assert result.best_model is None


def test_all_zero_revenue_has_no_best_model():
    series = make_series([0.0] * 8)
    result = rolling_backtest(series, BacktestConfig(horizon=2, min_train=3))
    assert not result.metrics.empty
    assert result.metrics["trend_wmape"].isna().all()
    assert result.best_model is None


@pytest.mark.parametrize("kwargs", [{"horizon": 0}, {"min_train": 1}])
def test_config_validation(kwargs):
    with pytest.raises(InvalidArgumentError):
        BacktestConfig(**kwargs)
