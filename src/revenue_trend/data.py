from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from numbers import Number
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from pandas.api.types import is_datetime64_any_dtype

from .errors import InsufficientDataError, InvalidArgumentError, ParseError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: Sequence[str] = ("Order_Date", "Sale_Price", "Quantity")
RECORD_COLUMNS: Sequence[str] = ("order_date", "revenue")
GAP_POLICIES: Sequence[str] = ("skip", "zero")


@dataclass(frozen=True)
class SalesRecord:
    order_date: Union[date, str, pd.Timestamp]
    revenue: float


SalesInput = Union[pd.DataFrame, Iterable[Union[SalesRecord, Tuple[object, float]]]]


def load_sales_data(sales_path: Path) -> pd.DataFrame:
    """Read the dashboard sales CSV and return one row per order line.

    The ``Revenue`` column the dashboard computes in Power Query is derived here
    as ``Sale_Price * Quantity``. Rows with a blank date, price or quantity are
    dropped; a date that is present but unreadable raises :class:`ParseError`.
    """
    df = pd.read_csv(sales_path)
    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise InvalidArgumentError(f"Sales data missing required columns: {sorted(missing)}")

    total_rows = len(df)
    df = df.dropna(subset=list(REQUIRED_COLUMNS)).copy()
    df["Sale_Price"] = pd.to_numeric(df["Sale_Price"], errors="coerce")
    df["Quantity"] = pd.to_numeric(df["Quantity"], errors="coerce")
    df = df.dropna(subset=["Sale_Price", "Quantity"])

    dropped = total_rows - len(df)
    if dropped:
        logger.warning("Dropped %d of %d rows with blank or non-numeric values", dropped, total_rows)
    if df.empty:
        raise InsufficientDataError("No usable rows left in the sales data. Check the source file.")

    df["Revenue"] = df["Sale_Price"] * df["Quantity"]
    frame = df[["Order_Date", "Revenue"]].rename(
        columns={"Order_Date": "order_date", "Revenue": "revenue"}
    )
    frame["order_date"] = parse_order_dates(frame["order_date"].astype(str).str.strip())
    logger.info("Loaded %d sales rows from %s", len(frame), sales_path)
    return frame.reset_index(drop=True)


def _wall_clock(value: object) -> Optional[pd.Timestamp]:
    # Numbers would otherwise be read as nanoseconds since the epoch.
    if isinstance(value, (Number, np.bool_)):
        return None
    try:
        stamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(stamp):
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.tz_localize(None)
    return stamp


def parse_order_dates(values: pd.Series) -> pd.Series:
    """Parse order dates to naive timestamps in the seller's local time.

    Values carrying a UTC offset keep their wall-clock time and lose the
    offset, so an order placed late on the last day of a month stays in
    that month whatever zone it was recorded in.
    """
    missing = values.isna()
    if missing.any():
        positions = [int(pos) for pos in np.flatnonzero(missing.to_numpy())[:5]]
        raise ParseError(f"Missing order_date at positions {positions}")

    if is_datetime64_any_dtype(values):
        if getattr(values.dt, "tz", None) is not None:
            return values.dt.tz_localize(None)
        return values

    stamps = [_wall_clock(value) for value in values.tolist()]
    unparsed = [value for value, stamp in zip(values.tolist(), stamps) if stamp is None]
    if unparsed:
        sample = [str(value) for value in unparsed[:5]]
        raise ParseError(f"Could not interpret order_date values as dates: {sample}")
    return pd.Series(pd.DatetimeIndex(stamps), index=values.index, name=values.name)


def _validate_revenue(values: pd.Series) -> pd.Series:
    flags = values.map(lambda value: isinstance(value, (bool, np.bool_)))
    if flags.any():
        raise InvalidArgumentError(f"Revenue must be a number, got {values[flags].head(5).tolist()}")
    revenue =pd.to_numeric(values, errors="coerce").astype(float)
    invalid = ~np.isfinite(revenue.to_numpy())
    if invalid.any():
        sample = values[invalid].astype(str).head(5).tolist()
        raise InvalidArgumentError(f"Revenue must be a finite number, got {sample}")
    if (revenue < 0).any():
        sample = revenue[revenue < 0].head(5).tolist()
        raise InvalidArgumentError(f"Revenue must be non-negative, got {sample}")
    return revenue


def records_to_frame(records: SalesInput) -> pd.DataFrame:
    """Normalise sales records into an ``order_date``/``revenue`` frame."""
    if isinstance(records, pd.DataFrame):
        missing = set(RECORD_COLUMNS) - set(records.columns)
        if missing:
            raise InvalidArgumentError(f"Sales frame missing required columns: {sorted(missing)}")
        frame = records[list(RECORD_COLUMNS)].reset_index(drop=True)
    else:
        rows = []
        for record in records:
            if isinstance(record, SalesRecord):
                rows.append((record.order_date, record.revenue))
                continue
            try:
                order_date, revenue = record
            except (TypeError, ValueError) as exc:
                raise InvalidArgumentError(
                    f"Expected a SalesRecord or (order_date, revenue) pair, got {record!r}"
                ) from exc
            rows.append((order_date, revenue))
        frame = pd.DataFrame(rows, columns=list(RECORD_COLUMNS))

    if frame.empty:
        raise InsufficientDataError("No sales records supplied.")

    frame = frame.copy()
    frame["order_date"] = parse_order_dates(frame["order_date"])
    frame["revenue"] = _validate_revenue(frame["revenue"])
    return frame


def build_monthly_series(
    records: SalesInput,
    gap_policy: str = "skip",
    fill_value: float = 0.0,
) -> pd.DataFrame:
    """Sum revenue per calendar month.

    Returns a frame with ``ds`` (month start) and ``y`` (total revenue), sorted
    by month. With ``gap_policy="skip"`` only observed months appear; with
    ``"zero"`` every month between the first and last observation is present
    and empty months carry ``fill_value``.
    """
    if gap_policy not in GAP_POLICIES:
        raise InvalidArgumentError(f"gap_policy must be one of {list(GAP_POLICIES)}, got {gap_policy!r}")

    frame = records_to_frame(records)
    months = frame["order_date"].dt.to_period("M")
    totals = frame.groupby(months)["revenue"].sum().sort_index()

    series = pd.DataFrame(
        {
            "ds": totals.index.to_timestamp(how="start"),
            "y": totals.to_numpy(dtype=float),
        }
    )
    if gap_policy == "zero":
        series = series.set_index("ds").asfreq("MS", fill_value=fill_value).reset_index()

    logger.debug("Built monthly series with %d months (gap_policy=%s)", len(series), gap_policy)
    return series.reset_index(drop=True)
