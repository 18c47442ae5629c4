"""Daily thermal time (simple averaging method) and its accumulation."""

from __future__ import annotations

import numpy as np

from solanumyield.core.exceptions import DataError
from solanumyield.library.curves import Array, _as_output


def daily_increment(tmax, tmin, base_temperature: float) -> Array | float:
    """
    Thermal-time increment for one day (or an array of days).

    ``max(0, (tmax + tmin)/2 - base_temperature)`` [°C·day]. There is no upper
    cut-off; days colder than the base contribute zero (no negative carry-over).

    Raises
    ------
    DataError
        If ``tmin > tmax`` for any record.
    """
    tx = np.asarray(tmax, dtype=float)
    tn = np.asarray(tmin, dtype=float)
    bad = int(np.count_nonzero(tn > tx))
    if bad:
        raise DataError(f"Tmin greater than Tmax in {bad} weather record(s).")
    inc = np.maximum(0.0, 0.5 * (tx + tn) - base_temperature)
    return _as_output(inc, tmax)


def accumulate(previous: float, increment: float) -> float:
    """Running thermal time after adding one day's increment."""
    return previous + increment


def cumulative_thermal_time(
    tmax, tmin, base_temperature: float, start: int = 0
) -> Array:
    """
    Vectorized cumulative thermal time over a daily series.

    Index ``start`` is the emergence day and holds 0; each later day adds its
    own increment, and days before ``start`` stay at 0.

    Parameters
    ----------
    tmax, tmin : array-like, shape (T,)
        Daily maximum and minimum temperature [°C].
    base_temperature : float
        Base temperature [°C].
    start : int, default=0
        Index of the emergence day.

    Returns
    -------
    ndarray, shape (T,)
        Cumulative thermal time [°C·day].
    """
    inc = np.atleast_1d(daily_increment(tmax, tmin, base_temperature))
    inc = np.asarray(inc, dtype=float).copy()
    inc[: start + 1] = 0.0
    return np.cumsum(inc)
