"""
Core containers for weather, run configuration, and simulation outputs.

Classes
-------
WeatherRecord
    One day of weather drivers (Tmax, Tmin, SRAD).
WeatherSeries
    Frozen, date-ordered daily forcing arrays with validation and windowing.
SimulationConfig
    Frozen description of one run (dates, density, crop parameters, policy).
SimulationState
    Mutable per-run state owned by the simulator.
DailyResult
    One immutable row of the output trajectory.
Results
    Ordered, immutable trajectory with column accessors.

Notes
-----
- ``WeatherSeries`` coerces its inputs to 1-D arrays (``datetime64[D]`` for
  dates, float for the drivers) and checks length consistency, strict date
  ordering and finiteness. Gaps are only an error once a simulation window
  needs the missing day (see :meth:`WeatherSeries.window`).
- ``SimulationConfig`` validates itself on construction and raises
  :class:`~solanumyield.core.exceptions.ConfigError`.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import astuple, dataclass, field, fields, replace
from enum import Enum
from typing import Iterator, Sequence

import numpy as np
import pandas as pd

from solanumyield.core.crops import CropParameters
from solanumyield.core.exceptions import ConfigError, DataError
from solanumyield.library.canopy import CanopyPolicy

Array = np.ndarray

ONE_DAY = np.timedelta64(1, "D")


def to_date(value) -> dt.date:
    """Coerce ISO strings, datetimes, timestamps and datetime64 to a date."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return pd.Timestamp(value).date()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Cannot interpret {value!r} as a date.") from e


def _day64(value) -> np.datetime64:
    return np.datetime64(to_date(value), "D")


# -------------------------
# Weather
# -------------------------


@dataclass(frozen=True)
class WeatherRecord:
    """Weather drivers for one calendar day."""

    date: dt.date
    tmax: float  # °C
    tmin: float  # °C
    srad: float  # MJ m⁻² day⁻¹


@dataclass(frozen=True, eq=False)
class WeatherSeries:
    """
    Daily forcing series ordered by date.

    The class is frozen and the arrays are made read-only, so a single series
    can be shared by any number of concurrent runs.

    Attributes
    ----------
    dates : ndarray of datetime64[D], shape (T,)
        Calendar dates, strictly increasing.
    tmax : ndarray, shape (T,)
        Daily maximum air temperature [°C].
    tmin : ndarray, shape (T,)
        Daily minimum air temperature [°C].
    srad : ndarray, shape (T,)
        Incident solar radiation [MJ m⁻² day⁻¹].

    Raises
    ------
    DataError
        If the series are not 1-D, have different lengths, contain non-finite
        values or negative radiation, or dates are duplicated or out of order.
    """

    dates: Array
    tmax: Array
    tmin: Array
    srad: Array

    def __post_init__(self):
        dates = np.array(self.dates, dtype="datetime64[D]")
        tmax = np.array(self.tmax, dtype=float)
        tmin = np.array(self.tmin, dtype=float)
        srad = np.array(self.srad, dtype=float)

        if dates.ndim != 1 or tmax.ndim != 1 or tmin.ndim != 1 or srad.ndim != 1:
            raise DataError("All weather series must be 1-D.")
        T = dates.shape[0]
        if not (tmax.shape[0] == tmin.shape[0] == srad.shape[0] == T):
            raise DataError("All weather series must have the same length T.")
        if np.isnat(dates).any():
            raise DataError("Weather dates contain missing values.")
        for name, arr in (("tmax", tmax), ("tmin", tmin), ("srad", srad)):
            if not np.isfinite(arr).all():
                raise DataError(f"Weather series '{name}' has non-finite values.")
        if (srad < 0.0).any():
            bad = dates[srad < 0.0][0]
            raise DataError(f"Negative solar radiation on {bad}.")

        steps = np.diff(dates)
        if (steps == np.timedelta64(0, "D")).any():
            dup = dates[1:][steps == np.timedelta64(0, "D")][0]
            raise DataError(f"Duplicate weather record for {dup}.")
        if (steps < np.timedelta64(0, "D")).any():
            raise DataError("Weather records must be ordered by date.")

        for name, arr in (
            ("dates", dates),
            ("tmax", tmax),
            ("tmin", tmin),
            ("srad", srad),
        ):
            arr.setflags(write=False)
            # We assign using object.__setattr__ because the dataclass is frozen
            object.__setattr__(self, name, arr)

    def __len__(self) -> int:
        return int(self.dates.shape[0])

    def __getitem__(self, i: int) -> WeatherRecord:
        return WeatherRecord(
            date=self.dates[i].astype(dt.date),
            tmax=float(self.tmax[i]),
            tmin=float(self.tmin[i]),
            srad=float(self.srad[i]),
        )

    def __iter__(self) -> Iterator[WeatherRecord]:
        for i in range(len(self)):
            yield self[i]

    @property
    def start(self) -> dt.date:
        return self.dates[0].astype(dt.date)

    @property
    def end(self) -> dt.date:
        return self.dates[-1].astype(dt.date)

    def record(self, date) -> WeatherRecord:
        """Record for a calendar day; ``DataError`` if there is none."""
        day = _day64(date)
        i = int(np.searchsorted(self.dates, day))
        if i >= len(self) or self.dates[i] != day:
            raise DataError(f"No weather record for {day}.")
        return self[i]

    def window(self, start, end) -> "WeatherSeries":
        """
        Contiguous sub-series covering ``[start, end]`` (inclusive).

        Raises
        ------
        DataError
            Naming the first calendar day in the window without a record.
        """
        lo, hi = _day64(start), _day64(end)
        i = int(np.searchsorted(self.dates, lo, side="left"))
        j = int(np.searchsorted(self.dates, hi, side="right"))
        expected = np.arange(lo, hi + ONE_DAY, ONE_DAY)
        got = self.dates[i:j]
        if got.shape != expected.shape or (got != expected).any():
            missing = np.setdiff1d(expected, got)[0]
            raise DataError(
                f"Weather series has no record for {missing} "
                f"(needed over {lo}..{hi})."
            )
        return WeatherSeries(
            dates=got,
            tmax=self.tmax[i:j],
            tmin=self.tmin[i:j],
            srad=self.srad[i:j],
        )

    # -------------------------
    # Constructors
    # -------------------------
    @classmethod
    def from_records(cls, records: Sequence[WeatherRecord]) -> "WeatherSeries":
        return cls(
            dates=[_day64(r.date) for r in records],
            tmax=[r.tmax for r in records],
            tmin=[r.tmin for r in records],
            srad=[r.srad for r in records],
        )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "WeatherSeries":
        """Build from a frame with ``date, tmax, tmin, srad`` columns."""
        missing = {"date", "tmax", "tmin", "srad"} - set(df.columns)
        if missing:
            raise DataError(f"Weather frame lacks columns: {sorted(missing)}")
        return cls(
            dates=pd.to_datetime(df["date"]).to_numpy().astype("datetime64[D]"),
            tmax=df["tmax"].to_numpy(),
            tmin=df["tmin"].to_numpy(),
            srad=df["srad"].to_numpy(),
        )

    @classmethod
    def constant(
        cls,
        start,
        days: int,
        tmax: float,
        tmin: float,
        srad: float,
    ) -> "WeatherSeries":
        """Synthetic series with the same drivers for ``days`` days."""
        dates = np.arange(days) * ONE_DAY + _day64(start)
        return cls(
            dates=dates,
            tmax=np.full(days, tmax, dtype=float),
            tmin=np.full(days, tmin, dtype=float),
            srad=np.full(days, srad, dtype=float),
        )

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "date": self.dates,
                "tmax": self.tmax,
                "tmin": self.tmin,
                "srad": self.srad,
            }
        )


# -------------------------
# Run configuration
# -------------------------


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable description of one simulation run.

    Parameters
    ----------
    sowing_date : date-like
        Planting date (days after planting = 0).
    harvest : date-like or int
        Harvest date, or duration in days after sowing.
    params : CropParameters
        Calibrated parameters of the variety.
    emergence_offset : int, default=0
        Days from sowing to emergence, ``0 ≤ offset < duration``.
    plant_density : float, default=3.7
        Plants per m². Scales per-plant yield only.
    base_temperature : float, default=2.0
        Base temperature for thermal time [°C].
    canopy_policy : CanopyPolicy or str, default='plateau'
        Canopy behaviour after ``te``.

    Raises
    ------
    ConfigError
        If the harvest is not after sowing, emergence is not before harvest,
        or any scalar setting is out of range.
    """

    sowing_date: dt.date
    harvest: dt.date | int
    params: CropParameters
    emergence_offset: int = 0
    plant_density: float = 3.7
    base_temperature: float = 2.0
    canopy_policy: CanopyPolicy = CanopyPolicy.PLATEAU

    def __post_init__(self):
        object.__setattr__(self, "sowing_date", to_date(self.sowing_date))
        if isinstance(self.harvest, bool):
            raise ConfigError("harvest must be a date or a number of days.")
        if isinstance(self.harvest, (int, float, np.integer, np.floating)):
            if not float(self.harvest).is_integer():
                raise ConfigError(
                    f"Harvest duration must be a whole number of days, "
                    f"got {self.harvest!r}."
                )
            object.__setattr__(self, "harvest", int(self.harvest))
        else:
            object.__setattr__(self, "harvest", to_date(self.harvest))
        try:
            object.__setattr__(
                self, "canopy_policy", CanopyPolicy(self.canopy_policy)
            )
        except ValueError as e:
            raise ConfigError(
                f"Unknown canopy policy {self.canopy_policy!r}."
            ) from e

        if not isinstance(self.params, CropParameters):
            raise ConfigError("params must be a CropParameters instance.")
        if self.duration <= 0:
            raise ConfigError(
                f"Harvest ({self.harvest_date}) must be after sowing "
                f"({self.sowing_date})."
            )
        if int(self.emergence_offset) != self.emergence_offset:
            raise ConfigError("emergence_offset must be a whole number of days.")
        object.__setattr__(self, "emergence_offset", int(self.emergence_offset))
        if self.emergence_offset < 0:
            raise ConfigError("emergence_offset must be ≥ 0.")
        if self.emergence_offset >= self.duration:
            raise ConfigError(
                "emergence_offset must be smaller than the harvest duration "
                f"({self.emergence_offset} ≥ {self.duration})."
            )
        if not self.plant_density > 0.0:
            raise ConfigError("plant_density must be positive.")
        if not np.isfinite(self.base_temperature):
            raise ConfigError("base_temperature must be finite.")

    @property
    def duration(self) -> int:
        """Days from sowing to harvest."""
        if isinstance(self.harvest, int):
            return self.harvest
        return (self.harvest - self.sowing_date).days

    @property
    def harvest_date(self) -> dt.date:
        return self.sowing_date + dt.timedelta(days=self.duration)

    @property
    def emergence_date(self) -> dt.date:
        return self.sowing_date + dt.timedelta(days=self.emergence_offset)

    @property
    def n_days(self) -> int:
        """Rows in the trajectory (sowing and harvest inclusive)."""
        return self.duration + 1

    def replace(self, **changes) -> "SimulationConfig":
        return replace(self, **changes)


# -------------------------
# State and outputs
# -------------------------


class Phase(Enum):
    NOT_STARTED = "not_started"
    GROWING = "growing"
    COMPLETED = "completed"


@dataclass(slots=True)
class SimulationState:
    """Per-run state, mutated once per simulated day."""

    thermal_time: float = 0.0
    total_dry_matter: float = 0.0
    tuber_dry_matter: float = 0.0
    cover: float = 0.0
    harvest_index: float = 0.0
    phase: Phase = Phase.NOT_STARTED


@dataclass(frozen=True)
class DailyResult:
    """One simulated day."""

    date: dt.date
    dap: int  # days after planting
    thermal_time: float  # °C·day since emergence
    cover: float  # fraction
    total_dry_matter: float  # g m⁻²
    tuber_dry_matter: float  # g m⁻²
    fresh_yield: float  # t ha⁻¹
    harvest_index: float  # fraction
    fresh_yield_per_plant: float = 0.0  # g plant⁻¹


RESULT_FIELDS = tuple(f.name for f in fields(DailyResult))


@dataclass(frozen=True)
class Results:
    """
    Ordered daily trajectory of one run.

    Rows are :class:`DailyResult` instances in calendar order. Columns are
    available as read-only NumPy arrays, e.g. ``results.fresh_yield``.
    """

    rows: tuple[DailyResult, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "rows", tuple(self.rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[DailyResult]:
        return iter(self.rows)

    def __getitem__(self, i):
        return self.rows[i]

    def column(self, name: str) -> Array:
        """Values of one :class:`DailyResult` field as an array."""
        if name not in RESULT_FIELDS:
            raise KeyError(f"Unknown result field '{name}'.")
        if name == "date":
            arr = np.array([r.date for r in self.rows], dtype="datetime64[D]")
        elif name == "dap":
            arr = np.array([r.dap for r in self.rows], dtype=int)
        else:
            arr = np.array([getattr(r, name) for r in self.rows], dtype=float)
        arr.setflags(write=False)
        return arr

    @property
    def dates(self) -> Array:
        return self.column("date")

    @property
    def dap(self) -> Array:
        return self.column("dap")

    @property
    def thermal_time(self) -> Array:
        return self.column("thermal_time")

    @property
    def cover(self) -> Array:
        return self.column("cover")

    @property
    def total_dry_matter(self) -> Array:
        return self.column("total_dry_matter")

    @property
    def tuber_dry_matter(self) -> Array:
        return self.column("tuber_dry_matter")

    @property
    def fresh_yield(self) -> Array:
        return self.column("fresh_yield")

    @property
    def harvest_index(self) -> Array:
        return self.column("harvest_index")

    @property
    def fresh_yield_per_plant(self) -> Array:
        return self.column("fresh_yield_per_plant")

    @property
    def final(self) -> DailyResult:
        """Row of the harvest day."""
        if not self.rows:
            raise IndexError("Empty results.")
        return self.rows[-1]

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame([astuple(r) for r in self.rows], columns=RESULT_FIELDS)
        df["date"] = pd.to_datetime(df["date"])
        return df

    @classmethod
    def from_columns(cls, columns: dict[str, Array]) -> "Results":
        """Rebuild rows from per-field arrays (inverse of :meth:`column`)."""
        missing = [n for n in RESULT_FIELDS if n not in columns]
        if missing:
            raise KeyError(f"Missing result fields: {missing}")
        n = len(columns["date"])
        dates = np.asarray(columns["date"], dtype="datetime64[D]")
        rows = []
        for i in range(n):
            rows.append(
                DailyResult(
                    date=dates[i].astype(dt.date),
                    dap=int(columns["dap"][i]),
                    **{
                        name: float(columns[name][i])
                        for name in RESULT_FIELDS
                        if name not in ("date", "dap")
                    },
                )
            )
        return cls(rows=tuple(rows))
