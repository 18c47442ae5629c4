"""
Day-stepped potato growth engine (time-stepping state machine).

This module implements the deterministic daily evolution of a potato crop
from sowing to harvest under non-limiting water and nutrients. The public
entry points are :func:`simulate` and :class:`GrowthSimulator`, which compose
the static containers :class:`~.data_containers.SimulationConfig` and
:class:`~.data_containers.WeatherSeries` and produce a
:class:`~.data_containers.Results` trajectory.

Each simulated day runs the same fixed sequence, since later steps consume
the same-day thermal time and canopy cover:

1. thermal time (:mod:`solanumyield.library.thermal_time`),
2. canopy cover and harvest index (:mod:`~solanumyield.library.canopy`,
   :mod:`~solanumyield.library.partitioning`),
3. dry matter (:mod:`~solanumyield.library.biomass`),
4. tuber yield (:mod:`~solanumyield.library.tuber_yield`).

Design Principles
-----------------
- **Deterministic & reproducible**: given the same inputs, ``simulate``
  returns equal ``Results``; there is no module-level mutable state.
- **Pure numerics**: no I/O; inputs are validated before the first day is
  produced and any failure discards the run.
- **Independent runs**: parameters and weather are read-only, so batches of
  runs (:func:`simulate_batch`, :func:`planting_date_sweep`) share nothing
  mutable and can run on worker threads.

Examples
--------
>>> from solanumyield.core.crops import CropParameters
>>> from solanumyield.core.data_containers import SimulationConfig
>>> from solanumyield.core.model import simulate
>>> cfg = SimulationConfig(
...     sowing_date="2021-11-15",
...     harvest=90,
...     emergence_offset=10,
...     params=CropParameters.from_preset("BARI_ALU_72"),
... )
>>> res = simulate(cfg, weather)  # weather loaded elsewhere
>>> res.final.fresh_yield
"""

from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Iterable, Sequence

import pandas as pd

from solanumyield.core.data_containers import (
    DailyResult,
    Phase,
    Results,
    SimulationConfig,
    SimulationState,
    WeatherRecord,
    WeatherSeries,
    to_date,
)
from solanumyield.library import biomass, thermal_time
from solanumyield.library.canopy import cover_fraction
from solanumyield.library.partitioning import harvest_index
from solanumyield.library.tuber_yield import (
    fresh_yield,
    fresh_yield_per_plant,
    tuber_dry_matter,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GrowthSimulator:
    r"""Single-run potato growth simulator.

    States move ``NOT_STARTED → GROWING → COMPLETED``: the first call to
    :meth:`step` (sowing day) starts growth, and processing the harvest day
    completes the run. A completed simulator refuses further steps.

    Parameters
    ----------
    config : SimulationConfig
        Dates, density, thermal-time base and crop parameters for the run.
    weather : WeatherSeries
        Daily forcings; must cover ``[sowing_date, harvest_date]`` without
        gaps.

    Raises
    ------
    DataError
        On construction, if the weather window has a missing day, or
        ``Tmin > Tmax`` on any day of the window.

    Notes
    -----
    - **Emergence.** Days before emergence are emitted with all state fields
      at zero. Thermal time is 0 on the emergence day and each later day adds
      its own increment, so ``thermal_time`` at DAP ``d`` is the sum of the
      increments of days ``e + 1 .. d``.
    - **Units.** Temperature [°C], SRAD [MJ m⁻² day⁻¹], RUE [g MJ⁻¹],
      dry matter [g m⁻²], fresh yield [t ha⁻¹], cover and harvest index in
      [0, 1].

    Examples
    --------
    >>> sim = GrowthSimulator(config=cfg, weather=weather)
    >>> results = sim.run()
    >>> len(results) == cfg.n_days
    True
    """

    config: SimulationConfig
    weather: WeatherSeries
    state: SimulationState = field(init=False)
    _window: WeatherSeries = field(init=False, repr=False)
    _rows: list = field(init=False, repr=False)

    def __post_init__(self):
        cfg = self.config
        self._window = self.weather.window(cfg.sowing_date, cfg.harvest_date)
        # Reject bad temperature records before any day is produced
        thermal_time.daily_increment(
            self._window.tmax, self._window.tmin, cfg.base_temperature
        )
        self.state = SimulationState()
        self._rows = []

    # ---------------------------
    # Public API
    # ---------------------------
    @property
    def phase(self) -> Phase:
        return self.state.phase

    def run(self) -> Results:
        """Simulate from sowing to harvest and return the full trajectory."""
        cfg = self.config
        if self.state.phase is not Phase.NOT_STARTED:
            raise RuntimeError("GrowthSimulator instances run only once.")
        logger.debug(
            "Simulating %s sown %s, harvest %s (%d days)",
            cfg.params.variety,
            cfg.sowing_date,
            cfg.harvest_date,
            cfg.n_days,
        )
        for _ in range(cfg.n_days):
            self.step()
        results = Results(rows=tuple(self._rows))
        logger.debug(
            "Finished %s sown %s: %.2f t/ha",
            cfg.params.variety,
            cfg.sowing_date,
            results.final.fresh_yield,
        )
        return results

    def step(self) -> DailyResult:
        """Advance one day and return that day's row."""
        s, cfg = self.state, self.config
        if s.phase is Phase.COMPLETED:
            raise RuntimeError("Simulation already completed at harvest.")
        if s.phase is Phase.NOT_STARTED:
            s.phase = Phase.GROWING

        dap = len(self._rows)
        record = self._window[dap]

        if dap >= cfg.emergence_offset:
            self._advance_state(s, record, dap, cfg)

        row = self._package_row(s, record, dap, cfg)
        self._rows.append(row)

        if dap == cfg.duration:
            s.phase = Phase.COMPLETED
        return row

    # --------------------------- End of public API --------------------------

    # ---------------------------
    # Daily update
    # ---------------------------
    @staticmethod
    def _advance_state(
        s: SimulationState,
        record: WeatherRecord,
        dap: int,
        cfg: SimulationConfig,
    ) -> None:
        """
        Update the state in place for one post-emergence day.

        Order matters: thermal time first, then the two thermal-time curves,
        then biomass from today's cover, then yield from today's biomass and
        harvest index.
        """
        cp = cfg.params

        # --- Thermal time (emergence day holds the initial 0)
        if dap > cfg.emergence_offset:
            inc = thermal_time.daily_increment(
                record.tmax, record.tmin, cfg.base_temperature
            )
            s.thermal_time = thermal_time.accumulate(s.thermal_time, inc)

        # --- Canopy cover and partitioning
        s.cover = cover_fraction(s.thermal_time, cp, cfg.canopy_policy)
        s.harvest_index = harvest_index(s.thermal_time, cp)

        # --- Biomass
        dm_t = biomass.daily_dry_matter(s.cover, record.srad, cp.RUE)
        s.total_dry_matter = biomass.accumulate(s.total_dry_matter, dm_t)

        # --- Tubers
        s.tuber_dry_matter = tuber_dry_matter(
            s.total_dry_matter, s.harvest_index
        )

    @staticmethod
    def _package_row(
        s: SimulationState,
        record: WeatherRecord,
        dap: int,
        cfg: SimulationConfig,
    ) -> DailyResult:
        fy = fresh_yield(s.tuber_dry_matter, cfg.params.DMc)
        return DailyResult(
            date=record.date,
            dap=dap,
            thermal_time=float(s.thermal_time),
            cover=float(s.cover),
            total_dry_matter=float(s.total_dry_matter),
            tuber_dry_matter=float(s.tuber_dry_matter),
            fresh_yield=float(fy),
            harvest_index=float(s.harvest_index),
            fresh_yield_per_plant=float(
                fresh_yield_per_plant(fy, cfg.plant_density)
            ),
        )


def simulate(config: SimulationConfig, weather: WeatherSeries) -> Results:
    """
    Run one simulation and return its daily trajectory.

    Parameters
    ----------
    config : SimulationConfig
        Run configuration (already validated on construction).
    weather : WeatherSeries
        Daily forcings covering ``[sowing_date, harvest_date]``.

    Returns
    -------
    Results
        One row per day, sowing and harvest inclusive.

    Raises
    ------
    DataError
        If the weather has a gap in the window or ``Tmin > Tmax``. No partial
        trajectory is returned.
    """
    return GrowthSimulator(config=config, weather=weather).run()


def simulate_batch(
    configs: Sequence[SimulationConfig],
    weather: WeatherSeries,
    max_workers: int | None = None,
) -> list[Results]:
    """
    Run independent simulations, optionally on worker threads.

    Results are returned in the order of ``configs``. The first failure
    propagates to the caller.

    Parameters
    ----------
    configs : sequence of SimulationConfig
        One configuration per run.
    weather : WeatherSeries
        Shared, read-only forcings.
    max_workers : int or None, default=None
        Thread count; ``1`` runs sequentially in the calling thread.
    """
    run = partial(simulate, weather=weather)
    if max_workers == 1:
        return [run(cfg) for cfg in configs]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(run, configs))


def planting_date_sweep(
    base_config: SimulationConfig,
    sowing_dates: Iterable,
    weather: WeatherSeries,
    max_workers: int | None = None,
) -> dict[dt.date, Results]:
    """
    Simulate the same variety and season length for several sowing dates.

    Each run keeps the duration and emergence offset of ``base_config``; only
    the sowing date changes.

    Returns
    -------
    dict of {date: Results}
        Trajectories keyed by sowing date, in the order given.
    """
    dates = [to_date(d) for d in sowing_dates]
    configs = [
        base_config.replace(sowing_date=d, harvest=base_config.duration)
        for d in dates
    ]
    runs = simulate_batch(configs, weather, max_workers=max_workers)
    return dict(zip(dates, runs))


def final_yields(sweep: dict[dt.date, Results]) -> pd.DataFrame:
    """Harvest-day values of each run in a sweep, one row per sowing date."""
    records = []
    for sowing, res in sweep.items():
        last = res.final
        records.append(
            {
                "sowing_date": pd.Timestamp(sowing),
                "harvest_date": pd.Timestamp(last.date),
                "thermal_time": last.thermal_time,
                "total_dry_matter": last.total_dry_matter,
                "harvest_index": last.harvest_index,
                "fresh_yield": last.fresh_yield,
            }
        )
    return pd.DataFrame.from_records(records)
