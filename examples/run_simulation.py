from pathlib import Path
import datetime as dt
import logging

import numpy as np

from solanumyield.core.crops import CropParameters
from solanumyield.core.data_containers import SimulationConfig, WeatherSeries
from solanumyield.core.model import final_yields, planting_date_sweep
from solanumyield.library.io_hdf5 import save_results_hdf5
from solanumyield.library.weather_io import load_weather_csv

DATA_PATH = Path(Path(__file__).parent.parent, "data")
WEATHER_CSV_PATH = Path(DATA_PATH, "Weather", "weather.csv")


def synthetic_weather(start: dt.date, days: int, seed: int = 0) -> WeatherSeries:
    """Seasonal sine-shaped temperatures and radiation with daily noise."""
    rng = np.random.default_rng(seed)
    doy = np.arange(days)
    season = np.sin(2 * np.pi * (doy - 30) / 365.0)
    tmin = 12.0 + 6.0 * season + rng.normal(0.0, 1.5, days)
    tmax = tmin + 10.0 + rng.normal(0.0, 1.5, days).clip(-8.0, None)
    srad = (16.0 + 5.0 * season + rng.normal(0.0, 2.0, days)).clip(2.0, None)
    dates = np.datetime64(start, "D") + doy
    return WeatherSeries(dates=dates, tmax=tmax, tmin=tmin, srad=srad)


logging.basicConfig(level=logging.INFO)

# -----------------------------
# Weather
# -----------------------------
start_date = dt.date(2021, 10, 1)
end_date = dt.date(2022, 4, 30)

if WEATHER_CSV_PATH.exists():
    weather = load_weather_csv(WEATHER_CSV_PATH, start_date, end_date)
else:
    weather = synthetic_weather(start_date, (end_date - start_date).days + 1)

# -----------------------------
# Planting-date sweep
# -----------------------------
base = SimulationConfig(
    sowing_date=start_date,
    harvest=90,
    emergence_offset=12,
    base_temperature=2.0,
    params=CropParameters.from_preset("BARI_ALU_72"),
)
sowing_dates = [start_date + dt.timedelta(days=7 * k) for k in range(12)]
sweep = planting_date_sweep(base, sowing_dates, weather)

print(final_yields(sweep).to_string(index=False))

# -----------------------------
# Save trajectories
# -----------------------------
OUT = Path(Path(__file__).parent, "outputs", "bari_alu_72_sweep.h5")
for sowing, res in sweep.items():
    save_results_hdf5(
        res,
        OUT,
        group=sowing.isoformat(),
        extra_meta={"variety": base.params.variety},
    )
