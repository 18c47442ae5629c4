import datetime as dt

import h5py
import numpy.testing as npt
import pytest

from solanumyield.core.crops import CropParameters
from solanumyield.core.data_containers import SimulationConfig, WeatherSeries
from solanumyield.core.model import planting_date_sweep, simulate
from solanumyield.library.io_hdf5 import (
    list_runs_hdf5,
    load_results_hdf5,
    load_results_vars_hdf5,
    save_results_hdf5,
)

SOW = dt.date(2022, 10, 1)
WEATHER = WeatherSeries.constant(SOW, 160, tmax=24.0, tmin=11.0, srad=17.0)
CONFIG = SimulationConfig(
    SOW, 110, CropParameters.from_preset("BARI_ALU_72"), emergence_offset=14
)


def test_results_survive_hdf5(tmp_path):
    res = simulate(CONFIG, WEATHER)
    path = tmp_path / "run.h5"
    save_results_hdf5(res, path, extra_meta={"variety": "BARI_ALU_72"})

    assert load_results_hdf5(path) == res
    with h5py.File(path, "r") as f:
        assert f["results"].attrs["variety"] == "BARI_ALU_72"
        assert f["results"].attrs["n_days"] == 111


def test_load_selected_variables(tmp_path):
    res = simulate(CONFIG, WEATHER)
    path = tmp_path / "run.h5"
    save_results_hdf5(res, path)
    out = load_results_vars_hdf5(path, names=["date", "fresh_yield"])
    npt.assert_array_equal(out["date"], res.dates)
    npt.assert_allclose(out["fresh_yield"], res.fresh_yield)
    with pytest.raises(KeyError):
        load_results_vars_hdf5(path, names=["yield_tensor"])


def test_sweep_runs_share_one_file(tmp_path):
    sweep = planting_date_sweep(
        CONFIG, [SOW, SOW + dt.timedelta(days=20)], WEATHER
    )
    path = tmp_path / "sweep.h5"
    for sowing, res in sweep.items():
        save_results_hdf5(res, path, group=sowing.isoformat())
    # rewriting a group replaces it
    first = next(iter(sweep))
    save_results_hdf5(sweep[first], path, group=first.isoformat())

    assert sorted(list_runs_hdf5(path)) == ["2022-10-01", "2022-10-21"]
    for sowing, res in sweep.items():
        assert load_results_hdf5(path, group=sowing.isoformat()) == res
