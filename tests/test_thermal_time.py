import numpy as np
import numpy.testing as npt
import pytest

from solanumyield.core.exceptions import DataError
from solanumyield.library import biomass, thermal_time
from solanumyield.library.tuber_yield import (
    G_M2_TO_T_HA,
    fresh_yield,
    fresh_yield_per_plant,
    tuber_dry_matter,
)


def test_daily_increment_basic():
    assert thermal_time.daily_increment(20.0, 10.0, 0.0) == 15.0
    assert thermal_time.daily_increment(28.0, 16.0, 5.0) == 17.0


def test_daily_increment_floors_at_zero():
    assert thermal_time.daily_increment(4.0, -2.0, 5.0) == 0.0


def test_daily_increment_equal_temperatures_allowed():
    assert thermal_time.daily_increment(12.0, 12.0, 2.0) == 10.0


def test_daily_increment_rejects_tmin_above_tmax():
    with pytest.raises(DataError):
        thermal_time.daily_increment(10.0, 11.0, 0.0)
    with pytest.raises(DataError):
        thermal_time.daily_increment([20.0, 10.0], [10.0, 11.0], 0.0)


def test_daily_increment_vectorized():
    inc = thermal_time.daily_increment(
        np.array([20.0, 6.0, 30.0]), np.array([10.0, 0.0, 10.0]), 5.0
    )
    npt.assert_allclose(inc, [10.0, 0.0, 15.0])


def test_accumulate():
    assert thermal_time.accumulate(100.0, 12.5) == 112.5


def test_cumulative_thermal_time_starts_at_emergence():
    tmax = np.full(6, 20.0)
    tmin = np.full(6, 10.0)
    ctt = thermal_time.cumulative_thermal_time(tmax, tmin, 5.0, start=2)
    npt.assert_allclose(ctt, [0.0, 0.0, 0.0, 10.0, 20.0, 30.0])


def test_biomass_is_cover_times_radiation_times_rue():
    assert biomass.daily_dry_matter(0.5, 18.0, 3.0) == pytest.approx(27.0)
    assert biomass.daily_dry_matter(0.0, 18.0, 3.0) == 0.0
    assert biomass.accumulate(10.0, 2.5) == 12.5


def test_yield_conversion():
    tdm = tuber_dry_matter(1000.0, 0.6)
    assert tdm == pytest.approx(600.0)
    # 600 g DM m⁻² at 20 % DM -> 3000 g fresh m⁻² -> 30 t/ha
    assert fresh_yield(tdm, 0.20) == pytest.approx(30.0)
    assert G_M2_TO_T_HA == 0.01
    # 30 t/ha = 3000 g m⁻², at 4 plants m⁻² -> 750 g/plant
    assert fresh_yield_per_plant(30.0, 4.0) == pytest.approx(750.0)
