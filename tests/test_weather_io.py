import datetime as dt

import numpy as np
import pandas as pd
import pytest

from solanumyield.core.exceptions import DataError
from solanumyield.library.weather_io import load_weather_csv, weather_from_dataframe


def _frame():
    return pd.DataFrame(
        {
            "DATE": ["2022-01-03", "2022-01-01", "2022-01-02", "2022-01-04"],
            "T2M_MAX": [21.0, 19.0, 20.0, 22.0],
            "T2M_MIN": [9.0, 7.0, 8.0, 10.0],
            "ALLSKY_SFC_SW_DWN": [15.0, 13.0, 14.0, 16.0],
        }
    )


def test_weather_from_dataframe_renames_and_sorts():
    w = weather_from_dataframe(_frame())
    assert w.start == dt.date(2022, 1, 1)
    np.testing.assert_array_equal(w.tmax, [19.0, 20.0, 21.0, 22.0])
    np.testing.assert_array_equal(w.srad, [13.0, 14.0, 15.0, 16.0])


def test_weather_from_dataframe_clips_window():
    w = weather_from_dataframe(_frame(), start="2022-01-02", end="2022-01-03")
    assert len(w) == 2
    assert w.end == dt.date(2022, 1, 3)


def test_custom_column_mapping():
    df = pd.DataFrame(
        {"day": ["2022-01-01"], "hi": [20.0], "lo": [10.0], "rs": [12.0]}
    )
    w = weather_from_dataframe(
        df, columns={"day": "date", "hi": "tmax", "lo": "tmin", "rs": "srad"}
    )
    assert w[0].tmin == 10.0


def test_missing_column_is_data_error():
    with pytest.raises(DataError):
        weather_from_dataframe(_frame().drop(columns="T2M_MIN"))


def test_duplicate_dates_are_data_error():
    df = _frame()
    df.loc[3, "DATE"] = "2022-01-01"
    with pytest.raises(DataError):
        weather_from_dataframe(df)


def test_load_weather_csv(tmp_path):
    path = tmp_path / "weather.csv"
    _frame().to_csv(path, index=False)
    w = load_weather_csv(path, end="2022-01-02")
    assert len(w) == 2
    assert w.record("2022-01-02").tmax == 20.0


def test_two_aliases_for_one_column_is_data_error():
    df = _frame()
    df["fecha"] = df["DATE"]
    with pytest.raises(DataError, match="date"):
        weather_from_dataframe(df)
