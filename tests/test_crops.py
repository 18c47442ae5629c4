import pytest

from solanumyield.core.crops import (
    SYMBOLS,
    CropParameters,
    load_crop_parameters_csv,
)
from solanumyield.core.exceptions import ConfigError

BASE = dict(
    wmax=0.90, tm=330.0, te=870.0, A=0.75, tu=650.0, b=190.0, RUE=3.22,
    DMc=0.20,
)


def test_presets():
    assert CropParameters.presets() == ["BARI_ALU_72", "BARI_ALU_78"]
    cp = CropParameters.from_preset("BARI_ALU_78")
    assert cp.variety == "BARI_ALU_78"
    assert (cp.wmax, cp.tm, cp.te, cp.A) == (0.90, 330.0, 870.0, 0.75)
    assert (cp.tu, cp.b, cp.RUE, cp.DMc) == (650.0, 190.0, 3.22, 0.20)


def test_unknown_preset():
    with pytest.raises(KeyError):
        CropParameters.from_preset("DESIREE")


def test_frozen():
    cp = CropParameters(**BASE)
    with pytest.raises(AttributeError):
        cp.wmax = 0.5


@pytest.mark.parametrize(
    "changes",
    [
        dict(te=330.0),  # te must exceed tm
        dict(tm=0.0),
        dict(b=650.0),  # b must be below tu
        dict(b=-1.0),
        dict(wmax=1.2),
        dict(A=-0.1),
        dict(DMc=0.0),
        dict(RUE=0.0),
        dict(RUE="fast"),
    ],
)
def test_invalid_parameters(changes):
    with pytest.raises(ConfigError):
        CropParameters(**{**BASE, **changes})


def test_from_mapping():
    cp = CropParameters.from_mapping({**BASE, "extra": 1}, variety="x")
    assert cp == CropParameters(**BASE, variety="x")
    with pytest.raises(ConfigError):
        CropParameters.from_mapping({k: BASE[k] for k in ("wmax", "tm")})


def test_describe():
    df = CropParameters.describe()
    assert list(df["symbol"]) == list(SYMBOLS)
    assert df.loc[df["symbol"] == "RUE", "unit"].item() == "g/MJ"


def test_load_crop_parameters_csv(tmp_path):
    path = tmp_path / "params.csv"
    header = "variety," + ",".join(SYMBOLS)
    path.write_text(
        header + "\n"
        "A1,0.9,330,870,0.75,650,190,3.22,0.2\n"
        "B2,0.8,300,800,0.7,600,150,3.0,0.22\n"
    )
    table = load_crop_parameters_csv(path)
    assert list(table) == ["A1", "B2"]
    assert table["B2"].DMc == 0.22
    assert table["A1"].variety == "A1"


def test_load_crop_parameters_csv_rejects_duplicates(tmp_path):
    path = tmp_path / "params.csv"
    path.write_text(
        "variety," + ",".join(SYMBOLS) + "\n"
        "A1,0.9,330,870,0.75,650,190,3.22,0.2\n"
        "A1,0.9,330,870,0.75,650,190,3.22,0.2\n"
    )
    with pytest.raises(ConfigError):
        load_crop_parameters_csv(path)
