"""
Crop parameter presets and dataclass container.

This module provides a single, concrete dataclass :class:`CropParameters`
holding the eight calibrated parameters of the potato growth model for one
variety. The class is **frozen** (immutable) and uses **slots**. Parameters are
produced by an external calibration step; here they are only stored,
validated, and looked up by variety name.

The eight parameters are:

==========  =====================================================  ========
symbol      definition                                             unit
==========  =====================================================  ========
``wmax``    Maximum canopy cover index                             fraction
``tm``      Thermal time at the maximum canopy cover growth rate   °C·day
``te``      Thermal time at the maximum canopy cover value         °C·day
``A``       Maximum harvest index                                  fraction
``tu``      Thermal time at maximum tuber partition rate           °C·day
``b``       Thermal time just before the tuber initiation process  °C·day
``RUE``     Average radiation use efficiency                       g/MJ
``DMc``     Dry matter concentration of tubers                     fraction
==========  =====================================================  ========

Classes
-------
CropParameters
    Immutable container for one variety. Provides
    :meth:`CropParameters.from_preset`, :meth:`CropParameters.from_mapping`,
    and :meth:`CropParameters.describe`.

Functions
---------
load_crop_parameters_csv
    Read a calibrated parameter table (one row per variety).

Examples
--------
>>> from solanumyield.core.crops import CropParameters
>>> cp = CropParameters.from_preset("BARI_ALU_72")
>>> cp.te
870.0
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping

import pandas as pd

from solanumyield.core.exceptions import ConfigError

SYMBOLS = ("wmax", "tm", "te", "A", "tu", "b", "RUE", "DMc")

DEFINITIONS = (
    "Maximum canopy cover index",
    "Thermal time at the maximum canopy cover growth rate",
    "Thermal time at the maximum canopy cover value",
    "Maximum harvest index",
    "Thermal time at maximum tuber partition rate",
    "Thermal time just before the tuber initiation process",
    "Average radiation use efficiency",
    "Dry matter concentration of tubers",
)

UNITS = (
    "fraction",
    "C-day",
    "C-day",
    "fraction",
    "C-day",
    "C-day",
    "g/MJ",
    "fraction",
)

#                  wmax     tm     te     A     tu      b   RUE   DMc
_PRESETS: Mapping[str, tuple[float, ...]] = {
    "BARI_ALU_72": (0.90, 330.0, 870.0, 0.75, 650.0, 190.0, 3.22, 0.20),
    "BARI_ALU_78": (0.90, 330.0, 870.0, 0.75, 650.0, 190.0, 3.22, 0.20),
}


@dataclass(frozen=True, slots=True)
class CropParameters:
    """
    Calibrated parameter set for one potato variety.

    Parameters
    ----------
    wmax : float
        Maximum canopy cover fraction, in [0, 1].
    tm : float
        Thermal time at the maximum canopy growth rate [°C·day], ``> 0``.
    te : float
        Thermal time at the maximum canopy cover value [°C·day], ``> tm``.
    A : float
        Maximum harvest index, in [0, 1].
    tu : float
        Thermal time at the maximum tuber partitioning rate [°C·day].
    b : float
        Thermal time at the onset of tuber initiation [°C·day],
        ``0 ≤ b < tu``.
    RUE : float
        Radiation-use efficiency [g DM / MJ intercepted], ``> 0``.
    DMc : float
        Tuber dry-matter concentration, in (0, 1].
    variety : str, default="custom"
        Human-readable variety identifier.

    Raises
    ------
    ConfigError
        If any of the invariants above is violated.
    """

    wmax: float
    tm: float
    te: float
    A: float
    tu: float
    b: float
    RUE: float
    DMc: float
    variety: str = "custom"

    def __post_init__(self):
        """Coerce the eight parameters to float and validate them."""
        for name in SYMBOLS:
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as e:
                raise ConfigError(
                    f"Crop parameter '{name}' must be numeric."
                ) from e
            # frozen dataclass, hence object.__setattr__
            object.__setattr__(self, name, value)

        if not (0.0 < self.tm < self.te):
            raise ConfigError("Canopy parameters must satisfy 0 < tm < te.")
        if not (0.0 <= self.b < self.tu):
            raise ConfigError(
                "Partitioning parameters must satisfy 0 ≤ b < tu."
            )
        if not (0.0 <= self.wmax <= 1.0):
            raise ConfigError("wmax must be in [0, 1].")
        if not (0.0 <= self.A <= 1.0):
            raise ConfigError("A must be in [0, 1].")
        if not (0.0 < self.DMc <= 1.0):
            raise ConfigError("DMc must be in (0, 1].")
        if self.RUE <= 0.0:
            raise ConfigError("RUE must be positive.")

    # -------------------------
    # Convenience constructors / presets
    # -------------------------
    @classmethod
    def presets(cls) -> list[str]:
        """Names of the built-in varieties."""
        return sorted(_PRESETS)

    @classmethod
    def from_preset(cls, name: str) -> "CropParameters":
        """
        Instantiate from a named preset.

        Parameters
        ----------
        name : str
            Variety identifier, e.g. ``"BARI_ALU_72"``.

        Returns
        -------
        CropParameters
            Parameter set for the given variety.

        Raises
        ------
        KeyError
            If `name` is not a known preset.
        """
        try:
            values = _PRESETS[name]
        except KeyError as e:
            raise KeyError(
                f"Unknown preset '{name}'. Known: {sorted(_PRESETS)}"
            ) from e
        return cls(**dict(zip(SYMBOLS, values)), variety=name)

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, float], variety: str | None = None
    ) -> "CropParameters":
        """
        Build a parameter set from any mapping holding the eight symbols.

        Extra keys are ignored, missing ones raise :class:`ConfigError`.
        """
        missing = [s for s in SYMBOLS if s not in mapping]
        if missing:
            raise ConfigError(f"Missing crop parameters: {missing}")
        if variety is None:
            variety = str(mapping.get("variety", "custom"))
        return cls(**{s: mapping[s] for s in SYMBOLS}, variety=variety)

    @staticmethod
    def describe() -> pd.DataFrame:
        """Table with the definition, symbol and unit of each parameter."""
        return pd.DataFrame(
            {"definition": DEFINITIONS, "symbol": SYMBOLS, "unit": UNITS}
        )

    def as_dict(self) -> dict[str, float | str]:
        return asdict(self)


def load_crop_parameters_csv(path: Path | str) -> dict[str, CropParameters]:
    """
    Read a calibrated parameter table.

    Parameters
    ----------
    path : path-like
        CSV file with a ``variety`` column and one column per parameter
        symbol (``wmax, tm, te, A, tu, b, RUE, DMc``).

    Returns
    -------
    dict of {str: CropParameters}
        Parameter sets keyed by variety, in file order.

    Raises
    ------
    ConfigError
        If a column is missing, a variety is duplicated, or a row violates
        the parameter invariants.
    """
    df = pd.read_csv(path)
    if "variety" not in df.columns:
        raise ConfigError("Parameter table needs a 'variety' column.")
    if df["variety"].duplicated().any():
        dups = sorted(df.loc[df["variety"].duplicated(), "variety"])
        raise ConfigError(f"Duplicated varieties in parameter table: {dups}")

    out: dict[str, CropParameters] = {}
    for row in df.to_dict(orient="records"):
        variety = str(row["variety"])
        out[variety] = CropParameters.from_mapping(row, variety=variety)
    return out
