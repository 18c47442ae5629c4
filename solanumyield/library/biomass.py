from __future__ import annotations

from solanumyield.library.curves import Array


def daily_dry_matter(cover, srad, rue: float) -> Array | float:
    """
    Daily dry-matter production [g m⁻² day⁻¹].

    Intercepted radiation is approximated as ``cover × srad`` with no
    extinction coefficient; calibrated RUE values assume exactly this form.

    Parameters
    ----------
    cover : float or ndarray
        Canopy cover fraction.
    srad : float or ndarray
        Incident solar radiation [MJ m⁻² day⁻¹].
    rue : float
        Radiation-use efficiency [g MJ⁻¹].
    """
    return cover * srad * rue


def accumulate(previous: float, increment: float) -> float:
    """Running total dry matter after adding one day's production."""
    return previous + increment
