"""Conversion of biomass and harvest index into tuber yield."""

from __future__ import annotations

from solanumyield.library.curves import Array

# g m⁻² -> t ha⁻¹
G_M2_TO_T_HA = 0.01


def tuber_dry_matter(total_dry_matter, hi) -> Array | float:
    """Tuber dry matter [g m⁻²] = total dry matter × harvest index."""
    return total_dry_matter * hi


def fresh_yield(tuber_dm, dmc: float) -> Array | float:
    """
    Fresh tuber yield [t ha⁻¹].

    Parameters
    ----------
    tuber_dm : float or ndarray
        Cumulative tuber dry matter [g m⁻²].
    dmc : float
        Tuber dry-matter concentration, in (0, 1].
    """
    return tuber_dm / dmc * G_M2_TO_T_HA


def fresh_yield_per_plant(fresh_t_ha, plant_density: float) -> Array | float:
    """
    Fresh tuber yield per plant [g plant⁻¹].

    ``1 t ha⁻¹ = 100 g m⁻²``, divided by the planting density
    [plants m⁻²].
    """
    return fresh_t_ha / G_M2_TO_T_HA / plant_density
