"""Canopy cover as a function of cumulative thermal time."""

from __future__ import annotations

from enum import Enum

import numpy as np

from solanumyield.core.crops import CropParameters
from solanumyield.library.curves import Array, _as_output, logistic_rise


class CanopyPolicy(str, Enum):
    """
    Behaviour of the canopy after ``te``.

    ``PLATEAU`` holds the cover at ``wmax`` (potential-yield runs, where
    senescence is attributed to harvest timing). ``DECLINE`` mirrors the
    growth curve so the canopy senesces with the same shape it grew.
    """

    PLATEAU = "plateau"
    DECLINE = "decline"


def cover_fraction(
    tt,
    params: CropParameters,
    policy: CanopyPolicy | str = CanopyPolicy.PLATEAU,
) -> Array | float:
    r"""
    Canopy cover fraction for cumulative thermal time ``tt``.

    Two branches pivoting at ``te``:

    - ``tt ≤ te``: :math:`w_{max}\\,f(tt)` with ``f`` the normalized logistic
      rise from 0 at ``tt = 0`` through ``tm`` (inflection) to exactly 1 at
      ``te``.
    - ``tt > te``: ``wmax`` under ``plateau``, or
      :math:`w_{max}\\,(1 - f_d(tt))` under ``decline``, where ``f_d`` starts
      at ``te`` and has its inflection at ``2 te - tm``.

    Parameters
    ----------
    tt : float or ndarray
        Cumulative thermal time since emergence [°C·day].
    params : CropParameters
        Uses ``wmax``, ``tm`` and ``te``.
    policy : CanopyPolicy or {'plateau', 'decline'}, default='plateau'
        Post-``te`` behaviour.

    Returns
    -------
    float or ndarray
        Cover fraction in ``[0, wmax]``.
    """
    policy = CanopyPolicy(policy)
    t = np.asarray(tt, dtype=float)

    rise = logistic_rise(t, onset=0.0, inflection=params.tm, end=params.te)
    if policy is CanopyPolicy.PLATEAU:
        late = np.ones_like(t)
    else:
        late = 1.0 - logistic_rise(
            t, onset=params.te, inflection=2.0 * params.te - params.tm
        )

    cover = params.wmax * np.where(t <= params.te, rise, late)
    return _as_output(np.clip(cover, 0.0, params.wmax), tt)
