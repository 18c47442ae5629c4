from __future__ import annotations

import numpy as np
from scipy.special import expit

Array = np.ndarray

# Distance (in logistic scale units) between the onset and the inflection
# point. The curve is renormalized so that it starts exactly at 0 on the onset.
LOGISTIC_STEEPNESS = 4.0


def _as_output(x: Array, like) -> Array | float:
    """Return a Python float for scalar input, an array otherwise."""
    return float(x) if np.ndim(like) == 0 else x


def logistic_rise(
    tt,
    onset: float,
    inflection: float,
    end: float | None = None,
    steepness: float = LOGISTIC_STEEPNESS,
) -> Array | float:
    r"""
    Normalized logistic rise from 0 at ``onset`` to 1.

    Shared shape of the canopy-cover and tuber-partitioning curves. With
    :math:`s = (t_i - t_0)/k` and :math:`L(t) = 1/(1 + e^{-(t - t_i)/s})`,

    .. math::

        f(t) =
        \\begin{cases}
        0, & t \\le t_0, \\\\
        \\dfrac{L(t) - L(t_0)}{L(t_e) - L(t_0)}, & t > t_0,
        \\end{cases}

    clipped to ``[0, 1]``, where :math:`t_e` is ``end`` (``L(t_e) = 1`` when
    ``end`` is None, so the curve only approaches 1 asymptotically). The
    normalization is affine, so the inflection stays at ``inflection``.

    Parameters
    ----------
    tt : float or ndarray
        Cumulative thermal time [°C·day].
    onset : float
        Thermal time at which the rise starts (value 0 up to here).
    inflection : float
        Thermal time of the maximum rate of increase; ``> onset``.
    end : float or None, default=None
        Thermal time at which the curve reaches exactly 1; ``> inflection``.
    steepness : float, default=LOGISTIC_STEEPNESS
        Number of logistic scale units between ``onset`` and ``inflection``.

    Returns
    -------
    float or ndarray
        Fraction in ``[0, 1]``, non-decreasing in ``tt``.

    Raises
    ------
    ValueError
        If the breakpoints are not ordered or ``steepness`` is not positive.
    """
    if not inflection > onset:
        raise ValueError("logistic_rise needs inflection > onset.")
    if end is not None and not end > inflection:
        raise ValueError("logistic_rise needs end > inflection.")
    if steepness <= 0.0:
        raise ValueError("steepness must be positive.")

    t = np.asarray(tt, dtype=float)
    scale = (inflection - onset) / steepness
    base = expit((onset - inflection) / scale)
    top = 1.0 if end is None else expit((end - inflection) / scale)

    frac = (expit((t - inflection) / scale) - base) / (top - base)
    frac = np.where(t <= onset, 0.0, np.clip(frac, 0.0, 1.0))
    return _as_output(frac, tt)
