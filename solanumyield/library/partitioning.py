from __future__ import annotations

from solanumyield.core.crops import CropParameters
from solanumyield.library.curves import Array, logistic_rise


def harvest_index(tt, params: CropParameters) -> Array | float:
    """
    Fraction of cumulative biomass allocated to tubers.

    Zero up to the tuber-initiation threshold ``b``, then a logistic rise with
    inflection at ``tu`` approaching (never exceeding) the maximum harvest
    index ``A``. Non-decreasing in ``tt``.
    """
    return params.A * logistic_rise(tt, onset=params.b, inflection=params.tu)
