# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Rounding of monetary amounts and ratios.

Every figure produced by the engine is rounded with ``round_amount()``:
ties are rounded towards positive infinity (``0.125`` -> ``0.13``,
``-0.125`` -> ``-0.12``). Python's built-in ``round()`` rounds ties to
even and must not be used for amounts.
"""

import math


def round_amount(value: float, digits: int = 2) -> float:
    """
    Round ``value`` to ``digits`` decimals, ties towards positive infinity.

    Non-finite values (``inf``, ``nan``) are returned unchanged.

    >>> round_amount(0.125)
    0.13
    >>> round_amount(2.5, 0)
    3.0
    """
    if not math.isfinite(value):
        return value
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
