# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Preferred-return hurdle solve.

The amount a partner needs in the open year to bring its IRR-to-date up to
the hurdle is found by bisection over the pure function
``amount -> resulting IRR``. Cash-flow histories are irregular (multiple
calls, partial distributions), so no closed form is used.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from scipy.optimize import bisect

from ..core.primitives import CalculationSettings
from .ledger import PartnerLedger

logger = logging.getLogger(__name__)

# IRR reported for a history with no positive flows yet (total loss so far)
_NO_RETURN_IRR = -1.0


def resulting_irr(
    ledger: PartnerLedger, received_this_year: float
) -> Callable[[float], float]:
    """Return ``amount -> IRR`` with ``amount`` added to the ledger's open year."""

    def irr_for(amount: float) -> float:
        value = ledger.irr_with(received_this_year + amount)
        return _NO_RETURN_IRR if value is None else value

    return irr_for


def solve_hurdle_amount(
    irr_for: Callable[[float], float],
    hurdle: float,
    cap: float,
    settings: Optional[CalculationSettings] = None,
) -> float:
    """
    Smallest amount in ``[0, cap]`` that lifts the IRR to ``hurdle``.

    Args:
        irr_for: Monotonic non-decreasing map from amount to IRR
        hurdle: Target IRR
        cap: Maximum amount available to this partner in this tier
        settings: Solver tolerance and iteration cap

    Returns:
        0.0 when the hurdle is already met, ``cap`` when even the full cap
        leaves the partner at or below the hurdle, otherwise the root
    """
    settings = settings or CalculationSettings()
    if cap <= 0:
        return 0.0
    if irr_for(0.0) >= hurdle:
        return 0.0
    if irr_for(cap) <= hurdle:
        return cap

    amount = bisect(
        lambda x: irr_for(x) - hurdle,
        0.0,
        cap,
        xtol=settings.solver_xtol,
        maxiter=settings.solver_max_iterations,
    )
    logger.debug("Hurdle %.4f reached with %.2f of %.2f available", hurdle, amount, cap)
    return min(max(float(amount), 0.0), cap)
