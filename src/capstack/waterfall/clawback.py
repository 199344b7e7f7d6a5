# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Clawback true-up by hypothetical liquidation.

At each evaluation year the tier evaluator is re-run on a synthetic series in
which every capital call keeps its timing but all positive cash up to the
evaluation year arrives in that year. The per-partner difference between the
hypothetical cumulative cash flow and the actual one (including earlier
adjustments) is emitted as a signed adjustment on the evaluation row:
over-earners return the excess and under-earners receive it. Adjustments in a
year always sum to zero.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from ..core.errors import WarningLog
from ..core.primitives import CalculationSettings, ClawbackTriggerEnum
from .equity import EquityClass
from .evaluator import TierRun, run_tiers
from .tiers import ClawbackPolicy, WaterfallTier

logger = logging.getLogger(__name__)


def evaluation_years(policy: ClawbackPolicy, horizon: int) -> List[int]:
    """Row indices at which the clawback is evaluated."""
    if horizon < 2:
        return []
    if policy.trigger == ClawbackTriggerEnum.ANNUAL:
        return list(range(1, horizon))
    return [horizon - 1]


def liquidation_series(owner_cash_flows: Sequence[float], eval_year: int) -> np.ndarray:
    """
    Synthetic series through ``eval_year`` with all positive cash moved to it.

    Capital calls (negative years) stay in place.
    """
    flows = np.asarray(owner_cash_flows[: eval_year + 1], dtype=float)
    synthetic = np.minimum(flows, 0.0)
    synthetic[eval_year] += np.maximum(flows, 0.0).sum()
    return synthetic


def clawback_adjustments(
    owner_cash_flows: Sequence[float],
    classes: Sequence[EquityClass],
    tiers: Sequence[WaterfallTier],
    actual: TierRun,
    policy: ClawbackPolicy,
    settings: Optional[CalculationSettings] = None,
) -> np.ndarray:
    """
    Signed adjustments per year and partner, shape (years, partners).

    Rows other than evaluation years are zero.
    """
    settings = settings or CalculationSettings()
    horizon = len(owner_cash_flows)
    adjustments = np.zeros_like(actual.distributions)

    for eval_year in evaluation_years(policy, horizon):
        hypothetical = run_tiers(
            liquidation_series(owner_cash_flows, eval_year),
            classes,
            tiers,
            settings,
            WarningLog(),
        )
        required = hypothetical.cumulative(eval_year)
        received = actual.cumulative(eval_year) + adjustments[: eval_year + 1].sum(axis=0)
        delta = required - received

        if np.abs(delta).max() <= settings.drift_epsilon:
            continue
        # Re-center so the adjustments sum to exactly zero
        anchor = int(np.argmax(np.abs(delta)))
        delta[anchor] -= delta.sum()
        adjustments[eval_year] = delta
        logger.debug(
            "Clawback at year %d: %s",
            eval_year,
            dict(zip(actual.partner_ids, np.round(delta, 2).tolist())),
        )
    return adjustments
