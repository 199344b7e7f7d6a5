# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Stateless tier evaluator.

``run_tiers`` allocates an owner cash-flow series among partners, one year
at a time:

- a negative pool is a capital call, apportioned by contribution %
- a zero pool allocates nothing
- a positive pool flows through the tiers in declared order; whatever the
  tiers leave over is split by distribution % and reported as a warning

Every call opens fresh ledgers, so the evaluator can be re-run on a
synthetic series (clawback) without touching the actual run's state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.errors import WarningLog
from ..core.primitives import CalculationSettings, TierTypeEnum
from .allocation import normalize, split_pro_rata, weights_for
from .equity import EquityClass
from .ledger import PartnerLedger, open_ledgers
from .solver import resulting_irr, solve_hurdle_amount
from .tiers import WaterfallTier

logger = logging.getLogger(__name__)

TierBreakdown = Dict[str, Dict[str, float]]


@dataclass
class TierRun:
    """
    Raw allocation produced by one evaluator call.

    Attributes:
        partner_ids: Column order of ``distributions``
        distributions: Array of shape (years, partners)
        tier_distributions: Per year, tier id -> partner id -> amount
        ledgers: Final ledger state, for partner totals
    """

    partner_ids: List[str]
    distributions: np.ndarray
    tier_distributions: List[TierBreakdown]
    ledgers: Dict[str, PartnerLedger]

    def cumulative(self, through_year: int) -> np.ndarray:
        """Net cash flow per partner summed over years 0..through_year."""
        return self.distributions[: through_year + 1].sum(axis=0)


@dataclass
class _YearAllocator:
    """Allocates one year's positive pool through the tiers."""

    partner_ids: List[str]
    ledgers: Dict[str, PartnerLedger]
    settings: CalculationSettings
    allocated: np.ndarray = field(init=False)

    def __post_init__(self):
        self.allocated = np.zeros(len(self.partner_ids))

    def _ledger(self, i: int) -> PartnerLedger:
        return self.ledgers[self.partner_ids[i]]

    def apply(self, tier: WaterfallTier, remaining: float) -> np.ndarray:
        if tier.type == TierTypeEnum.RETURN_OF_CAPITAL:
            shares = self._return_of_capital(remaining)
        elif tier.type == TierTypeEnum.PREFERRED_RETURN:
            if tier.compound_pref:
                shares = self._compound_pref(tier, remaining)
            else:
                shares = self._irr_pref(tier, remaining)
        else:
            shares = self._promote(tier, remaining)
        self.allocated += shares
        return shares

    def _return_of_capital(self, remaining: float) -> np.ndarray:
        unreturned = np.array(
            [self._ledger(i).unreturned_capital for i in range(len(self.partner_ids))]
        )
        total = unreturned.sum()
        if total <= 0:
            return np.zeros(len(self.partner_ids))

        shares = np.minimum(remaining * unreturned / total, unreturned)
        for i, share in enumerate(shares):
            self._ledger(i).return_capital(share)
        return shares

    def _irr_pref(self, tier: WaterfallTier, remaining: float) -> np.ndarray:
        weights = normalize(weights_for(self.partner_ids, tier.distribution_splits))
        shares = np.zeros(len(self.partner_ids))
        for i, weight in enumerate(weights):
            ledger = self._ledger(i)
            if weight <= 0 or ledger.contributed <= 0:
                continue
            shares[i] = solve_hurdle_amount(
                resulting_irr(ledger, self.allocated[i]),
                tier.hurdle_irr,
                remaining * weight,
                self.settings,
            )
        return shares

    def _compound_pref(self, tier: WaterfallTier, remaining: float) -> np.ndarray:
        weights = normalize(weights_for(self.partner_ids, tier.distribution_splits))
        shares = np.zeros(len(self.partner_ids))
        for i, weight in enumerate(weights):
            ledger = self._ledger(i)
            owed = ledger.pref_accounts.get(tier.id, 0.0)
            if weight <= 0 or owed <= 0:
                continue
            shares[i] = min(owed, remaining * weight)
            ledger.pay_pref(tier.id, shares[i])
        return shares

    def _promote(self, tier: WaterfallTier, remaining: float) -> np.ndarray:
        shares = np.zeros(len(self.partner_ids))
        if tier.enable_catch_up and tier.catch_up_target_split:
            shares = self._catch_up(tier, remaining)
            remaining -= shares.sum()
        if remaining > self.settings.drift_epsilon:
            shares += split_pro_rata(
                remaining, weights_for(self.partner_ids, tier.distribution_splits)
            )
        return shares

    def _catch_up(self, tier: WaterfallTier, remaining: float) -> np.ndarray:
        """
        Allocate to partners below their target cumulative share.

        With cumulative positive distributions C (all tiers, this year's
        earlier tiers included) and normalized targets w, the smallest total
        at which nobody is above target is T* = max(C_i / w_i). Each targeted
        partner's deficit is w_i · T* − C_i. Deficits are paid in full when
        the pool allows, otherwise pro-rata to the deficits.
        """
        targets = normalize(weights_for(self.partner_ids, tier.catch_up_target_split))
        cumulative = np.array(
            [
                self._ledger(i).cumulative_distributions + max(self.allocated[i], 0.0)
                for i in range(len(self.partner_ids))
            ]
        )
        targeted = targets > 0
        if cumulative.sum() <= 0:
            return np.zeros(len(self.partner_ids))

        required_total = float(np.max(cumulative[targeted] / targets[targeted]))
        deficits = np.where(
            targeted, np.maximum(targets * required_total - cumulative, 0.0), 0.0
        )
        total_deficit = deficits.sum()
        if total_deficit <= self.settings.drift_epsilon:
            return np.zeros(len(self.partner_ids))
        if remaining >= total_deficit:
            return deficits
        return remaining * deficits / total_deficit


def run_tiers(
    owner_cash_flows: Sequence[float],
    classes: Sequence[EquityClass],
    tiers: Optional[Sequence[WaterfallTier]],
    settings: Optional[CalculationSettings] = None,
    warnings: Optional[WarningLog] = None,
) -> TierRun:
    """
    Allocate ``owner_cash_flows`` among ``classes`` through ``tiers``.

    With no tiers, every positive year is split by distribution % (the
    single pro-rata tier). Configuration is assumed to be validated.
    """
    settings = settings or CalculationSettings()
    warnings = warnings if warnings is not None else WarningLog()
    flows = np.asarray(owner_cash_flows, dtype=float)
    tiers = list(tiers or [])

    partner_ids = [c.id for c in classes]
    contribution_weights = np.array([c.contribution_pct for c in classes])
    distribution_weights = np.array([c.effective_distribution_pct for c in classes])
    ledgers = open_ledgers(partner_ids)
    compound_tiers = [t for t in tiers if t.uses_compound_pref]

    distributions = np.zeros((len(flows), len(partner_ids)))
    breakdowns: List[TierBreakdown] = []

    for year, pool in enumerate(flows):
        if year > 0:
            for tier in compound_tiers:
                for ledger in ledgers.values():
                    ledger.accrue_pref(tier.id, tier.pref_rate)

        breakdown: TierBreakdown = {}
        if pool < 0:
            shares = split_pro_rata(pool, contribution_weights)
            for pid, share in zip(partner_ids, shares):
                ledgers[pid].contribute(-share)
        elif pool == 0:
            shares = np.zeros(len(partner_ids))
        elif not tiers:
            shares = split_pro_rata(pool, distribution_weights)
        else:
            allocator = _YearAllocator(partner_ids, ledgers, settings)
            remaining = float(pool)
            for tier in tiers:
                if remaining <= settings.drift_epsilon:
                    break
                tier_shares = allocator.apply(tier, remaining)
                remaining -= tier_shares.sum()
                breakdown[tier.id] = dict(zip(partner_ids, tier_shares.tolist()))

            shares = allocator.allocated
            if remaining > settings.drift_epsilon:
                warnings.add(
                    "UNALLOCATED_RESIDUAL",
                    f"{remaining:,.2f} left after the last tier in year {year}; "
                    f"split by distribution %",
                    year_index=year,
                    magnitude=remaining,
                )
                residual = split_pro_rata(remaining, distribution_weights)
                breakdown["residual"] = dict(zip(partner_ids, residual.tolist()))
                shares = shares + residual

        distributions[year] = shares
        breakdowns.append(breakdown)
        for pid, share in zip(partner_ids, shares):
            ledgers[pid].close_year(float(share))

    logger.debug(
        "Evaluated %d tiers over %d years for %d partners",
        len(tiers),
        len(flows),
        len(partner_ids),
    )
    return TierRun(
        partner_ids=partner_ids,
        distributions=distributions,
        tier_distributions=breakdowns,
        ledgers=ledgers,
    )
