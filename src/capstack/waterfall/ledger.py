# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Per-partner running state for one waterfall evaluation.

Ledgers are created at the start of an evaluation, mutated tier-by-tier and
year-by-year, and discarded when the evaluation returns. Nothing here is
shared between evaluations, so the same configuration can be evaluated
twice (actual and hypothetical liquidation) without cross-contamination.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.calculations import FinancialCalculations


@dataclass
class PartnerLedger:
    """
    Running totals for one partner.

    Attributes:
        partner_id: Equity class id
        contributed: Total capital called from the partner
        unreturned_capital: Contributed capital not yet returned by the
            return_of_capital tier
        cumulative_distributions: Positive distributions across all tiers
            and all closed years
        pref_accounts: Accrued, unpaid compound pref by tier id
        cash_flows: Net cash flow per closed year (negative = contribution)
    """

    partner_id: str
    contributed: float = 0.0
    unreturned_capital: float = 0.0
    cumulative_distributions: float = 0.0
    pref_accounts: Dict[str, float] = field(default_factory=dict)
    cash_flows: List[float] = field(default_factory=list)

    def contribute(self, amount: float) -> None:
        """Record a capital call (positive amount)."""
        self.contributed += amount
        self.unreturned_capital += amount

    def return_capital(self, amount: float) -> None:
        self.unreturned_capital = max(0.0, self.unreturned_capital - amount)

    def accrue_pref(self, tier_id: str, rate: float) -> None:
        """Compound the pref account on unreturned capital plus unpaid pref."""
        balance = self.pref_accounts.get(tier_id, 0.0)
        base = self.unreturned_capital + balance
        if base > 0:
            self.pref_accounts[tier_id] = balance + base * rate

    def pay_pref(self, tier_id: str, amount: float) -> None:
        balance = self.pref_accounts.get(tier_id, 0.0)
        self.pref_accounts[tier_id] = max(0.0, balance - amount)

    def irr_with(self, current_year_amount: float) -> Optional[float]:
        """IRR of closed years plus ``current_year_amount`` as the open year."""
        return FinancialCalculations.calculate_irr(
            np.append(np.asarray(self.cash_flows, dtype=float), current_year_amount)
        )

    def close_year(self, net_cash_flow: float) -> None:
        self.cash_flows.append(net_cash_flow)
        if net_cash_flow > 0:
            self.cumulative_distributions += net_cash_flow


def open_ledgers(partner_ids: Sequence[str]) -> Dict[str, PartnerLedger]:
    return {pid: PartnerLedger(partner_id=pid) for pid in partner_ids}
