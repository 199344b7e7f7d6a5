# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Weighted average cost of capital.

WACC = equity% × cost of equity + debt% × weighted coupon × (1 − tax rate)

Debt weights use each tranche's initial principal; the equity weight is the
remainder of the initial investment. This is a side computation and feeds
nothing else in the capital stage.
"""

from __future__ import annotations

from .config import CapitalStructureConfig, CostOfCapitalAssumptions
from .results import WaccMetrics


def calculate_wacc(
    capital: CapitalStructureConfig, assumptions: CostOfCapitalAssumptions
) -> WaccMetrics:
    funded = [t for t in capital.debt_tranches if t.initial_principal > 0]
    total_debt = sum(t.initial_principal for t in funded)
    weighted_interest = sum(t.initial_principal * t.interest_rate for t in funded)

    investment = capital.initial_investment
    equity_invested = investment - total_debt
    equity_pct = equity_invested / investment if investment > 0 else 0.0
    debt_pct = total_debt / investment if investment > 0 else 0.0
    cost_of_debt = weighted_interest / total_debt if total_debt > 0 else 0.0

    wacc = equity_pct * assumptions.cost_of_equity + debt_pct * cost_of_debt * (
        1 - assumptions.tax_rate
    )
    return WaccMetrics(
        equity_percentage=equity_pct,
        debt_percentage=debt_pct,
        cost_of_equity=assumptions.cost_of_equity,
        cost_of_debt=cost_of_debt,
        tax_rate=assumptions.tax_rate,
        wacc=wacc,
    )
