# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Upstream records consumed by the capital stage.

Both records are produced by external per-asset engines; only ``noi`` and
``unlevered_free_cash_flow`` are read here. The other fields are carried for
reporting and contract checks.
"""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from ..core.primitives import Model, PositiveInt


class ConsolidatedAnnualPnl(Model):
    """Project-wide P&L for one year."""

    year_index: PositiveInt
    revenue_total: float = 0.0
    noi: float
    maintenance_capex: float = 0.0


class UnleveredFcf(Model):
    """Project-wide unlevered free cash flow for one year."""

    year_index: PositiveInt
    noi: float = 0.0
    maintenance_capex: float = 0.0
    change_in_working_capital: float = 0.0
    unlevered_free_cash_flow: float


def pnl_from_series(noi: Sequence[float]) -> List[ConsolidatedAnnualPnl]:
    """Build P&L records from a bare NOI series (year 0 first)."""
    return [
        ConsolidatedAnnualPnl(year_index=i, noi=float(value))
        for i, value in enumerate(noi)
    ]


def fcf_from_series(
    unlevered_fcf: Sequence[float], noi: Sequence[float] = ()
) -> List[UnleveredFcf]:
    """Build unlevered FCF records from bare series (year 0 first)."""
    noi = list(noi) or [0.0] * len(unlevered_fcf)
    return [
        UnleveredFcf(
            year_index=i, noi=float(noi[i]), unlevered_free_cash_flow=float(value)
        )
        for i, value in enumerate(unlevered_fcf)
    ]


def inputs_to_dataframe(
    pnl: Sequence[ConsolidatedAnnualPnl], fcf: Sequence[UnleveredFcf]
) -> pd.DataFrame:
    """Side-by-side view of the two upstream series, indexed by year."""
    left = pd.DataFrame([p.model_dump() for p in pnl]).set_index("year_index")
    right = pd.DataFrame([f.model_dump() for f in fcf]).set_index("year_index")
    return left.join(right, lsuffix="_pnl", rsuffix="_fcf", how="outer")
