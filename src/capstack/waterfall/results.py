# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Waterfall result records."""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
from pydantic import Field

from ..core.errors import SoftWarning
from ..core.primitives import Model


class AnnualWaterfallRow(Model):
    """
    One year of the waterfall.

    Invariant: ``sum(partner_distributions) + sum(clawback_adjustments)``
    equals ``owner_cash_flow`` within the calculation tolerance.
    """

    year_index: int
    owner_cash_flow: float
    partner_distributions: Dict[str, float]
    clawback_adjustments: Optional[Dict[str, float]] = None
    tier_distributions: Dict[str, Dict[str, float]] = Field(
        default_factory=dict, description="Tier id -> partner id -> amount"
    )

    @property
    def total_allocated(self) -> float:
        total = sum(self.partner_distributions.values())
        if self.clawback_adjustments:
            total += sum(self.clawback_adjustments.values())
        return total

    def partner_cash_flow(self, partner_id: str) -> float:
        """Distribution plus clawback adjustment for one partner."""
        adjustment = (self.clawback_adjustments or {}).get(partner_id, 0.0)
        return self.partner_distributions.get(partner_id, 0.0) + adjustment


class PartnerResult(Model):
    """Cash flows and return metrics for one partner."""

    partner_id: str
    name: str = ""
    cash_flows: List[float] = Field(..., description="Net per year, clawback included")
    cumulative_cash_flows: List[float]
    irr: Optional[float] = None
    moic: Optional[float] = None
    total_contributed: float = 0.0
    total_distributed: float = 0.0

    @property
    def net_profit(self) -> float:
        return self.total_distributed - self.total_contributed


class WaterfallResult(Model):
    """Everything the waterfall stage produces."""

    owner_cash_flows: List[float]
    partners: List[PartnerResult]
    annual_rows: List[AnnualWaterfallRow]
    warnings: List[SoftWarning] = Field(default_factory=list)

    @property
    def partner_results(self) -> Dict[str, PartnerResult]:
        return {p.partner_id: p for p in self.partners}

    @property
    def has_clawback(self) -> bool:
        return any(row.clawback_adjustments for row in self.annual_rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Partner net cash flows by year, with the owner cash flow column."""
        data = {"owner_cash_flow": self.owner_cash_flows}
        for partner in self.partners:
            data[partner.partner_id] = partner.cash_flows
        df = pd.DataFrame(data)
        df.index.name = "year_index"
        return df

    def summary_dataframe(self) -> pd.DataFrame:
        """One row per partner with totals and return metrics."""
        return pd.DataFrame(
            [
                {
                    "partner_id": p.partner_id,
                    "name": p.name,
                    "total_contributed": p.total_contributed,
                    "total_distributed": p.total_distributed,
                    "net_profit": p.net_profit,
                    "moic": p.moic,
                    "irr": p.irr,
                }
                for p in self.partners
            ]
        ).set_index("partner_id")
