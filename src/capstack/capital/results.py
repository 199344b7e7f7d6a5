# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Capital stage result records."""

from __future__ import annotations

from typing import List, Optional

import numpy as np
import pandas as pd
from pydantic import Field

from ..core.primitives import Model
from ..debt.aggregation import AggregateDebtSchedule, MonthlyAggregateDebtEntry
from ..debt.covenants import CovenantBreach
from ..debt.schedule import MonthlyTrancheSchedule, TrancheSchedule


class LeveredCashFlowEntry(Model):
    """Unlevered to levered bridge for one year."""

    year_index: int
    unlevered_fcf: float
    interest: float
    principal: float
    transaction_costs: float = Field(default=0.0, description="Exit fees paid")
    debt_service: float
    levered_fcf: float


class DebtKpi(Model):
    """Annual coverage and leverage ratios. Ratios are None when undefined."""

    year_index: int
    dscr: Optional[float] = None
    ltv: Optional[float] = None
    senior_debt_service: float = 0.0
    senior_dscr: Optional[float] = None


class MonthlyDebtKpi(Model):
    month_number: int
    year_index: int
    month_index: int
    dscr: Optional[float] = None
    ltv: Optional[float] = None


class WaccMetrics(Model):
    """Weighted average cost of capital and its components."""

    equity_percentage: float
    debt_percentage: float
    cost_of_equity: float
    cost_of_debt: float
    tax_rate: float
    wacc: float


class CapitalResult(Model):
    """
    Everything the capital stage produces.

    ``owner_cash_flows`` has one more entry than the horizon: index 0 is the
    equity check (net of debt proceeds and financing fees) and index t is the
    levered FCF of year t−1.
    """

    horizon_years: int
    tranche_schedules: List[TrancheSchedule]
    debt_schedule: AggregateDebtSchedule
    levered_fcf: List[LeveredCashFlowEntry]
    owner_cash_flows: List[float]
    debt_kpis: List[DebtKpi]
    covenant_breaches: List[CovenantBreach] = Field(default_factory=list)
    wacc: Optional[WaccMetrics] = None
    monthly_tranche_schedules: Optional[List[MonthlyTrancheSchedule]] = None
    monthly_debt_schedule: Optional[List[MonthlyAggregateDebtEntry]] = None
    monthly_debt_kpis: Optional[List[MonthlyDebtKpi]] = None

    @property
    def equity_investment(self) -> float:
        """Equity required at t0 (positive amount)."""
        return -self.owner_cash_flows[0] if self.owner_cash_flows else 0.0

    @property
    def owner_cash_flow_array(self) -> np.ndarray:
        return np.asarray(self.owner_cash_flows, dtype=float)

    def levered_fcf_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([e.model_dump() for e in self.levered_fcf]).set_index(
            "year_index"
        )

    def debt_kpi_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([k.model_dump() for k in self.debt_kpis]).set_index(
            "year_index"
        )
