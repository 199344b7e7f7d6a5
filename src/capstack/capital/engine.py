# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital engine.

Turns an unlevered free cash flow forecast into the levered owner cash-flow
series that feeds the equity waterfall:

1. validate every tranche (fail fast, before any schedule is built)
2. schedule each tranche and aggregate the schedules
3. levered FCF[t] = unlevered FCF[t] − (interest + principal + exit fees)
4. owner CF[0] = −(initial investment − Σ net proceeds) − Σ origination fees,
   owner CF[t] = levered FCF[t − 1]
5. annual DSCR / senior DSCR / LTV, optional covenants, WACC and monthly
   schedules
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..core.calculations import FinancialCalculations
from ..core.errors import ConfigurationError, WarningLog
from ..core.primitives import CalculationSettings, PipelineStageEnum
from ..debt.aggregation import (
    AggregateDebtSchedule,
    DebtAggregator,
    MonthlyAggregateDebtEntry,
)
from ..debt.amortization import TrancheAmortizer
from ..debt.covenants import check_covenants
from ..debt.schedule import MonthlyTrancheSchedule, TrancheSchedule
from .config import CapitalStructureConfig, CostOfCapitalAssumptions
from .inputs import ConsolidatedAnnualPnl, UnleveredFcf
from .results import (
    CapitalResult,
    DebtKpi,
    LeveredCashFlowEntry,
    MonthlyDebtKpi,
)
from .wacc import calculate_wacc

logger = logging.getLogger(__name__)


@dataclass
class CapitalEngine:
    """
    Builds debt schedules, levered cash flow and debt KPIs for one project.

    Attributes:
        config: Capital structure (initial investment, tranches, covenants)
        settings: Numeric policy; defaults are used when omitted
        cost_of_capital: Optional WACC assumptions
        warnings: Soft-warning collector for this run

    Example:
        ```python
        engine = CapitalEngine(config)
        result = engine.run(unlevered_fcf, pnl)
        result.owner_cash_flows  # length N + 1
        ```
    """

    config: CapitalStructureConfig
    settings: CalculationSettings = field(default_factory=CalculationSettings)
    cost_of_capital: Optional[CostOfCapitalAssumptions] = None
    warnings: WarningLog = field(
        default_factory=lambda: WarningLog(stage=PipelineStageEnum.CAPITAL)
    )

    def validate(self) -> None:
        """Validate every tranche before any schedule is built."""
        for tranche in self.config.debt_tranches:
            tranche.validate_terms()

    def run(
        self,
        unlevered_fcf: Sequence[UnleveredFcf],
        pnl: Optional[Sequence[ConsolidatedAnnualPnl]] = None,
    ) -> CapitalResult:
        """
        Run the capital stage.

        Args:
            unlevered_fcf: One record per year, year 0 first; defines the horizon
            pnl: One record per year supplying NOI; when omitted, NOI is read
                from the unlevered FCF records

        Returns:
            CapitalResult

        Raises:
            ConfigurationError: invalid tranche or mismatched NOI horizon
            InvariantViolation: a tranche schedule failed debt conservation
        """
        self.validate()

        horizon = len(unlevered_fcf)
        noi_source = pnl if pnl is not None else unlevered_fcf
        if len(noi_source) != horizon:
            raise ConfigurationError(
                f"NOI series length ({len(noi_source)}) must match the unlevered "
                f"FCF horizon ({horizon})",
                stage=PipelineStageEnum.CAPITAL,
                details={"noi_length": len(noi_source), "horizon_years": horizon},
            )
        noi = np.array([r.noi for r in noi_source], dtype=float)
        ufcf = np.array([r.unlevered_free_cash_flow for r in unlevered_fcf], dtype=float)

        logger.debug(
            "Capital stage: %d tranches over %d years",
            len(self.config.debt_tranches),
            horizon,
        )

        schedules = self._schedule_tranches(horizon)
        aggregator = DebtAggregator(schedules, horizon)
        debt = aggregator.aggregate()

        levered = self._levered_fcf(ufcf, debt)
        owner = self._owner_cash_flows(debt, levered)
        kpis = self._debt_kpis(noi, debt, aggregator)

        breaches = check_covenants(self.config.covenants, kpis)
        for breach in breaches:
            self.warnings.add(
                "COVENANT_BREACH",
                f"Covenant '{breach.covenant_id}' breached in year "
                f"{breach.year_index}: {breach.actual_value:.4f} vs "
                f"{breach.threshold:.4f} ({breach.severity.value})",
                year_index=breach.year_index,
                entity_id=breach.covenant_id,
                magnitude=breach.actual_value - breach.threshold,
            )

        monthly_schedules = monthly_debt = monthly_kpis = None
        if self.settings.include_monthly:
            monthly_schedules = [
                TrancheAmortizer(t, self.settings).monthly_schedule(horizon)
                for t in self.config.debt_tranches
            ]
            monthly_debt = DebtAggregator.aggregate_monthly(monthly_schedules, horizon)
            monthly_kpis = self._monthly_debt_kpis(noi, monthly_debt)

        wacc = (
            calculate_wacc(self.config, self.cost_of_capital)
            if self.cost_of_capital is not None
            else None
        )

        return CapitalResult(
            horizon_years=horizon,
            tranche_schedules=schedules,
            debt_schedule=debt,
            levered_fcf=levered,
            owner_cash_flows=owner,
            debt_kpis=kpis,
            covenant_breaches=breaches,
            wacc=wacc,
            monthly_tranche_schedules=monthly_schedules,
            monthly_debt_schedule=monthly_debt,
            monthly_debt_kpis=monthly_kpis,
        )

    def _schedule_tranches(self, horizon: int) -> List[TrancheSchedule]:
        return [
            TrancheAmortizer(tranche, self.settings).annual_schedule(
                horizon
            )
            for tranche in self.config.debt_tranches
        ]

    @staticmethod
    def _levered_fcf(
        ufcf: np.ndarray, debt: AggregateDebtSchedule
    ) -> List[LeveredCashFlowEntry]:
        interest = debt.column("interest")
        principal = debt.column("principal")
        exit_fees = debt.column("exit_fees")
        debt_service = interest + principal + exit_fees
        levered = ufcf - debt_service
        return [
            LeveredCashFlowEntry(
                year_index=year,
                unlevered_fcf=float(ufcf[year]),
                interest=float(interest[year]),
                principal=float(principal[year]),
                transaction_costs=float(exit_fees[year]),
                debt_service=float(debt_service[year]),
                levered_fcf=float(levered[year]),
            )
            for year in range(len(ufcf))
        ]

    def _owner_cash_flows(
        self, debt: AggregateDebtSchedule, levered: List[LeveredCashFlowEntry]
    ) -> List[float]:
        equity_check = self.config.initial_investment - debt.total_net_proceeds
        t0 = -equity_check - debt.total_origination_fees
        if equity_check < 0:
            self.warnings.add(
                "DEBT_EXCEEDS_INVESTMENT",
                f"Net debt proceeds exceed the initial investment by "
                f"{-equity_check:,.2f}; owner receives cash at t0",
                year_index=0,
                magnitude=-equity_check,
            )
        return [t0] + [entry.levered_fcf for entry in levered]

    def _debt_kpis(
        self, noi: np.ndarray, debt: AggregateDebtSchedule, aggregator: DebtAggregator
    ) -> List[DebtKpi]:
        dscr = aggregator.project_dscr(noi)
        senior_dscr = aggregator.senior_dscr(noi)
        return [
            DebtKpi(
                year_index=entry.year_index,
                dscr=dscr[entry.year_index],
                ltv=FinancialCalculations.calculate_ltv(
                    entry.beginning_balance, self.config.initial_investment
                ),
                senior_debt_service=entry.senior_debt_service,
                senior_dscr=senior_dscr[entry.year_index],
            )
            for entry in debt.entries
        ]

    def _monthly_debt_kpis(
        self, noi: np.ndarray, monthly_debt: List[MonthlyAggregateDebtEntry]
    ) -> List[MonthlyDebtKpi]:
        # Annual NOI is spread evenly across the twelve months
        return [
            MonthlyDebtKpi(
                month_number=entry.month_number,
                year_index=entry.year_index,
                month_index=entry.month_index,
                dscr=FinancialCalculations.calculate_dscr(
                    float(noi[entry.year_index]) / 12, entry.debt_service
                ),
                ltv=FinancialCalculations.calculate_ltv(
                    entry.beginning_balance, self.config.initial_investment
                ),
            )
            for entry in monthly_debt
        ]


def run_capital_engine(
    unlevered_fcf: Sequence[UnleveredFcf],
    config: CapitalStructureConfig,
    pnl: Optional[Sequence[ConsolidatedAnnualPnl]] = None,
    settings: Optional[CalculationSettings] = None,
    cost_of_capital: Optional[CostOfCapitalAssumptions] = None,
) -> CapitalResult:
    """Functional wrapper around ``CapitalEngine.run``."""
    engine = CapitalEngine(
        config=config,
        settings=settings or CalculationSettings(),
        cost_of_capital=cost_of_capital,
    )
    return engine.run(unlevered_fcf, pnl)
