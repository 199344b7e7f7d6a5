# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt aggregation.

Sums per-tranche schedules into a single project-level schedule. Refinanced
or matured tranches simply contribute zeros once their own schedule is
exhausted, so no special handling is needed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.calculations import FinancialCalculations
from ..core.primitives import Model, SeniorityEnum
from .schedule import MonthlyTrancheSchedule, TrancheSchedule

logger = logging.getLogger(__name__)


class AggregateDebtEntry(Model):
    """Project-level debt totals for one year."""

    year_index: int
    beginning_balance: float
    interest: float
    principal: float
    ending_balance: float
    exit_fees: float = 0.0
    senior_debt_service: float = 0.0

    @property
    def debt_service(self) -> float:
        """Interest plus principal plus exit fees paid in the year."""
        return self.interest + self.principal + self.exit_fees


class MonthlyAggregateDebtEntry(Model):
    """Project-level debt totals for one month."""

    month_number: int
    year_index: int
    month_index: int
    beginning_balance: float
    interest: float
    principal: float
    ending_balance: float
    senior_debt_service: float = 0.0

    @property
    def debt_service(self) -> float:
        return self.interest + self.principal


class AggregateDebtSchedule(Model):
    """Aggregated schedule plus funding totals across all tranches."""

    entries: List[AggregateDebtEntry]
    total_initial_principal: float = 0.0
    total_origination_fees: float = 0.0

    @property
    def total_net_proceeds(self) -> float:
        return self.total_initial_principal - self.total_origination_fees

    def column(self, name: str) -> np.ndarray:
        return np.array([getattr(e, name) for e in self.entries], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame([e.model_dump() for e in self.entries]).set_index(
            "year_index"
        )
        df["debt_service"] = [e.debt_service for e in self.entries]
        return df


@dataclass
class DebtAggregator:
    """
    Combines tranche schedules over a common horizon.

    Attributes:
        schedules: Annual schedules, one per tranche, all of length
            ``horizon_years``
        horizon_years: Projection length

    Example:
        ```python
        aggregator = DebtAggregator(schedules, horizon_years=10)
        aggregate = aggregator.aggregate()
        dscr = aggregator.project_dscr(noi)
        ```
    """

    schedules: Sequence[TrancheSchedule]
    horizon_years: int

    def _stack(self, name: str, seniority: Optional[SeniorityEnum] = None) -> np.ndarray:
        totals = np.zeros(self.horizon_years)
        for schedule in self.schedules:
            if seniority is not None and schedule.seniority != seniority:
                continue
            totals += schedule.column(name)
        return totals

    def exit_fees(self) -> np.ndarray:
        """Total exit fees by year across all tranches."""
        totals = np.zeros(self.horizon_years)
        for schedule in self.schedules:
            if schedule.exit_fee_by_year:
                totals += np.asarray(schedule.exit_fee_by_year, dtype=float)
        return totals

    def senior_debt_service(self) -> np.ndarray:
        """Interest plus principal of senior tranches only."""
        return self._stack("interest", SeniorityEnum.SENIOR) + self._stack(
            "principal", SeniorityEnum.SENIOR
        )

    def aggregate(self) -> AggregateDebtSchedule:
        beginning = self._stack("beginning_balance")
        interest = self._stack("interest")
        principal = self._stack("principal")
        ending = self._stack("ending_balance")
        exit_fees = self.exit_fees()
        senior = self.senior_debt_service()

        entries = [
            AggregateDebtEntry(
                year_index=year,
                beginning_balance=float(beginning[year]),
                interest=float(interest[year]),
                principal=float(principal[year]),
                ending_balance=float(ending[year]),
                exit_fees=float(exit_fees[year]),
                senior_debt_service=float(senior[year]),
            )
            for year in range(self.horizon_years)
        ]
        logger.debug(
            "Aggregated %d tranche schedules over %d years",
            len(self.schedules),
            self.horizon_years,
        )
        return AggregateDebtSchedule(
            entries=entries,
            total_initial_principal=float(
                sum(s.initial_principal for s in self.schedules)
            ),
            total_origination_fees=float(sum(s.origination_fee for s in self.schedules)),
        )

    def project_dscr(self, noi: Sequence[float]) -> List[Optional[float]]:
        """NOI over total debt service (interest + principal + exit fees)."""
        debt_service = (
            self._stack("interest") + self._stack("principal") + self.exit_fees()
        )
        return [
            FinancialCalculations.calculate_dscr(float(n), float(ds))
            for n, ds in zip(noi, debt_service)
        ]

    def senior_dscr(self, noi: Sequence[float]) -> List[Optional[float]]:
        """NOI over senior-only debt service."""
        return [
            FinancialCalculations.calculate_dscr(float(n), float(ds))
            for n, ds in zip(noi, self.senior_debt_service())
        ]

    @staticmethod
    def aggregate_monthly(
        schedules: Sequence[MonthlyTrancheSchedule], horizon_years: int
    ) -> List[MonthlyAggregateDebtEntry]:
        """Sum monthly tranche schedules month by month."""
        months = horizon_years * 12
        totals = {
            name: np.zeros(months)
            for name in ("beginning_balance", "interest", "principal", "ending_balance")
        }
        senior = np.zeros(months)
        for schedule in schedules:
            for name in totals:
                totals[name] += schedule.column(name)
            if schedule.seniority == SeniorityEnum.SENIOR:
                senior += schedule.column("interest") + schedule.column("principal")

        return [
            MonthlyAggregateDebtEntry(
                month_number=month,
                year_index=month // 12,
                month_index=month % 12,
                beginning_balance=float(totals["beginning_balance"][month]),
                interest=float(totals["interest"][month]),
                principal=float(totals["principal"][month]),
                ending_balance=float(totals["ending_balance"][month]),
                senior_debt_service=float(senior[month]),
            )
            for month in range(months)
        ]
