# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tranche amortization.

Builds one tranche's period schedule (beginning balance, interest, principal,
ending balance) under its amortization policy, then prices its transaction
costs. Refinancing is checked before any other rule in a period, so a
refinance year always repays ``refinance_amount_pct`` of the beginning balance
regardless of the normal amortization policy.

Annual schedules use straight-line principal (``initial / amortization_years``).
Monthly schedules use a level annuity payment computed with ``pyxirr.pmt``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from pyxirr import pmt

from ..core.errors import InvariantViolation
from ..core.primitives import AmortizationTypeEnum, CalculationSettings
from .schedule import (
    DebtScheduleEntry,
    MonthlyDebtScheduleEntry,
    MonthlyTrancheSchedule,
    TrancheSchedule,
)
from .tranche import DebtTranche

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
_ZERO_RATE = 1e-12


@dataclass
class TrancheAmortizer:
    """
    Schedules a single debt tranche over a fixed horizon.

    Attributes:
        tranche: The tranche to schedule (validated by the caller)
        settings: Conservation tolerance

    Example:
        ```python
        amortizer = TrancheAmortizer(tranche)
        schedule = amortizer.annual_schedule(horizon_years=10)
        schedule.to_dataframe()
        ```
    """

    tranche: DebtTranche
    settings: CalculationSettings = field(default_factory=CalculationSettings)

    @property
    def _is_funded(self) -> bool:
        return self.tranche.initial_principal > 0 and self.tranche.term_years > 0

    def annual_schedule(self, horizon_years: int) -> TrancheSchedule:
        """
        Build the annual schedule and transaction costs.

        Args:
            horizon_years: Number of projection years (entries returned)

        Returns:
            TrancheSchedule with one entry per year, zero outside the
            tranche's active window

        Raises:
            InvariantViolation: principal repaid plus final balance differs
                from the funded principal by more than the tolerance
        """
        t = self.tranche
        beginning = np.zeros(horizon_years)
        interest = np.zeros(horizon_years)
        principal = np.zeros(horizon_years)
        ending = np.zeros(horizon_years)

        if self._is_funded:
            standard_principal = (
                t.initial_principal / t.amortization_years
                if t.amortization_type == AmortizationTypeEnum.MORTGAGE
                else 0.0
            )
            balance = t.initial_principal

            for year in range(horizon_years):
                if year == t.refinance_at_year and balance > 0:
                    repaid = self._refinance_repayment(balance, year == t.maturity_year)
                    beginning[year] = balance
                    interest[year] = balance * t.interest_rate
                    principal[year] = repaid
                    ending[year] = 0.0 if repaid >= balance else balance - repaid
                    balance = ending[year]
                    continue

                if not t.is_active(year):
                    continue

                beginning[year] = balance
                interest[year] = balance * t.interest_rate
                principal[year] = self._scheduled_principal(
                    year - t.start_year,
                    t.term_years,
                    t.io_years,
                    balance,
                    standard_principal,
                )
                ending[year] = max(0.0, balance - principal[year])
                balance = ending[year]

        entries = [
            DebtScheduleEntry(
                year_index=year,
                beginning_balance=float(beginning[year]),
                interest=float(interest[year]),
                principal=float(principal[year]),
                ending_balance=float(ending[year]),
            )
            for year in range(horizon_years)
        ]

        self._check_conservation(
            principal.sum(),
            float(ending[-1]) if horizon_years else 0.0,
            funded=t.start_year < horizon_years,
        )

        schedule = TrancheSchedule(
            tranche_id=t.id,
            seniority=t.seniority,
            initial_principal=t.initial_principal,
            entries=entries,
            origination_fee=t.origination_fee,
            exit_fee_by_year=self._exit_fees(beginning),
        )
        logger.debug(
            "Scheduled tranche %s over %d years: principal repaid %.2f, "
            "final balance %.2f",
            t.id,
            horizon_years,
            schedule.total_principal,
            schedule.final_balance,
        )
        return schedule

    def monthly_schedule(self, horizon_years: int) -> MonthlyTrancheSchedule:
        """
        Build the monthly schedule.

        Mortgages pay a level annuity ``P·r(1+r)^n / ((1+r)^n − 1)`` over
        ``amortization_years × 12`` months, falling back to ``P / n`` when the
        rate is zero. Interest-only months, balloon payoff and refinancing
        follow the same precedence as the annual schedule, with the refinance
        month being the first month of ``refinance_at_year``.
        """
        t = self.tranche
        total_months = horizon_years * MONTHS_PER_YEAR
        beginning = np.zeros(total_months)
        interest = np.zeros(total_months)
        principal = np.zeros(total_months)
        ending = np.zeros(total_months)

        if self._is_funded:
            monthly_rate = t.interest_rate / MONTHS_PER_YEAR
            start_month = t.start_year * MONTHS_PER_YEAR
            term_months = t.term_years * MONTHS_PER_YEAR
            io_months = t.io_years * MONTHS_PER_YEAR
            refinance_month = (
                t.refinance_at_year * MONTHS_PER_YEAR
                if t.refinance_at_year is not None
                else None
            )
            payment = self.level_payment(
                t.initial_principal, monthly_rate, t.amortization_years * MONTHS_PER_YEAR
            )
            balance = t.initial_principal

            for month in range(total_months):
                offset = month - start_month
                if month == refinance_month and balance > 0:
                    repaid = self._refinance_repayment(balance, offset == term_months - 1)
                    beginning[month] = balance
                    interest[month] = balance * monthly_rate
                    principal[month] = repaid
                    ending[month] = 0.0 if repaid >= balance else balance - repaid
                    balance = ending[month]
                    continue

                if not 0 <= offset < term_months:
                    continue

                beginning[month] = balance
                interest[month] = balance * monthly_rate
                if t.amortization_type == AmortizationTypeEnum.MORTGAGE:
                    amortizing_principal = max(0.0, payment - interest[month])
                else:
                    amortizing_principal = 0.0
                principal[month] = self._scheduled_principal(
                    offset, term_months, io_months, balance, amortizing_principal
                )
                ending[month] = max(0.0, balance - principal[month])
                balance = ending[month]

        entries = [
            MonthlyDebtScheduleEntry(
                year_index=month // MONTHS_PER_YEAR,
                month_index=month % MONTHS_PER_YEAR,
                month_number=month,
                beginning_balance=float(beginning[month]),
                interest=float(interest[month]),
                principal=float(principal[month]),
                ending_balance=float(ending[month]),
            )
            for month in range(total_months)
        ]

        self._check_conservation(
            principal.sum(),
            float(ending[-1]) if total_months else 0.0,
            funded=t.start_year < horizon_years,
        )

        return MonthlyTrancheSchedule(
            tranche_id=t.id,
            seniority=t.seniority,
            initial_principal=t.initial_principal,
            entries=entries,
        )

    @staticmethod
    def level_payment(principal: float, period_rate: float, periods: int) -> float:
        """Level annuity payment per period (positive amount)."""
        if periods <= 0:
            return 0.0
        if abs(period_rate) < _ZERO_RATE:
            return principal / periods
        return float(pmt(period_rate, periods, principal)) * -1

    def _scheduled_principal(
        self,
        offset: int,
        term_periods: int,
        io_periods: int,
        balance: float,
        amortizing_principal: float,
    ) -> float:
        """Principal due in a period that is not a refinance period."""
        if offset == term_periods - 1:
            # Maturity: bullet / IO payoff, mortgage balloon or final close-out
            return balance
        if self.tranche.amortization_type != AmortizationTypeEnum.MORTGAGE:
            return 0.0
        if offset < io_periods:
            return 0.0
        return min(amortizing_principal, balance)

    def _refinance_repayment(self, balance: float, at_maturity: bool) -> float:
        pct = self.tranche.refinance_amount_pct
        if pct >= 1.0 or at_maturity:
            return balance
        return balance * pct

    def _exit_fees(self, beginning: np.ndarray) -> List[float]:
        """Exit fee on the beginning balance in the refinance and maturity years."""
        t = self.tranche
        fees = [0.0] * len(beginning)
        if t.exit_fee_pct <= 0 or not self._is_funded:
            return fees

        fee_years = {t.maturity_year}
        if t.refinance_at_year is not None:
            fee_years.add(t.refinance_at_year)

        for year in sorted(fee_years):
            if year >= len(beginning):
                continue
            if beginning[year] > 0:
                fees[year] = float(beginning[year]) * t.exit_fee_pct
            else:
                logger.debug(
                    "Tranche %s has no balance outstanding in exit-fee year %d; "
                    "no exit fee charged",
                    t.id,
                    year,
                )
        return fees

    def _check_conservation(
        self, principal_repaid: float, final_balance: float, *, funded: bool
    ) -> None:
        expected = self.tranche.initial_principal if funded and self._is_funded else 0.0
        actual = float(principal_repaid) + final_balance
        if abs(actual - expected) > self.settings.tolerance:
            logger.error(
                "Debt conservation failed for tranche %s: expected %.2f, got %.2f",
                self.tranche.id,
                expected,
                actual,
            )
            raise InvariantViolation(
                f"Tranche '{self.tranche.id}': principal repaid plus final balance "
                f"({actual:.2f}) does not equal funded principal ({expected:.2f})",
                expected=expected,
                actual=actual,
                entity_id=self.tranche.id,
            )


def schedule_tranche(
    tranche: DebtTranche,
    horizon_years: int,
    settings: Optional[CalculationSettings] = None,
) -> TrancheSchedule:
    """Convenience wrapper: validate and schedule one tranche annually."""
    tranche.validate_terms()
    amortizer = TrancheAmortizer(tranche, settings or CalculationSettings())
    return amortizer.annual_schedule(horizon_years)
