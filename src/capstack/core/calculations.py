# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for core financial metrics. These functions are pure
(math-only) and independent of engine state; engines delegate to these to
ensure a single source of truth for IRR, multiples and coverage ratios.

All cash-flow series here are periodic (one entry per year, t0 first).
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from pyxirr import irr

CashFlowLike = Union[Sequence[float], np.ndarray, pd.Series]


class FinancialCalculations:
    """
    Pure mathematical functions for financial calculations.

    Static methods for core financial metrics, independent of engine
    structure or business logic.
    """

    @staticmethod
    def calculate_irr(cash_flows: CashFlowLike) -> Optional[float]:
        """
        Calculate periodic Internal Rate of Return using PyXIRR.

        Args:
            cash_flows: Periodic cash flows, t0 first
                       Negative values = contributions/outflows
                       Positive values = distributions/inflows

        Returns:
            IRR as decimal (e.g., 0.15 for 15%) or None if cannot calculate

        Edge Cases Handled:
            - Empty series → None
            - All negative flows → None
            - All positive flows → None
            - No root found → None

        Example:
            ```python
            irr = FinancialCalculations.calculate_irr([-1000, 100, 100, 1100])
            print(f"IRR: {irr:.2%}")  # IRR: 10.00%
            ```
        """
        values = np.asarray(cash_flows, dtype=float)
        if values.size == 0:
            return None

        # Need both contributions and distributions
        if not ((values < 0).any() and (values > 0).any()):
            return None

        result = irr(values, silent=True)
        if result is None or not math.isfinite(result):
            return None
        return float(result)

    @staticmethod
    def calculate_equity_multiple(cash_flows: CashFlowLike) -> Optional[float]:
        """
        Calculate equity multiple (total returns / total investment).

        Returns:
            Multiple as float (e.g., 2.5 for 2.5x return), 0.0 when nothing
            was returned, or None when nothing was invested

        Example:
            ```python
            multiple = FinancialCalculations.calculate_equity_multiple(
                [-1000, 100, 100, 1400]
            )
            print(f"Multiple: {multiple:.2f}x")  # Multiple: 1.60x
            ```
        """
        values = np.asarray(cash_flows, dtype=float)
        if values.size == 0:
            return None

        total_invested = float(-values[values < 0].sum())
        if total_invested <= 0:
            return None  # No investment to measure against

        total_returned = float(values[values > 0].sum())
        return total_returned / total_invested

    @staticmethod
    def calculate_dscr(noi: float, debt_service: float) -> Optional[float]:
        """
        Calculate single-period Debt Service Coverage Ratio.

        DSCR = NOI / Debt Service

        Args:
            noi: Net operating income for period
            debt_service: Debt service for period (positive = amount paid)

        Returns:
            DSCR ratio, or None when there is no debt service or NOI is not
            positive. A missing ratio is reported as None, never as zero or
            infinity.

        Example:
            ```python
            FinancialCalculations.calculate_dscr(100_000, 75_000)  # 1.33
            FinancialCalculations.calculate_dscr(100_000, 0)  # None
            ```
        """
        if debt_service <= 0 or noi <= 0:
            return None
        return noi / debt_service

    @staticmethod
    def calculate_ltv(loan_balance: float, value: float) -> Optional[float]:
        """Loan-to-value ratio, or None when either side is zero."""
        if value <= 0 or loan_balance <= 0:
            return None
        return loan_balance / value
