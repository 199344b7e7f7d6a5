# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Debt schedule records produced by the amortizer and aggregator."""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd
from pydantic import Field

from ..core.primitives import Model, SeniorityEnum


class DebtScheduleEntry(Model):
    """One year of a tranche's schedule."""

    year_index: int
    beginning_balance: float
    interest: float
    principal: float
    ending_balance: float

    @property
    def debt_service(self) -> float:
        return self.interest + self.principal


class MonthlyDebtScheduleEntry(DebtScheduleEntry):
    """One month of a tranche's schedule."""

    month_index: int = Field(..., ge=0, le=11, description="Month within the year")
    month_number: int = Field(..., ge=0, description="Month since project start")


class TrancheSchedule(Model):
    """
    Full schedule for one tranche plus its transaction costs.

    ``exit_fee_by_year`` is aligned with ``entries``; the origination fee is
    a single amount charged at funding.
    """

    tranche_id: str
    seniority: SeniorityEnum
    initial_principal: float
    entries: List[DebtScheduleEntry]
    origination_fee: float = 0.0
    exit_fee_by_year: List[float] = Field(default_factory=list)

    @property
    def horizon(self) -> int:
        return len(self.entries)

    @property
    def net_proceeds(self) -> float:
        return self.initial_principal - self.origination_fee

    @property
    def total_principal(self) -> float:
        return float(sum(e.principal for e in self.entries))

    @property
    def final_balance(self) -> float:
        return self.entries[-1].ending_balance if self.entries else 0.0

    def column(self, name: str) -> np.ndarray:
        """Return one schedule field as a numpy array aligned to year index."""
        return np.array([getattr(e, name) for e in self.entries], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame indexed by year, with exit fees."""
        df = pd.DataFrame(
            [e.model_dump() for e in self.entries],
            columns=[
                "year_index",
                "beginning_balance",
                "interest",
                "principal",
                "ending_balance",
            ],
        ).set_index("year_index")
        df["exit_fee"] = self.exit_fee_by_year or [0.0] * len(df)
        return df


class MonthlyTrancheSchedule(Model):
    """Monthly schedule for one tranche."""

    tranche_id: str
    seniority: SeniorityEnum
    initial_principal: float
    entries: List[MonthlyDebtScheduleEntry]

    def column(self, name: str) -> np.ndarray:
        return np.array([getattr(e, name) for e in self.entries], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([e.model_dump() for e in self.entries]).set_index(
            "month_number"
        )
