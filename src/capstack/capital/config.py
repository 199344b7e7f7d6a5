# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import List

from pydantic import Field, field_validator

from ..core.primitives import FloatBetween0And1, Model, PositiveFloat
from ..debt.covenants import Covenant
from ..debt.tranche import DebtTranche


class CapitalStructureConfig(Model):
    """
    Capital stack for one project.

    ``initial_investment`` is the total project cost funded at year 0; the
    equity requirement is whatever the tranches' net proceeds do not cover.
    """

    initial_investment: PositiveFloat = Field(
        ..., description="Total project cost funded at t0"
    )
    debt_tranches: List[DebtTranche] = Field(default_factory=list)
    covenants: List[Covenant] = Field(default_factory=list)

    @field_validator("debt_tranches")
    @classmethod
    def validate_unique_tranche_ids(cls, v: List[DebtTranche]) -> List[DebtTranche]:
        ids = [t.id for t in v]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate tranche ids: {duplicates}")
        return v

    @property
    def total_debt(self) -> float:
        return sum(t.initial_principal for t in self.debt_tranches)

    @property
    def tranche_ids(self) -> List[str]:
        return [t.id for t in self.debt_tranches]


class CostOfCapitalAssumptions(Model):
    """Inputs to the WACC side computation."""

    cost_of_equity: float = Field(
        ..., description="Required equity return (often the project discount rate)"
    )
    tax_rate: FloatBetween0And1 = Field(
        default=0.0, description="Rate applied to the interest tax shield"
    )
