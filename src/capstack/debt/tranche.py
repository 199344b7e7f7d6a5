# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt tranche definition.

A tranche is one layer of project debt with its own principal, coupon,
amortization policy, refinancing event and fees. Tranches are immutable;
schedules derived from them live in ``capstack.debt.schedule``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, model_validator

from ..core.errors import ConfigurationError
from ..core.primitives import (
    AmortizationTypeEnum,
    FloatBetween0And1,
    Model,
    PositiveInt,
    SeniorityEnum,
    TrancheTypeEnum,
)

_LEGACY_TYPE_TO_SENIORITY = {
    TrancheTypeEnum.SENIOR.value: SeniorityEnum.SENIOR,
    TrancheTypeEnum.MEZZ.value: SeniorityEnum.MEZZANINE,
    TrancheTypeEnum.BRIDGE.value: SeniorityEnum.SENIOR,
    TrancheTypeEnum.OTHER.value: SeniorityEnum.SUBORDINATE,
}


class DebtTranche(Model):
    """
    One layer of project debt.

    Year indices (``start_year``, ``refinance_at_year``) are absolute
    positions on the project horizon, with year 0 being the first operating
    year. A tranche is active for ``term_years`` years starting at
    ``start_year``; its maturity year is the last active year.

    Legacy inputs are normalized once on construction:

    - ``amount`` is accepted in place of ``initial_principal``
    - ``type`` (SENIOR / MEZZ / BRIDGE / OTHER) is accepted in place of
      ``seniority``
    - ``amortization_years`` defaults to ``term_years``

    Downstream code only reads the canonical fields.

    Example:
        ```python
        senior = DebtTranche(
            id="senior",
            initial_principal=6_000_000,
            interest_rate=0.06,
            term_years=7,
            amortization_years=25,  # balloon at year 6
            origination_fee_pct=0.01,
        )
        ```
    """

    id: str = Field(..., min_length=1, description="Unique tranche identifier")
    label: Optional[str] = Field(default=None, description="Display name")
    initial_principal: float = Field(
        default=0.0, description="Principal funded at the start year"
    )
    interest_rate: float = Field(
        ..., gt=-1.0, description="Annual coupon as a decimal (0.06 = 6%)"
    )
    term_years: int = Field(..., description="Years from start to maturity")
    amortization_type: AmortizationTypeEnum = AmortizationTypeEnum.MORTGAGE
    amortization_years: int = Field(
        ..., description="Amortization period; term < amortization means a balloon"
    )
    start_year: PositiveInt = 0
    io_years: int = Field(
        default=0, description="Interest-only years at the start of a mortgage"
    )
    refinance_at_year: Optional[int] = Field(
        default=None, description="Absolute year index of a refinancing event"
    )
    refinance_amount_pct: FloatBetween0And1 = Field(
        default=1.0, description="Share of the beginning balance repaid on refinance"
    )
    origination_fee_pct: FloatBetween0And1 = 0.0
    exit_fee_pct: FloatBetween0And1 = 0.0
    seniority: SeniorityEnum = SeniorityEnum.SENIOR

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_fields(cls, data: Any) -> Any:
        """Resolve legacy field names into the canonical ones."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        amount = data.pop("amount", None)
        if data.get("initial_principal") is None:
            data["initial_principal"] = amount if amount is not None else 0.0

        legacy_type = data.pop("type", None)
        if data.get("seniority") is None and legacy_type is not None:
            key = getattr(legacy_type, "value", legacy_type)
            data["seniority"] = _LEGACY_TYPE_TO_SENIORITY.get(
                str(key).upper(), SeniorityEnum.SENIOR
            )

        if data.get("amortization_years") is None and "term_years" in data:
            data["amortization_years"] = data["term_years"]
        return data

    @property
    def end_year(self) -> int:
        """First year index after maturity (exclusive bound)."""
        return self.start_year + self.term_years

    @property
    def maturity_year(self) -> int:
        """Last active year index."""
        return self.end_year - 1

    @property
    def has_balloon(self) -> bool:
        return (
            self.amortization_type == AmortizationTypeEnum.MORTGAGE
            and self.term_years < self.amortization_years
        )

    @property
    def origination_fee(self) -> float:
        return self.initial_principal * self.origination_fee_pct

    @property
    def net_proceeds(self) -> float:
        """Cash actually received by the project at funding."""
        return self.initial_principal - self.origination_fee

    def is_active(self, year_index: int) -> bool:
        return self.start_year <= year_index < self.end_year

    def validate_terms(self) -> None:
        """
        Check that the tranche can be scheduled.

        Raises:
            ConfigurationError: negative principal, non-positive term or
                amortization while principal is outstanding, negative IO
                years, or a refinance year outside the active window
        """
        details = {"tranche_id": self.id}
        if self.initial_principal < 0:
            raise ConfigurationError(
                f"Tranche '{self.id}': initial principal cannot be negative "
                f"(got {self.initial_principal})",
                details=details,
            )
        if self.io_years < 0:
            raise ConfigurationError(
                f"Tranche '{self.id}': io_years cannot be negative (got {self.io_years})",
                details=details,
            )
        if self.initial_principal == 0:
            return
        if self.term_years <= 0:
            raise ConfigurationError(
                f"Tranche '{self.id}': term_years must be positive when principal "
                f"is outstanding (got {self.term_years})",
                details=details,
            )
        if (
            self.amortization_type == AmortizationTypeEnum.MORTGAGE
            and self.amortization_years <= 0
        ):
            raise ConfigurationError(
                f"Tranche '{self.id}': amortization_years must be positive for a "
                f"mortgage (got {self.amortization_years})",
                details=details,
            )
        if self.refinance_at_year is not None and not self.is_active(
            self.refinance_at_year
        ):
            raise ConfigurationError(
                f"Tranche '{self.id}': refinance_at_year {self.refinance_at_year} "
                f"is outside the active window [{self.start_year}, {self.end_year})",
                details=details,
            )
