# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Pipeline contracts.

Each stage hand-off is checked before the next stage runs:

- upstream -> capital: P&L and unlevered FCF share a horizon N with year
  indices 0..N−1
- capital -> waterfall: every per-year output has N entries indexed
  0..N−1, the owner cash flow has N+1 entries, every schedule belongs to a
  configured tranche, and debt conservation still holds
- waterfall config: every partner id referenced by a tier exists
- waterfall output: N+1 rows indexed 0..N, one result per equity class,
  and every row conserves the owner cash flow

Shape and identity problems raise ``ContractViolation`` tagged with the
stage that produced the bad output. Broken conservation raises
``InvariantViolation``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..capital.config import CapitalStructureConfig
from ..capital.inputs import ConsolidatedAnnualPnl, UnleveredFcf
from ..capital.results import CapitalResult
from ..core.errors import ContractViolation, InvariantViolation
from ..core.primitives import CalculationSettings, PipelineStageEnum
from ..debt.schedule import TrancheSchedule
from ..waterfall.results import WaterfallResult
from ..waterfall.tiers import WaterfallConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineContractValidator:
    """Asserts shape and identity invariants between pipeline stages."""

    settings: CalculationSettings = field(default_factory=CalculationSettings)

    def check_upstream(
        self,
        pnl: Sequence[ConsolidatedAnnualPnl],
        unlevered_fcf: Sequence[UnleveredFcf],
    ) -> int:
        """Validate upstream inputs and return the horizon N."""
        stage = PipelineStageEnum.UPSTREAM
        horizon = len(unlevered_fcf)
        if horizon == 0:
            self._violation(stage, "Unlevered FCF series is empty")
        self._check_length(stage, "consolidated P&L", len(pnl), horizon)
        self._check_indices(stage, "consolidated P&L", (p.year_index for p in pnl), 0)
        self._check_indices(
            stage, "unlevered FCF", (f.year_index for f in unlevered_fcf), 0
        )
        logger.debug("Upstream contract satisfied for %d years", horizon)
        return horizon

    def check_capital(
        self, result: CapitalResult, config: CapitalStructureConfig, horizon: int
    ) -> None:
        """Validate the capital stage output before the waterfall runs."""
        stage = PipelineStageEnum.CAPITAL
        self._check_length(stage, "levered FCF", len(result.levered_fcf), horizon)
        self._check_indices(
            stage, "levered FCF", (e.year_index for e in result.levered_fcf), 0
        )
        self._check_length(stage, "debt KPIs", len(result.debt_kpis), horizon)
        self._check_indices(stage, "debt KPIs", (k.year_index for k in result.debt_kpis), 0)
        self._check_length(
            stage, "aggregate debt schedule", len(result.debt_schedule.entries), horizon
        )
        self._check_length(
            stage, "owner cash flow", len(result.owner_cash_flows), horizon + 1
        )

        known = set(config.tranche_ids)
        for schedule in result.tranche_schedules:
            if schedule.tranche_id not in known:
                self._violation(
                    stage,
                    f"Schedule references unknown tranche '{schedule.tranche_id}'",
                    tranche_id=schedule.tranche_id,
                )
            name = f"schedule for tranche '{schedule.tranche_id}'"
            self._check_length(stage, name, len(schedule.entries), horizon)
            self._check_indices(stage, name, (e.year_index for e in schedule.entries), 0)
            self._check_debt_conservation(schedule.tranche_id, schedule, horizon)

        logger.debug("Capital contract satisfied")

    def check_waterfall_config(self, config: WaterfallConfig) -> None:
        """Every partner id referenced by a tier must be an equity class."""
        known = set(config.partner_ids)
        unknown = [pid for pid in config.referenced_partner_ids() if pid not in known]
        if unknown:
            self._violation(
                PipelineStageEnum.WATERFALL,
                f"Tiers reference unknown partners {unknown}",
                unknown_partner_ids=unknown,
            )

    def check_waterfall(
        self, result: WaterfallResult, config: WaterfallConfig, horizon: int
    ) -> None:
        """Validate the waterfall output against the owner cash flow."""
        stage = PipelineStageEnum.WATERFALL
        self._check_length(stage, "waterfall rows", len(result.annual_rows), horizon + 1)
        self._check_indices(
            stage, "waterfall rows", (r.year_index for r in result.annual_rows), 0
        )

        expected_ids = config.partner_ids
        actual_ids = [p.partner_id for p in result.partners]
        if actual_ids != expected_ids:
            self._violation(
                stage,
                f"Partner results {actual_ids} do not match equity classes {expected_ids}",
                expected=expected_ids,
                actual=actual_ids,
            )

        for row in result.annual_rows:
            if abs(row.total_allocated - row.owner_cash_flow) > self.settings.tolerance:
                raise InvariantViolation(
                    f"Year {row.year_index}: waterfall row does not conserve the "
                    f"owner cash flow",
                    expected=row.owner_cash_flow,
                    actual=row.total_allocated,
                    year_index=row.year_index,
                    stage=stage,
                )
        logger.debug("Waterfall contract satisfied")

    def _check_debt_conservation(
        self, tranche_id: str, schedule: TrancheSchedule, horizon: int
    ) -> None:
        if not schedule.entries or schedule.initial_principal <= 0:
            return
        first_active = next(
            (e.year_index for e in schedule.entries if e.beginning_balance > 0), None
        )
        expected = schedule.initial_principal if first_active is not None else 0.0
        actual = schedule.total_principal + schedule.final_balance
        if abs(actual - expected) > self.settings.tolerance:
            raise InvariantViolation(
                f"Tranche '{tranche_id}': principal repaid plus final balance "
                f"does not equal funded principal",
                expected=expected,
                actual=actual,
                entity_id=tranche_id,
                stage=PipelineStageEnum.CAPITAL,
            )

    def _check_length(
        self, stage: PipelineStageEnum, name: str, actual: int, expected: int
    ) -> None:
        if actual != expected:
            self._violation(
                stage,
                f"{name} has {actual} entries, expected {expected}",
                series=name,
                expected_length=expected,
                actual_length=actual,
            )

    def _check_indices(
        self, stage: PipelineStageEnum, name: str, indices: Iterable[int], start: int
    ) -> None:
        indices = list(indices)
        expected = list(range(start, start + len(indices)))
        if indices != expected:
            missing = sorted(set(expected) - set(indices))
            self._violation(
                stage,
                f"{name} year indices are not contiguous from {start}"
                + (f"; missing {missing}" if missing else ""),
                series=name,
                missing_year_indices=missing,
            )

    @staticmethod
    def _violation(stage: PipelineStageEnum, message: str, **details) -> None:
        logger.error("Contract violation at %s: %s", stage.value, message)
        raise ContractViolation(message, stage=stage, details=details)
