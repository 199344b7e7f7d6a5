# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Pipeline orchestration.

``run_pipeline`` executes upstream validation, the capital stage and the
waterfall stage in order, checking the contract at every hand-off. It never
returns a partially consistent result: the first configuration, invariant or
contract error aborts the run and is returned as a ``PipelineFailure`` that
carries the audit records collected up to that point. Any other exception
propagates unchanged.

Configuration inputs are deep-copied on entry so concurrent callers (Monte
Carlo iterations, sensitivity grids) never alias each other's objects.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..capital.config import CapitalStructureConfig, CostOfCapitalAssumptions
from ..capital.engine import CapitalEngine
from ..capital.inputs import ConsolidatedAnnualPnl, UnleveredFcf
from ..core.errors import (
    CapstackError,
    ConfigurationError,
    ContractViolation,
    InvariantViolation,
    SoftWarning,
)
from ..core.primitives import CalculationSettings, PipelineStageEnum
from ..waterfall.engine import WaterfallEngine
from ..waterfall.tiers import WaterfallConfig
from .contracts import PipelineContractValidator
from .results import (
    AuditRecord,
    PipelineFailure,
    PipelineOutput,
    PipelineResult,
    PipelineSuccess,
)

logger = logging.getLogger(__name__)


@dataclass
class _RunTrace:
    """Audit records and warnings accumulated during one run."""

    stage: PipelineStageEnum = PipelineStageEnum.UPSTREAM
    records: List[AuditRecord] = field(default_factory=list)
    warnings: List[SoftWarning] = field(default_factory=list)

    def enter(self, stage: PipelineStageEnum) -> None:
        self.stage = stage

    def ok(self, step: str, message: str = "", **metrics) -> None:
        self.records.append(
            AuditRecord(stage=self.stage, step=step, message=message, metrics=metrics)
        )

    def failed(self, error: CapstackError) -> None:
        self.records.append(
            AuditRecord(
                stage=error.stage or self.stage,
                step="abort",
                status="failed",
                message=error.message,
                metrics={"code": error.code.value},
            )
        )


def _execute(
    pnl: Sequence[ConsolidatedAnnualPnl],
    unlevered_fcf: Sequence[UnleveredFcf],
    capital_config: CapitalStructureConfig,
    waterfall_config: WaterfallConfig,
    settings: CalculationSettings,
    cost_of_capital: Optional[CostOfCapitalAssumptions],
    trace: _RunTrace,
) -> PipelineOutput:
    validator = PipelineContractValidator(settings)

    trace.enter(PipelineStageEnum.UPSTREAM)
    horizon = validator.check_upstream(pnl, unlevered_fcf)
    trace.ok("contract", "upstream inputs validated", horizon_years=horizon)

    # Tier graph is rejected before any stage computes
    validator.check_waterfall_config(waterfall_config)
    waterfall_config.validate_structure()
    trace.ok("config", "waterfall tier graph validated", tiers=len(waterfall_config.tiers))

    trace.enter(PipelineStageEnum.CAPITAL)
    capital_engine = CapitalEngine(
        config=capital_config, settings=settings, cost_of_capital=cost_of_capital
    )
    capital = capital_engine.run(unlevered_fcf, pnl)
    trace.warnings.extend(capital_engine.warnings.records)
    trace.ok(
        "engine",
        "capital stage complete",
        tranches=len(capital.tranche_schedules),
        equity_investment=capital.equity_investment,
    )
    validator.check_capital(capital, capital_config, horizon)
    trace.ok("contract", "capital output validated")

    trace.enter(PipelineStageEnum.WATERFALL)
    waterfall = WaterfallEngine(config=waterfall_config, settings=settings).evaluate(
        capital.owner_cash_flows
    )
    trace.warnings.extend(waterfall.warnings)
    trace.ok(
        "engine",
        "waterfall stage complete",
        partners=len(waterfall.partners),
        clawback=waterfall.has_clawback,
    )
    validator.check_waterfall(waterfall, waterfall_config, horizon)
    trace.ok("contract", "waterfall output validated")

    return PipelineOutput(capital=capital, waterfall=waterfall)


def run_pipeline(
    pnl: Sequence[ConsolidatedAnnualPnl],
    unlevered_fcf: Sequence[UnleveredFcf],
    capital_config: CapitalStructureConfig,
    waterfall_config: WaterfallConfig,
    settings: Optional[CalculationSettings] = None,
    cost_of_capital: Optional[CostOfCapitalAssumptions] = None,
) -> PipelineResult:
    """
    Run upstream validation, the capital stage and the waterfall stage.

    Args:
        pnl: Consolidated annual P&L, year 0 first
        unlevered_fcf: Unlevered FCF, year 0 first; defines the horizon
        capital_config: Capital structure
        waterfall_config: Equity classes and tiers
        settings: Numeric policy; defaults are used when omitted
        cost_of_capital: Optional WACC assumptions

    Returns:
        PipelineSuccess with the capital and waterfall results, warnings and
        audit trace, or PipelineFailure with the error code, message,
        details and the audit trace collected before the failure

    Example:
        ```python
        result = run_pipeline(pnl, fcf, capital, waterfall)
        if not result.ok:
            print(result.code, result.message)
        ```
    """
    settings = settings or CalculationSettings()
    pnl, unlevered_fcf, capital_config, waterfall_config, cost_of_capital = copy.deepcopy(
        (pnl, unlevered_fcf, capital_config, waterfall_config, cost_of_capital)
    )
    trace = _RunTrace()

    try:
        output = _execute(
            pnl,
            unlevered_fcf,
            capital_config,
            waterfall_config,
            settings,
            cost_of_capital,
            trace,
        )
    except (ConfigurationError, InvariantViolation, ContractViolation) as e:
        logger.warning("Pipeline aborted (%s): %s", e.code.value, e)
        trace.failed(e)
        return PipelineFailure(
            code=e.code,
            message=e.message,
            stage=e.stage or trace.stage,
            details=e.details,
            audit_trace=trace.records,
        )

    return PipelineSuccess(
        value=output, warnings=trace.warnings, audit_trace=trace.records
    )


def run_pipeline_strict(
    pnl: Sequence[ConsolidatedAnnualPnl],
    unlevered_fcf: Sequence[UnleveredFcf],
    capital_config: CapitalStructureConfig,
    waterfall_config: WaterfallConfig,
    settings: Optional[CalculationSettings] = None,
    cost_of_capital: Optional[CostOfCapitalAssumptions] = None,
) -> PipelineOutput:
    """Like ``run_pipeline`` but raises the first error instead of returning it."""
    settings = settings or CalculationSettings()
    pnl, unlevered_fcf, capital_config, waterfall_config, cost_of_capital = copy.deepcopy(
        (pnl, unlevered_fcf, capital_config, waterfall_config, cost_of_capital)
    )
    return _execute(
        pnl,
        unlevered_fcf,
        capital_config,
        waterfall_config,
        settings,
        cost_of_capital,
        _RunTrace(),
    )
