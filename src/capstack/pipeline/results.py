# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Typed pipeline outcomes."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from ..capital.results import CapitalResult, DebtKpi
from ..core.errors import SoftWarning
from ..core.primitives import ErrorCodeEnum, Model, PipelineStageEnum
from ..waterfall.results import PartnerResult, WaterfallResult


class AuditRecord(Model):
    """One step of a pipeline run, in execution order."""

    stage: PipelineStageEnum
    step: str
    status: Literal["ok", "failed"] = "ok"
    message: str = ""
    metrics: Dict[str, Any] = Field(default_factory=dict)


class PipelineOutput(Model):
    capital: CapitalResult
    waterfall: WaterfallResult

    @property
    def owner_cash_flows(self) -> List[float]:
        return self.capital.owner_cash_flows

    @property
    def debt_kpis(self) -> List[DebtKpi]:
        return self.capital.debt_kpis

    @property
    def partner_results(self) -> Dict[str, PartnerResult]:
        return self.waterfall.partner_results


class PipelineSuccess(Model):
    ok: Literal[True] = True
    value: PipelineOutput
    warnings: List[SoftWarning] = Field(default_factory=list)
    audit_trace: List[AuditRecord] = Field(default_factory=list)


class PipelineFailure(Model):
    """A run aborted on a configuration, invariant or contract error."""

    ok: Literal[False] = False
    code: ErrorCodeEnum
    message: str
    stage: Optional[PipelineStageEnum] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    audit_trace: List[AuditRecord] = Field(default_factory=list)


PipelineResult = Union[PipelineSuccess, PipelineFailure]
