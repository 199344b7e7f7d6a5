# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Error and warning types shared by every engine.

Three kinds of failure are fatal and raised as exceptions:

- ``ConfigurationError``: malformed input (tranche parameters, tier graph)
  detected before any calculation runs.
- ``InvariantViolation``: a conservation identity (debt principal, waterfall
  row sum) broke beyond tolerance during a calculation.
- ``ContractViolation``: a stage hand-off has the wrong shape or references
  unknown identifiers.

Drift within tolerance is never raised. It is corrected in place and
recorded as a ``SoftWarning`` in the run's ``WarningLog``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import Field

from .primitives import ErrorCodeEnum, Model, PipelineStageEnum

logger = logging.getLogger(__name__)


class CapstackError(Exception):
    """Base class for fatal engine errors."""

    code: ErrorCodeEnum = ErrorCodeEnum.CONFIGURATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[PipelineStageEnum] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.details: Dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if self.stage is not None:
            return f"[{self.stage.value}] {self.message}"
        return self.message


class ConfigurationError(CapstackError, ValueError):
    """Malformed tranche or tier configuration."""

    code = ErrorCodeEnum.CONFIGURATION_ERROR


class InvariantViolation(CapstackError, RuntimeError):
    """A conservation identity failed beyond tolerance."""

    code = ErrorCodeEnum.INVARIANT_VIOLATION

    def __init__(
        self,
        message: str,
        *,
        expected: float,
        actual: float,
        year_index: Optional[int] = None,
        entity_id: Optional[str] = None,
        stage: Optional[PipelineStageEnum] = None,
    ):
        details = {
            "expected": expected,
            "actual": actual,
            "difference": actual - expected,
            "year_index": year_index,
            "entity_id": entity_id,
        }
        super().__init__(message, stage=stage, details=details)
        self.expected = expected
        self.actual = actual
        self.year_index = year_index
        self.entity_id = entity_id


class ContractViolation(CapstackError, RuntimeError):
    """A stage produced output that the next stage cannot consume."""

    code = ErrorCodeEnum.CONTRACT_VIOLATION

    def __init__(
        self,
        message: str,
        *,
        stage: PipelineStageEnum,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, stage=stage, details=details)


class SoftWarning(Model):
    """A non-fatal observation made during a run."""

    code: str = Field(..., description="Machine-readable warning code")
    message: str
    stage: Optional[PipelineStageEnum] = None
    year_index: Optional[int] = None
    entity_id: Optional[str] = None
    magnitude: Optional[float] = Field(
        default=None, description="Size of the corrected drift or ignored amount"
    )


@dataclass
class WarningLog:
    """Collects soft warnings for a single run."""

    stage: Optional[PipelineStageEnum] = None
    records: List[SoftWarning] = field(default_factory=list)

    def add(
        self,
        code: str,
        message: str,
        *,
        year_index: Optional[int] = None,
        entity_id: Optional[str] = None,
        magnitude: Optional[float] = None,
    ) -> SoftWarning:
        warning = SoftWarning(
            code=code,
            message=message,
            stage=self.stage,
            year_index=year_index,
            entity_id=entity_id,
            magnitude=magnitude,
        )
        logger.warning("%s: %s", code, message)
        self.records.append(warning)
        return warning

    def extend(self, warnings: List[SoftWarning]) -> None:
        self.records.extend(warnings)

    def __len__(self) -> int:
        return len(self.records)
