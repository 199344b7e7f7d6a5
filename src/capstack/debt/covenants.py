# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Debt covenant tests.

Covenants are threshold tests applied to the annual debt KPIs produced by the
capital stage. Each failing year produces a breach event; consecutive failures
inside the grace period are reported as warnings and later ones as critical.

Current Covenants:
- MIN_DSCR: project DSCR must stay at or above the threshold
- MIN_SENIOR_DSCR: senior DSCR must stay at or above the threshold
- MAX_LTV: LTV must stay at or below the threshold

Years where the tested ratio is undefined (no debt service, no balance) are
not tested.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from pydantic import Field

from ..core.primitives import CovenantTypeEnum, Model, PositiveInt, SeverityEnum

logger = logging.getLogger(__name__)


class _KpiLike(Protocol):
    year_index: int
    dscr: Optional[float]
    senior_dscr: Optional[float]
    ltv: Optional[float]


class Covenant(Model):
    """
    Lender covenant on an annual debt ratio.

    Example:
        ```python
        Covenant(id="dscr", type=CovenantTypeEnum.MIN_DSCR, threshold=1.25,
                 grace_period_years=1)
        ```
    """

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    type: CovenantTypeEnum
    threshold: float = Field(..., ge=0)
    grace_period_years: PositiveInt = Field(
        default=0,
        description="Consecutive breach years reported as warnings before turning critical",
    )

    def actual_value(self, kpi: _KpiLike) -> Optional[float]:
        if self.type == CovenantTypeEnum.MIN_DSCR:
            return kpi.dscr
        if self.type == CovenantTypeEnum.MIN_SENIOR_DSCR:
            return kpi.senior_dscr
        return kpi.ltv

    def passes(self, value: float) -> bool:
        if self.type == CovenantTypeEnum.MAX_LTV:
            return value <= self.threshold
        return value >= self.threshold


class CovenantBreach(Model):
    """One year in which a covenant failed."""

    covenant_id: str
    covenant_type: CovenantTypeEnum
    year_index: int
    actual_value: float
    threshold: float
    consecutive_years: int
    severity: SeverityEnum


def check_covenants(
    covenants: Sequence[Covenant], kpis: Sequence[_KpiLike]
) -> List[CovenantBreach]:
    """Return breach events for every failing covenant-year."""
    breaches: List[CovenantBreach] = []
    for covenant in covenants:
        consecutive = 0
        for kpi in kpis:
            value = covenant.actual_value(kpi)
            if value is None:
                continue
            if covenant.passes(value):
                consecutive = 0
                continue

            consecutive += 1
            severity = (
                SeverityEnum.WARNING
                if consecutive <= covenant.grace_period_years
                else SeverityEnum.CRITICAL
            )
            breaches.append(
                CovenantBreach(
                    covenant_id=covenant.id,
                    covenant_type=covenant.type,
                    year_index=kpi.year_index,
                    actual_value=value,
                    threshold=covenant.threshold,
                    consecutive_years=consecutive,
                    severity=severity,
                )
            )
    if breaches:
        logger.info("%d covenant breach events detected", len(breaches))
    return breaches
