# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Equity waterfall engine.

Splits the owner cash-flow series (year 0 = equity call, later years =
levered FCF) among equity partners:

1. validate the equity classes and tier graph
2. run the stateless tier evaluator over the actual series
3. apply the clawback true-up when the promote tier carries a policy
4. check every row: Σ distributions + Σ clawback adjustments = owner cash flow
5. compute per-partner IRR, MOIC and totals

Row drift beyond the tolerance is fatal. Drift within it is corrected on
the partner with the largest allocation and recorded as a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..core.calculations import FinancialCalculations
from ..core.errors import InvariantViolation, WarningLog
from ..core.primitives import CalculationSettings, PipelineStageEnum
from .clawback import clawback_adjustments
from .equity import EquityClass
from .evaluator import TierRun, run_tiers
from .results import AnnualWaterfallRow, PartnerResult, WaterfallResult
from .tiers import WaterfallConfig

logger = logging.getLogger(__name__)


@dataclass
class WaterfallEngine:
    """
    Evaluates a waterfall configuration against owner cash flows.

    The engine holds configuration only; all running state lives in ledgers
    created inside each ``evaluate`` call, so one engine can evaluate many
    series.

    Attributes:
        config: Equity classes and ordered tiers
        settings: Tolerances and solver limits

    Example:
        ```python
        engine = WaterfallEngine(config)
        result = engine.evaluate([-1_000_000, 200_000, 200_000, 1_400_000])
        result.partner_results["lp"].irr
        ```
    """

    config: WaterfallConfig
    settings: CalculationSettings = field(default_factory=CalculationSettings)

    def evaluate(self, owner_cash_flows: Sequence[float]) -> WaterfallResult:
        """
        Run the waterfall.

        Raises:
            ConfigurationError: malformed equity classes or tier graph
            InvariantViolation: a row fails conservation beyond tolerance
        """
        self.config.validate_structure()
        classes = self.config.resolved_classes()
        tiers = self.config.tiers or []
        flows = [float(cf) for cf in owner_cash_flows]
        warnings = WarningLog(stage=PipelineStageEnum.WATERFALL)

        logger.debug(
            "Waterfall: %d partners, %d tiers, %d periods",
            len(classes),
            len(tiers),
            len(flows),
        )

        actual = run_tiers(flows, classes, tiers, self.settings, warnings)

        adjustments = None
        clawback_tier = self.config.clawback_tier()
        if clawback_tier is not None:
            adjustments = clawback_adjustments(
                flows, classes, tiers, actual, clawback_tier.clawback, self.settings
            )

        rows = self._build_rows(flows, actual, adjustments, warnings)
        partners = self._partner_results(classes, actual.partner_ids, rows)

        return WaterfallResult(
            owner_cash_flows=flows,
            partners=partners,
            annual_rows=rows,
            warnings=warnings.records,
        )

    def _build_rows(
        self,
        flows: List[float],
        run: TierRun,
        adjustments: Optional[np.ndarray],
        warnings: WarningLog,
    ) -> List[AnnualWaterfallRow]:
        rows = []
        for year, owner_cf in enumerate(flows):
            shares = run.distributions[year].copy()
            adjustment = adjustments[year] if adjustments is not None else None
            has_adjustment = adjustment is not None and bool(np.any(adjustment != 0))

            total = shares.sum() + (adjustment.sum() if has_adjustment else 0.0)
            drift = owner_cf - total
            if abs(drift) > self.settings.tolerance:
                logger.error(
                    "Waterfall conservation failed in year %d: owner %.2f, "
                    "allocated %.2f",
                    year,
                    owner_cf,
                    total,
                )
                raise InvariantViolation(
                    f"Year {year}: partner distributions plus clawback "
                    f"adjustments ({total:,.2f}) do not equal the owner cash "
                    f"flow ({owner_cf:,.2f})",
                    expected=owner_cf,
                    actual=float(total),
                    year_index=year,
                    stage=PipelineStageEnum.WATERFALL,
                )
            if abs(drift) > self.settings.drift_epsilon:
                anchor = int(np.argmax(np.abs(shares)))
                shares[anchor] += drift
                warnings.add(
                    "ROW_DRIFT_CORRECTED",
                    f"Year {year}: corrected {drift:.6f} of rounding drift on "
                    f"partner '{run.partner_ids[anchor]}'",
                    year_index=year,
                    entity_id=run.partner_ids[anchor],
                    magnitude=float(drift),
                )

            rows.append(
                AnnualWaterfallRow(
                    year_index=year,
                    owner_cash_flow=owner_cf,
                    partner_distributions=dict(zip(run.partner_ids, shares.tolist())),
                    clawback_adjustments=(
                        dict(zip(run.partner_ids, adjustment.tolist()))
                        if has_adjustment
                        else None
                    ),
                    tier_distributions=run.tier_distributions[year],
                )
            )
        return rows

    @staticmethod
    def _partner_results(
        classes: Sequence[EquityClass],
        partner_ids: List[str],
        rows: List[AnnualWaterfallRow],
    ) -> List[PartnerResult]:
        names = {c.id: c.name for c in classes}
        results = []
        for pid in partner_ids:
            cash_flows = np.array([row.partner_cash_flow(pid) for row in rows])
            results.append(
                PartnerResult(
                    partner_id=pid,
                    name=names.get(pid, ""),
                    cash_flows=cash_flows.tolist(),
                    cumulative_cash_flows=np.cumsum(cash_flows).tolist(),
                    irr=FinancialCalculations.calculate_irr(cash_flows),
                    moic=FinancialCalculations.calculate_equity_multiple(cash_flows),
                    total_contributed=float(-cash_flows[cash_flows < 0].sum()),
                    total_distributed=float(cash_flows[cash_flows > 0].sum()),
                )
            )
        return results


def apply_equity_waterfall(
    owner_cash_flows: Sequence[float],
    config: WaterfallConfig,
    settings: Optional[CalculationSettings] = None,
) -> WaterfallResult:
    """Functional wrapper around ``WaterfallEngine.evaluate``."""
    engine = WaterfallEngine(config=config, settings=settings or CalculationSettings())
    return engine.evaluate(owner_cash_flows)
