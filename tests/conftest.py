# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for Capstack testing.

This module provides small builders for the records the engines consume, so
tests can describe a scenario as plain numbers without repeating the
boilerplate of every model.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import pytest

from capstack.capital import (
    CapitalStructureConfig,
    ConsolidatedAnnualPnl,
    UnleveredFcf,
    fcf_from_series,
    pnl_from_series,
)
from capstack.core.primitives import CalculationSettings, TierTypeEnum
from capstack.debt import DebtTranche
from capstack.waterfall import (
    EquityClass,
    WaterfallConfig,
    WaterfallTier,
)


# Upstream builders
def flat_inputs(
    years: int, fcf: float, noi: Optional[float] = None
) -> tuple[List[ConsolidatedAnnualPnl], List[UnleveredFcf]]:
    """
    Flat P&L and unlevered FCF series.

    Args:
        years: Horizon length
        fcf: Unlevered free cash flow every year
        noi: NOI every year (defaults to ``fcf``)

    Returns:
        (pnl, unlevered_fcf) ready for the capital engine
    """
    noi = fcf if noi is None else noi
    return pnl_from_series([noi] * years), fcf_from_series([fcf] * years, [noi] * years)


def series_inputs(
    fcf: Sequence[float], noi: Optional[Sequence[float]] = None
) -> tuple[List[ConsolidatedAnnualPnl], List[UnleveredFcf]]:
    noi = list(fcf) if noi is None else list(noi)
    return pnl_from_series(noi), fcf_from_series(fcf, noi)


# Debt builders
def mortgage(
    tranche_id: str = "senior",
    principal: float = 10_000_000,
    rate: float = 0.08,
    term: int = 5,
    amortization: Optional[int] = None,
    **kwargs,
) -> DebtTranche:
    """Create a mortgage tranche with sensible defaults."""
    return DebtTranche(
        id=tranche_id,
        initial_principal=principal,
        interest_rate=rate,
        term_years=term,
        amortization_years=amortization if amortization is not None else term,
        **kwargs,
    )


# Waterfall builders
def lp_gp_classes(
    lp_pct: float = 0.9, gp_pct: float = 0.1
) -> List[EquityClass]:
    return [
        EquityClass(id="lp", name="Investor LP", contribution_pct=lp_pct),
        EquityClass(id="gp", name="Sponsor GP", contribution_pct=gp_pct),
    ]


def standard_tiers(
    hurdle: float = 0.08,
    pref_split: Optional[dict] = None,
    promote_split: Optional[dict] = None,
    **promote_kwargs,
) -> List[WaterfallTier]:
    """ROC, IRR pref and promote, in that order."""
    return [
        WaterfallTier(id="roc", type=TierTypeEnum.RETURN_OF_CAPITAL),
        WaterfallTier(
            id="pref",
            type=TierTypeEnum.PREFERRED_RETURN,
            hurdle_irr=hurdle,
            distribution_splits=pref_split or {"lp": 0.9, "gp": 0.1},
        ),
        WaterfallTier(
            id="promote",
            type=TierTypeEnum.PROMOTE,
            distribution_splits=promote_split or {"lp": 0.7, "gp": 0.3},
            **promote_kwargs,
        ),
    ]


# Fixtures
@pytest.fixture
def settings() -> CalculationSettings:
    return CalculationSettings()


@pytest.fixture
def example_a_tranche() -> DebtTranche:
    """$10M, 8%, five-year fully amortizing mortgage."""
    return mortgage()


@pytest.fixture
def example_b_capital() -> CapitalStructureConfig:
    """Senior plus a mezzanine tranche refinanced in full at year 2."""
    return CapitalStructureConfig(
        initial_investment=10_000_000,
        debt_tranches=[
            mortgage("senior", principal=6_000_000, rate=0.06, term=5, amortization=25),
            DebtTranche(
                id="mezz",
                initial_principal=2_000_000,
                interest_rate=0.10,
                term_years=5,
                amortization_type="interest_only",
                refinance_at_year=2,
                refinance_amount_pct=1.0,
                seniority="mezzanine",
            ),
        ],
    )


@pytest.fixture
def example_c_config() -> WaterfallConfig:
    """LP funds everything; 8% pref to the LP; 70/30 promote."""
    return WaterfallConfig(
        equity_classes=[
            EquityClass(id="lp", name="LP", contribution_pct=1.0),
            EquityClass(id="gp", name="GP", contribution_pct=0.0),
        ],
        tiers=standard_tiers(pref_split={"lp": 1.0}),
    )


@pytest.fixture
def example_c_flows() -> List[float]:
    return [-1_000_000, 200_000, 200_000, 200_000, 1_200_000]
