# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capstack - Capital Structure and Equity Waterfall Engines

Turns a multi-year unlevered project cash-flow forecast into a levered owner
cash-flow series and a per-partner distribution of that series.

Key Entry Points:
- capstack.pipeline.run_pipeline() - Full capital + waterfall run with typed result
- capstack.capital.CapitalEngine - Debt schedules, levered cash flow, DSCR/LTV
- capstack.waterfall.WaterfallEngine - Tiered equity distribution
- capstack.debt.* - Tranche definitions, amortization and aggregation

Example Usage:
    ```python
    from capstack.capital import CapitalStructureConfig
    from capstack.debt import DebtTranche
    from capstack.pipeline import run_pipeline
    from capstack.waterfall import EquityClass, WaterfallConfig

    capital = CapitalStructureConfig(
        initial_investment=10_000_000,
        debt_tranches=[
            DebtTranche(
                id="senior",
                initial_principal=6_000_000,
                interest_rate=0.06,
                term_years=10,
                amortization_years=25,
            )
        ],
    )
    waterfall = WaterfallConfig(
        equity_classes=[
            EquityClass(id="lp", name="LP", contribution_pct=0.9),
            EquityClass(id="gp", name="GP", contribution_pct=0.1),
        ]
    )

    result = run_pipeline(pnl, unlevered_fcf, capital, waterfall)
    if result.ok:
        print(result.value.partner_results["lp"].irr)
    ```
"""

import importlib
import logging

# Add a NullHandler so applications that don't configure logging
# don't see "No handlers could be found" warnings.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "capital",
    "core",
    "debt",
    "pipeline",
    "waterfall",
]


_LAZY_MODULES = {
    "capital": "capstack.capital",
    "core": "capstack.core",
    "debt": "capstack.debt",
    "pipeline": "capstack.pipeline",
    "waterfall": "capstack.waterfall",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'capstack' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module