# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .config import CapitalStructureConfig, CostOfCapitalAssumptions
from .engine import CapitalEngine, run_capital_engine
from .inputs import (
    ConsolidatedAnnualPnl,
    UnleveredFcf,
    fcf_from_series,
    inputs_to_dataframe,
    pnl_from_series,
)
from .results import (
    CapitalResult,
    DebtKpi,
    LeveredCashFlowEntry,
    MonthlyDebtKpi,
    WaccMetrics,
)
from .wacc import calculate_wacc

__all__ = [
    # Configuration
    "CapitalStructureConfig",
    "CostOfCapitalAssumptions",
    # Inputs
    "ConsolidatedAnnualPnl",
    "UnleveredFcf",
    "fcf_from_series",
    "inputs_to_dataframe",
    "pnl_from_series",
    # Engine
    "CapitalEngine",
    "run_capital_engine",
    "calculate_wacc",
    # Results
    "CapitalResult",
    "DebtKpi",
    "LeveredCashFlowEntry",
    "MonthlyDebtKpi",
    "WaccMetrics",
]
