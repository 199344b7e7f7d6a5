# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .allocation import normalize, split_pro_rata, weights_for
from .clawback import clawback_adjustments, evaluation_years, liquidation_series
from .engine import WaterfallEngine, apply_equity_waterfall
from .equity import DEFAULT_OWNER, EquityClass
from .evaluator import TierRun, run_tiers
from .ledger import PartnerLedger, open_ledgers
from .results import AnnualWaterfallRow, PartnerResult, WaterfallResult
from .solver import resulting_irr, solve_hurdle_amount
from .tiers import ClawbackPolicy, WaterfallConfig, WaterfallTier

__all__ = [
    # Configuration
    "ClawbackPolicy",
    "DEFAULT_OWNER",
    "EquityClass",
    "WaterfallConfig",
    "WaterfallTier",
    # Engine
    "WaterfallEngine",
    "apply_equity_waterfall",
    "run_tiers",
    "TierRun",
    # Building blocks
    "PartnerLedger",
    "open_ledgers",
    "normalize",
    "split_pro_rata",
    "weights_for",
    "resulting_irr",
    "solve_hurdle_amount",
    "clawback_adjustments",
    "evaluation_years",
    "liquidation_series",
    # Results
    "AnnualWaterfallRow",
    "PartnerResult",
    "WaterfallResult",
]
