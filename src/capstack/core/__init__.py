# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capstack Core

Shared primitives, error types and pure financial calculations used by the
debt, capital, waterfall and pipeline packages.
"""

from .calculations import FinancialCalculations
from .errors import (
    CapstackError,
    ConfigurationError,
    ContractViolation,
    InvariantViolation,
    SoftWarning,
    WarningLog,
)

__all__ = [
    "FinancialCalculations",
    "CapstackError",
    "ConfigurationError",
    "ContractViolation",
    "InvariantViolation",
    "SoftWarning",
    "WarningLog",
]
