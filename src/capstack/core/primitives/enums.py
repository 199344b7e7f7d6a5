# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class AmortizationTypeEnum(str, Enum):
    """
    Principal repayment policy for a debt tranche.

    - MORTGAGE: straight-line principal over the amortization period, with a
      balloon at maturity when the term is shorter than the amortization
    - INTEREST_ONLY: interest each year, full principal at maturity
    - BULLET: same cash profile as interest-only; kept distinct for reporting
    """

    MORTGAGE = "mortgage"
    INTEREST_ONLY = "interest_only"
    BULLET = "bullet"


class SeniorityEnum(str, Enum):
    """Claim priority of a tranche; only SENIOR enters the senior DSCR."""

    SENIOR = "senior"
    MEZZANINE = "mezzanine"
    SUBORDINATE = "subordinate"


class TrancheTypeEnum(str, Enum):
    """Legacy tranche type tag accepted on input and mapped to seniority."""

    SENIOR = "SENIOR"
    MEZZ = "MEZZ"
    BRIDGE = "BRIDGE"
    OTHER = "OTHER"


class TierTypeEnum(str, Enum):
    """Equity waterfall tier kinds, evaluated in declared order."""

    RETURN_OF_CAPITAL = "return_of_capital"
    PREFERRED_RETURN = "preferred_return"
    PROMOTE = "promote"


class ClawbackTriggerEnum(str, Enum):
    """When a clawback true-up is evaluated."""

    FINAL_PERIOD = "final_period"  # Terminal waterfall row only
    ANNUAL = "annual"  # Every distribution row


class ClawbackMethodEnum(str, Enum):
    """How the clawback baseline is computed."""

    HYPOTHETICAL_LIQUIDATION = "hypothetical_liquidation"


class CovenantTypeEnum(str, Enum):
    """Annual debt covenant tests."""

    MIN_DSCR = "min_dscr"
    MIN_SENIOR_DSCR = "min_senior_dscr"
    MAX_LTV = "max_ltv"


class SeverityEnum(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class PipelineStageEnum(str, Enum):
    """Stages of a pipeline run, used to tag audit records and errors."""

    UPSTREAM = "upstream"
    CAPITAL = "capital"
    WATERFALL = "waterfall"


class ErrorCodeEnum(str, Enum):
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"
