# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capstack Core Primitives

Building blocks shared by every engine: the immutable model base, enums,
constrained numeric types and calculation settings.
"""

from .enums import (
    AmortizationTypeEnum,
    ClawbackMethodEnum,
    ClawbackTriggerEnum,
    CovenantTypeEnum,
    ErrorCodeEnum,
    PipelineStageEnum,
    SeniorityEnum,
    SeverityEnum,
    TierTypeEnum,
    TrancheTypeEnum,
)
from .model import Model
from .settings import CalculationSettings
from .types import FloatBetween0And1, PositiveFloat, PositiveInt, StrictlyPositiveInt

__all__ = [
    # Core models
    "Model",
    # Settings
    "CalculationSettings",
    # Types
    "FloatBetween0And1",
    "PositiveFloat",
    "PositiveInt",
    "StrictlyPositiveInt",
    # Enums
    "AmortizationTypeEnum",
    "ClawbackMethodEnum",
    "ClawbackTriggerEnum",
    "CovenantTypeEnum",
    "ErrorCodeEnum",
    "PipelineStageEnum",
    "SeniorityEnum",
    "SeverityEnum",
    "TierTypeEnum",
    "TrancheTypeEnum",
]
