# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .aggregation import (
    AggregateDebtEntry,
    AggregateDebtSchedule,
    DebtAggregator,
    MonthlyAggregateDebtEntry,
)
from .amortization import TrancheAmortizer, schedule_tranche
from .covenants import Covenant, CovenantBreach, check_covenants
from .schedule import (
    DebtScheduleEntry,
    MonthlyDebtScheduleEntry,
    MonthlyTrancheSchedule,
    TrancheSchedule,
)
from .tranche import DebtTranche

__all__ = [
    # Tranche definition
    "DebtTranche",
    # Schedules
    "DebtScheduleEntry",
    "MonthlyDebtScheduleEntry",
    "MonthlyTrancheSchedule",
    "TrancheSchedule",
    # Amortization
    "TrancheAmortizer",
    "schedule_tranche",
    # Aggregation
    "AggregateDebtEntry",
    "AggregateDebtSchedule",
    "DebtAggregator",
    "MonthlyAggregateDebtEntry",
    # Covenants
    "Covenant",
    "CovenantBreach",
    "check_covenants",
]
