# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field, model_validator

from .model import Model
from .types import StrictlyPositiveInt


class CalculationSettings(Model):
    """
    Numeric policy shared by the capital and waterfall engines.

    Settings are passed explicitly to each engine; engines fall back to a
    default instance when none is given, so two runs with the same inputs
    always see the same tolerances.

    Usage Examples:
        # Defaults: cent-level conservation checks, annual outputs only
        settings = CalculationSettings()

        # Also build the monthly debt schedule
        settings = CalculationSettings(include_monthly=True)

        # Tighter hurdle solve for very large pools
        settings = CalculationSettings(solver_xtol=1e-9, solver_max_iterations=500)
    """

    tolerance: float = Field(
        default=0.01,
        gt=0,
        description=(
            "Absolute currency tolerance for conservation identities. "
            "Differences above this are fatal; differences within it are "
            "corrected in place and recorded as warnings."
        ),
    )
    drift_epsilon: float = Field(
        default=1e-9,
        gt=0,
        description="Differences below this are treated as exact and not reported.",
    )
    solver_xtol: float = Field(
        default=1e-6,
        gt=0,
        description="Absolute tolerance (currency) for the preferred-return bisection.",
    )
    solver_max_iterations: StrictlyPositiveInt = Field(
        default=200,
        description="Iteration cap for the preferred-return bisection.",
    )
    include_monthly: bool = Field(
        default=False,
        description="If True, the capital stage also produces monthly debt schedules.",
    )

    @model_validator(mode="after")
    def check_tolerance_ordering(self) -> "CalculationSettings":
        """The drift floor must sit below the fatal tolerance."""
        if self.drift_epsilon >= self.tolerance:
            raise ValueError(
                f"drift_epsilon ({self.drift_epsilon}) must be smaller than "
                f"tolerance ({self.tolerance})"
            )
        return self
