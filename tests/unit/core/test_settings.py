# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest
from pydantic import ValidationError

from capstack.core.primitives import CalculationSettings


def test_calculation_settings_defaults():
    """Test that CalculationSettings can be instantiated with default values."""
    settings = CalculationSettings()
    assert settings.tolerance == 0.01
    assert settings.drift_epsilon == 1e-9
    assert settings.solver_xtol == 1e-6
    assert settings.solver_max_iterations == 200
    assert settings.include_monthly is False


def test_calculation_settings_custom():
    settings = CalculationSettings(tolerance=0.5, include_monthly=True)
    assert settings.tolerance == 0.5
    assert settings.include_monthly is True


def test_drift_epsilon_must_be_below_tolerance():
    with pytest.raises(ValidationError, match="drift_epsilon"):
        CalculationSettings(tolerance=0.01, drift_epsilon=0.01)


@pytest.mark.parametrize(
    "field, value",
    [("tolerance", 0), ("solver_xtol", -1), ("solver_max_iterations", 0)],
)
def test_non_positive_values_rejected(field, value):
    with pytest.raises(ValidationError):
        CalculationSettings(**{field: value})


def test_settings_are_frozen():
    settings = CalculationSettings()
    with pytest.raises(ValidationError):
        settings.tolerance = 1.0


def test_unknown_setting_rejected():
    with pytest.raises(ValidationError):
        CalculationSettings(tolerence=0.1)
