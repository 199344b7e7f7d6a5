# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

import pytest

from capstack.core import (
    CapstackError,
    ConfigurationError,
    ContractViolation,
    InvariantViolation,
    WarningLog,
)
from capstack.core.primitives import ErrorCodeEnum, PipelineStageEnum


def test_error_codes():
    """Each fatal error type carries its machine-readable code."""
    assert ConfigurationError("x").code == ErrorCodeEnum.CONFIGURATION_ERROR
    assert (
        InvariantViolation("x", expected=1.0, actual=2.0).code
        == ErrorCodeEnum.INVARIANT_VIOLATION
    )
    assert (
        ContractViolation("x", stage=PipelineStageEnum.CAPITAL).code
        == ErrorCodeEnum.CONTRACT_VIOLATION
    )


def test_error_hierarchy():
    assert issubclass(ConfigurationError, CapstackError)
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(InvariantViolation, RuntimeError)
    assert issubclass(ContractViolation, RuntimeError)


def test_str_includes_stage():
    error = ContractViolation("bad shape", stage=PipelineStageEnum.WATERFALL)
    assert str(error) == "[waterfall] bad shape"
    assert str(ConfigurationError("bad tranche")) == "bad tranche"


def test_invariant_violation_details():
    error = InvariantViolation(
        "drift", expected=100.0, actual=100.5, year_index=3, entity_id="lp"
    )
    assert error.details == {
        "expected": 100.0,
        "actual": 100.5,
        "difference": 0.5,
        "year_index": 3,
        "entity_id": "lp",
    }


def test_warning_log_records_and_logs(caplog):
    """Warnings are both collected and emitted through logging."""
    log = WarningLog(stage=PipelineStageEnum.CAPITAL)
    with caplog.at_level(logging.WARNING, logger="capstack"):
        warning = log.add("TEST_CODE", "something odd", year_index=2, magnitude=0.003)

    assert len(log) == 1
    assert warning.stage == PipelineStageEnum.CAPITAL
    assert warning.year_index == 2
    assert "TEST_CODE: something odd" in caplog.text


def test_warning_log_extend():
    first = WarningLog()
    first.add("A", "one")
    second = WarningLog()
    second.extend(first.records)
    assert [w.code for w in second.records] == ["A"]


def test_details_are_copied():
    details = {"tranche_id": "a"}
    error = ConfigurationError("x", details=details)
    details["tranche_id"] = "b"
    assert error.details["tranche_id"] == "a"


def test_raise_and_catch_as_base():
    with pytest.raises(CapstackError):
        raise ContractViolation("x", stage=PipelineStageEnum.UPSTREAM)
