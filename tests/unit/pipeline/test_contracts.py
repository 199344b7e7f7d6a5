# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for PipelineContractValidator stage hand-off checks.
"""

import pytest

from capstack.capital import (
    CapitalEngine,
    CapitalStructureConfig,
    UnleveredFcf,
)
from capstack.core.errors import ContractViolation, InvariantViolation
from capstack.core.primitives import PipelineStageEnum
from capstack.pipeline import PipelineContractValidator
from capstack.waterfall import EquityClass, WaterfallConfig, WaterfallEngine

from tests.conftest import flat_inputs, lp_gp_classes, standard_tiers


@pytest.fixture
def validator() -> PipelineContractValidator:
    return PipelineContractValidator()


@pytest.fixture
def capital_run(example_b_capital):
    pnl, fcf = flat_inputs(5, 1_500_000)
    return CapitalEngine(example_b_capital).run(fcf, pnl)


class TestUpstream:
    def test_returns_horizon(self, validator):
        pnl, fcf = flat_inputs(6, 100.0)
        assert validator.check_upstream(pnl, fcf) == 6

    def test_empty_series(self, validator):
        with pytest.raises(ContractViolation, match="empty") as exc:
            validator.check_upstream([], [])
        assert exc.value.stage == PipelineStageEnum.UPSTREAM

    def test_length_mismatch(self, validator):
        pnl, _ = flat_inputs(4, 100.0)
        _, fcf = flat_inputs(5, 100.0)
        with pytest.raises(ContractViolation, match="4 entries, expected 5"):
            validator.check_upstream(pnl, fcf)

    def test_gap_in_year_indices(self, validator):
        pnl, _ = flat_inputs(3, 100.0)
        fcf = [
            UnleveredFcf(year_index=i, unlevered_free_cash_flow=100.0) for i in (0, 1, 3)
        ]
        with pytest.raises(ContractViolation) as exc:
            validator.check_upstream(pnl, fcf)
        assert exc.value.details["missing_year_indices"] == [2]


class TestCapital:
    def test_valid_output(self, validator, capital_run, example_b_capital):
        validator.check_capital(capital_run, example_b_capital, 5)

    def test_owner_cash_flow_length(self, validator, capital_run, example_b_capital):
        broken = capital_run.model_copy(
            update={"owner_cash_flows": capital_run.owner_cash_flows[:-1]}
        )
        with pytest.raises(ContractViolation, match="owner cash flow") as exc:
            validator.check_capital(broken, example_b_capital, 5)
        assert exc.value.stage == PipelineStageEnum.CAPITAL

    def test_unknown_tranche(self, validator, capital_run):
        with pytest.raises(ContractViolation, match="unknown tranche"):
            validator.check_capital(
                capital_run, CapitalStructureConfig(initial_investment=1.0), 5
            )

    def test_horizon_mismatch(self, validator, capital_run, example_b_capital):
        with pytest.raises(ContractViolation, match="levered FCF"):
            validator.check_capital(capital_run, example_b_capital, 6)

    def test_debt_conservation_rechecked(self, validator, capital_run, example_b_capital):
        senior = capital_run.tranche_schedules[0]
        tampered = senior.model_copy(update={"initial_principal": 7_000_000})
        broken = capital_run.model_copy(
            update={"tranche_schedules": [tampered, capital_run.tranche_schedules[1]]}
        )
        with pytest.raises(InvariantViolation) as exc:
            validator.check_capital(broken, example_b_capital, 5)
        assert exc.value.entity_id == "senior"


class TestWaterfall:
    def test_unknown_partner_in_tiers(self, validator):
        config = WaterfallConfig(
            equity_classes=lp_gp_classes(),
            tiers=standard_tiers(promote_split={"lp": 0.7, "sponsor": 0.3}),
        )
        with pytest.raises(ContractViolation, match="unknown partners") as exc:
            validator.check_waterfall_config(config)
        assert exc.value.details["unknown_partner_ids"] == ["sponsor"]

    def test_valid_output(self, validator, example_c_config, example_c_flows):
        result = WaterfallEngine(example_c_config).evaluate(example_c_flows)
        validator.check_waterfall(result, example_c_config, 4)

    def test_row_count(self, validator, example_c_config, example_c_flows):
        result = WaterfallEngine(example_c_config).evaluate(example_c_flows)
        with pytest.raises(ContractViolation, match="waterfall rows"):
            validator.check_waterfall(result, example_c_config, 5)

    def test_partner_mismatch(self, validator, example_c_config, example_c_flows):
        result = WaterfallEngine(example_c_config).evaluate(example_c_flows)
        other = WaterfallConfig(
            equity_classes=[EquityClass(id="lp", contribution_pct=1.0)]
        )
        with pytest.raises(ContractViolation, match="do not match"):
            validator.check_waterfall(result, other, 4)

    def test_row_conservation(self, validator, example_c_config, example_c_flows):
        result = WaterfallEngine(example_c_config).evaluate(example_c_flows)
        row = result.annual_rows[2]
        tampered = row.model_copy(
            update={"partner_distributions": {"lp": 150_000.0, "gp": 0.0}}
        )
        rows = list(result.annual_rows)
        rows[2] = tampered
        broken = result.model_copy(update={"annual_rows": rows})
        with pytest.raises(InvariantViolation) as exc:
            validator.check_waterfall(broken, example_c_config, 4)
        assert exc.value.year_index == 2
