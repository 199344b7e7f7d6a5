# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
End-to-end pipeline tests.

Each scenario runs upstream validation, the capital stage and the waterfall
stage, then checks the identities that must hold across the stage
boundaries rather than individual numbers.
"""

import pytest

from capstack.capital import (
    CapitalStructureConfig,
    CostOfCapitalAssumptions,
)
from capstack.core.primitives import (
    CalculationSettings,
    ClawbackTriggerEnum,
    CovenantTypeEnum,
)
from capstack.debt import Covenant, DebtTranche
from capstack.pipeline import run_pipeline
from capstack.waterfall import ClawbackPolicy, EquityClass, WaterfallConfig

from tests.conftest import (
    flat_inputs,
    lp_gp_classes,
    mortgage,
    series_inputs,
    standard_tiers,
)


def _full_stack_capital() -> CapitalStructureConfig:
    return CapitalStructureConfig(
        initial_investment=20_000_000,
        debt_tranches=[
            mortgage(
                "senior",
                principal=11_000_000,
                rate=0.055,
                term=7,
                amortization=30,
                io_years=2,
                origination_fee_pct=0.0075,
                exit_fee_pct=0.005,
            ),
            DebtTranche(
                id="mezz",
                amount=3_000_000,
                type="MEZZ",
                interest_rate=0.11,
                term_years=5,
                amortization_type="interest_only",
                refinance_at_year=3,
                refinance_amount_pct=0.6,
                exit_fee_pct=0.01,
            ),
        ],
        covenants=[
            Covenant(id="dscr", type=CovenantTypeEnum.MIN_DSCR, threshold=1.2),
            Covenant(id="ltv", type=CovenantTypeEnum.MAX_LTV, threshold=0.75),
        ],
    )


def _full_stack_waterfall(trigger=ClawbackTriggerEnum.FINAL_PERIOD) -> WaterfallConfig:
    return WaterfallConfig(
        equity_classes=lp_gp_classes(0.9, 0.1),
        tiers=standard_tiers(
            hurdle=0.08,
            promote_split={"lp": 0.7, "gp": 0.3},
            enable_catch_up=True,
            catch_up_target_split={"lp": 0.8, "gp": 0.2},
            clawback=ClawbackPolicy(trigger=trigger),
        ),
    )


@pytest.fixture
def full_stack_inputs():
    noi = [1_600_000, 1_700_000, 1_800_000, 1_900_000, 2_000_000, 2_100_000, 2_200_000]
    fcf = [n - 150_000 for n in noi]
    fcf[-1] += 26_000_000  # sale proceeds
    return series_inputs(fcf, noi)


class TestFullStack:
    def test_cross_stage_identities(self, full_stack_inputs):
        pnl, fcf = full_stack_inputs
        result = run_pipeline(
            pnl,
            fcf,
            _full_stack_capital(),
            _full_stack_waterfall(),
            cost_of_capital=CostOfCapitalAssumptions(cost_of_equity=0.14, tax_rate=0.21),
        )
        assert result.ok, getattr(result, "message", "")
        output = result.value
        capital, waterfall = output.capital, output.waterfall

        # Owner cash flow is the waterfall input, unchanged
        assert waterfall.owner_cash_flows == capital.owner_cash_flows

        # Every row conserves, and so does the whole series
        for row in waterfall.annual_rows:
            assert row.total_allocated == pytest.approx(row.owner_cash_flow, abs=0.01)
        partner_total = sum(p.cumulative_cash_flows[-1] for p in waterfall.partners)
        assert partner_total == pytest.approx(sum(capital.owner_cash_flows), abs=0.05)

        # Debt is fully repaid within the horizon
        for schedule in capital.tranche_schedules:
            assert schedule.total_principal == pytest.approx(schedule.initial_principal)
            assert schedule.final_balance == pytest.approx(0.0)

        # Equity check = investment − net proceeds + origination fees
        fees = 11_000_000 * 0.0075
        assert capital.owner_cash_flows[0] == pytest.approx(
            -(20_000_000 - (14_000_000 - fees)) - fees
        )
        assert capital.wacc is not None

    def test_refinanced_mezz_leaves_remainder(self, full_stack_inputs):
        pnl, fcf = full_stack_inputs
        result = run_pipeline(pnl, fcf, _full_stack_capital(), _full_stack_waterfall())
        mezz = result.value.capital.tranche_schedules[1]
        assert mezz.entries[3].principal == pytest.approx(1_800_000)
        assert mezz.entries[4].beginning_balance == pytest.approx(1_200_000)
        assert mezz.exit_fee_by_year[3] == pytest.approx(30_000)
        assert mezz.exit_fee_by_year[4] == pytest.approx(12_000)

    def test_lp_irr_and_gp_share(self, full_stack_inputs):
        pnl, fcf = full_stack_inputs
        result = run_pipeline(pnl, fcf, _full_stack_capital(), _full_stack_waterfall())
        partners = result.value.partner_results
        lp, gp = partners["lp"], partners["gp"]
        assert lp.irr is not None and gp.irr is not None
        # The sponsor's promote lifts its return above the investor's
        assert gp.irr > lp.irr
        assert lp.moic > 1.0

    def test_annual_clawback_keeps_rows_balanced(self, full_stack_inputs):
        pnl, fcf = full_stack_inputs
        result = run_pipeline(
            pnl,
            fcf,
            _full_stack_capital(),
            _full_stack_waterfall(ClawbackTriggerEnum.ANNUAL),
        )
        assert result.ok
        for row in result.value.waterfall.annual_rows:
            if row.clawback_adjustments:
                assert sum(row.clawback_adjustments.values()) == pytest.approx(
                    0.0, abs=1e-6
                )

    def test_monthly_outputs(self, full_stack_inputs):
        pnl, fcf = full_stack_inputs
        result = run_pipeline(
            pnl,
            fcf,
            _full_stack_capital(),
            _full_stack_waterfall(),
            settings=CalculationSettings(include_monthly=True),
        )
        capital = result.value.capital
        assert len(capital.monthly_debt_schedule) == 7 * 12
        monthly_principal = sum(e.principal for e in capital.monthly_debt_schedule)
        assert monthly_principal == pytest.approx(14_000_000)


class TestDegenerateStructures:
    def test_all_equity_single_owner(self):
        pnl, fcf = flat_inputs(5, 400_000)
        result = run_pipeline(
            pnl,
            fcf,
            CapitalStructureConfig(initial_investment=3_000_000),
            WaterfallConfig(),
        )
        owner = result.value.partner_results["owner"]
        assert owner.cash_flows == [-3_000_000] + [400_000] * 5
        assert owner.irr < 0
        assert owner.moic == pytest.approx(2_000_000 / 3_000_000)
        assert all(k.dscr is None for k in result.value.debt_kpis)

    def test_pro_rata_partners_share_every_row(self):
        pnl, fcf = flat_inputs(4, 250_000)
        classes = [
            EquityClass(id="a", contribution_pct=3),
            EquityClass(id="b", contribution_pct=1),
        ]
        result = run_pipeline(
            pnl,
            fcf,
            CapitalStructureConfig(initial_investment=1_000_000),
            WaterfallConfig(equity_classes=classes),
        )
        for row in result.value.waterfall.annual_rows:
            a, b = row.partner_distributions["a"], row.partner_distributions["b"]
            assert a == pytest.approx(3 * b)
