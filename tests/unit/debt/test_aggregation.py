# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for DebtAggregator: project-level totals, DSCR and monthly sums.
"""

import numpy as np
import pytest

from capstack.core.primitives import AmortizationTypeEnum, SeniorityEnum
from capstack.debt import DebtAggregator, DebtTranche, TrancheAmortizer

from tests.conftest import mortgage


def _schedules(tranches, horizon):
    return [TrancheAmortizer(t).annual_schedule(horizon) for t in tranches]


class TestAggregate:
    def test_refinanced_tranche_drops_out(self, example_b_capital):
        schedules = _schedules(example_b_capital.debt_tranches, 5)
        aggregate = DebtAggregator(schedules, 5).aggregate()
        senior, mezz = schedules

        assert mezz.entries[3].beginning_balance == 0.0
        assert aggregate.entries[3].beginning_balance == pytest.approx(
            senior.entries[3].beginning_balance
        )
        assert aggregate.entries[2].principal == pytest.approx(
            senior.entries[2].principal + 2_000_000
        )

    def test_columns_sum_across_tranches(self, example_b_capital):
        schedules = _schedules(example_b_capital.debt_tranches, 5)
        aggregate = DebtAggregator(schedules, 5).aggregate()
        for name in ("beginning_balance", "interest", "principal", "ending_balance"):
            np.testing.assert_allclose(
                aggregate.column(name),
                sum(s.column(name) for s in schedules),
            )

    def test_funding_totals(self):
        tranches = [
            mortgage("a", principal=6_000_000, origination_fee_pct=0.01),
            mortgage("b", principal=2_000_000, origination_fee_pct=0.02),
        ]
        aggregate = DebtAggregator(_schedules(tranches, 5), 5).aggregate()
        assert aggregate.total_initial_principal == pytest.approx(8_000_000)
        assert aggregate.total_origination_fees == pytest.approx(100_000)
        assert aggregate.total_net_proceeds == pytest.approx(7_900_000)

    def test_exit_fees_in_debt_service(self):
        tranche = DebtTranche(
            id="io",
            initial_principal=1_000_000,
            interest_rate=0.05,
            term_years=3,
            amortization_type=AmortizationTypeEnum.INTEREST_ONLY,
            exit_fee_pct=0.01,
        )
        aggregate = DebtAggregator(_schedules([tranche], 3), 3).aggregate()
        final = aggregate.entries[2]
        assert final.exit_fees == pytest.approx(10_000)
        assert final.debt_service == pytest.approx(50_000 + 1_000_000 + 10_000)

    def test_no_tranches(self):
        aggregate = DebtAggregator([], 4).aggregate()
        assert len(aggregate.entries) == 4
        assert all(e.debt_service == 0.0 for e in aggregate.entries)

    def test_to_dataframe(self, example_b_capital):
        schedules = _schedules(example_b_capital.debt_tranches, 5)
        df = DebtAggregator(schedules, 5).aggregate().to_dataframe()
        assert df.index.name == "year_index"
        assert "debt_service" in df.columns
        assert len(df) == 5


class TestCoverage:
    def test_senior_debt_service_excludes_mezzanine(self, example_b_capital):
        schedules = _schedules(example_b_capital.debt_tranches, 5)
        aggregator = DebtAggregator(schedules, 5)
        senior = schedules[0]
        np.testing.assert_allclose(
            aggregator.senior_debt_service(),
            senior.column("interest") + senior.column("principal"),
        )
        assert schedules[1].seniority == SeniorityEnum.MEZZANINE

    def test_project_and_senior_dscr(self, example_b_capital):
        schedules = _schedules(example_b_capital.debt_tranches, 5)
        aggregator = DebtAggregator(schedules, 5)
        noi = [1_000_000] * 5

        project = aggregator.project_dscr(noi)
        senior = aggregator.senior_dscr(noi)

        # year 0: senior 360k interest + 240k principal, mezz 200k interest
        assert project[0] == pytest.approx(1_000_000 / 800_000)
        assert senior[0] == pytest.approx(1_000_000 / 600_000)
        assert all(s >= p for s, p in zip(senior, project))

    def test_dscr_is_none_without_debt_service(self):
        aggregator = DebtAggregator([], 3)
        assert aggregator.project_dscr([100.0, 100.0, 100.0]) == [None, None, None]

    def test_dscr_is_none_for_non_positive_noi(self, example_a_tranche):
        aggregator = DebtAggregator(_schedules([example_a_tranche], 5), 5)
        dscr = aggregator.project_dscr([0.0, -5.0, 3_000_000, 3_000_000, 3_000_000])
        assert dscr[0] is None
        assert dscr[1] is None
        assert dscr[2] == pytest.approx(3_000_000 / (2_000_000 + 480_000))


class TestMonthlyAggregation:
    def test_monthly_totals(self, example_b_capital):
        monthly = [
            TrancheAmortizer(t).monthly_schedule(2)
            for t in example_b_capital.debt_tranches
        ]
        entries = DebtAggregator.aggregate_monthly(monthly, 2)
        assert len(entries) == 24
        assert entries[13].year_index == 1
        assert entries[13].month_index == 1
        assert entries[0].beginning_balance == pytest.approx(8_000_000)
        assert entries[0].interest == pytest.approx(6_000_000 * 0.005 + 2_000_000 * 0.10 / 12)
        assert entries[0].senior_debt_service == pytest.approx(
            monthly[0].entries[0].debt_service
        )
