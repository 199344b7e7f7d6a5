# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for covenant checks against annual debt KPIs.
"""

import pytest

from capstack.capital import DebtKpi
from capstack.core.primitives import CovenantTypeEnum, SeverityEnum
from capstack.debt import Covenant, check_covenants


def _kpis(dscr, ltv=None, senior_dscr=None):
    ltv = ltv or [None] * len(dscr)
    senior_dscr = senior_dscr or [None] * len(dscr)
    return [
        DebtKpi(year_index=i, dscr=d, ltv=l, senior_dscr=s)
        for i, (d, l, s) in enumerate(zip(dscr, ltv, senior_dscr))
    ]


class TestCheckCovenants:
    def test_no_breach(self):
        covenant = Covenant(id="dscr", type=CovenantTypeEnum.MIN_DSCR, threshold=1.2)
        assert check_covenants([covenant], _kpis([1.5, 1.3, 1.2])) == []

    def test_min_dscr_breach_is_critical_without_grace(self):
        covenant = Covenant(id="dscr", type=CovenantTypeEnum.MIN_DSCR, threshold=1.25)
        breaches = check_covenants([covenant], _kpis([1.5, 1.1, 1.4]))
        assert len(breaches) == 1
        breach = breaches[0]
        assert breach.year_index == 1
        assert breach.actual_value == pytest.approx(1.1)
        assert breach.severity == SeverityEnum.CRITICAL

    def test_grace_period_escalates(self):
        covenant = Covenant(
            id="dscr",
            type=CovenantTypeEnum.MIN_DSCR,
            threshold=1.25,
            grace_period_years=1,
        )
        breaches = check_covenants([covenant], _kpis([1.0, 1.0, 1.5, 1.0]))
        assert [(b.year_index, b.consecutive_years, b.severity) for b in breaches] == [
            (0, 1, SeverityEnum.WARNING),
            (1, 2, SeverityEnum.CRITICAL),
            (3, 1, SeverityEnum.WARNING),
        ]

    def test_max_ltv(self):
        covenant = Covenant(id="ltv", type=CovenantTypeEnum.MAX_LTV, threshold=0.65)
        breaches = check_covenants(
            [covenant], _kpis([2.0, 2.0], ltv=[0.70, 0.60])
        )
        assert [b.year_index for b in breaches] == [0]

    def test_senior_dscr(self):
        covenant = Covenant(
            id="senior", type=CovenantTypeEnum.MIN_SENIOR_DSCR, threshold=1.5
        )
        breaches = check_covenants(
            [covenant], _kpis([1.0, 1.0], senior_dscr=[1.6, 1.4])
        )
        assert [b.year_index for b in breaches] == [1]

    def test_undefined_ratio_is_not_tested(self):
        covenant = Covenant(id="dscr", type=CovenantTypeEnum.MIN_DSCR, threshold=1.25)
        assert check_covenants([covenant], _kpis([None, None])) == []

    def test_undefined_year_does_not_reset_streak(self):
        covenant = Covenant(
            id="dscr",
            type=CovenantTypeEnum.MIN_DSCR,
            threshold=1.25,
            grace_period_years=1,
        )
        breaches = check_covenants([covenant], _kpis([1.0, None, 1.0]))
        assert [b.severity for b in breaches] == [
            SeverityEnum.WARNING,
            SeverityEnum.CRITICAL,
        ]
