# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..core.primitives import Model


class EquityClass(Model):
    """
    One equity partner (or class of partners) in the waterfall.

    ``contribution_pct`` apportions capital calls; ``distribution_pct``
    apportions pro-rata distributions and falls back to ``contribution_pct``.
    Percentages are normalized across classes, so weights such as 90/10 and
    0.9/0.1 are equivalent.

    Example:
        ```python
        lp = EquityClass(id="lp", name="Investor", contribution_pct=0.9)
        gp = EquityClass(id="gp", name="Sponsor", contribution_pct=0.1)
        ```
    """

    id: str = Field(..., min_length=1, description="Unique partner identifier")
    name: str = Field(default="", description="Display name")
    contribution_pct: float = Field(..., ge=0, description="Share of capital calls")
    distribution_pct: Optional[float] = Field(
        default=None, ge=0, description="Share of pro-rata distributions"
    )

    @property
    def effective_distribution_pct(self) -> float:
        if self.distribution_pct is None:
            return self.contribution_pct
        return self.distribution_pct


DEFAULT_OWNER = EquityClass(
    id="owner", name="Owner", contribution_pct=1.0, distribution_pct=1.0
)
