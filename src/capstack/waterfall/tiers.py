# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Waterfall tier configuration.

Tiers are evaluated in declared order against each year's distributable
pool. The structural rules enforced by ``WaterfallConfig.validate_structure``:

- tier ids are unique
- at most one return_of_capital tier and at most one promote tier
- a promote tier, if present, is the last tier
- a preferred_return tier declares ``hurdle_irr``, or ``compound_pref`` with
  ``pref_rate``
- preferred_return and promote tiers carry non-negative split weights with a
  positive total, keyed by known partner ids
- catch-up requires a target split with a positive total
- clawback is only available on the promote tier
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from ..core.errors import ConfigurationError
from ..core.primitives import (
    ClawbackMethodEnum,
    ClawbackTriggerEnum,
    Model,
    PipelineStageEnum,
    TierTypeEnum,
)
from .equity import DEFAULT_OWNER, EquityClass


class ClawbackPolicy(Model):
    """When and how the promote is trued up against a hypothetical liquidation."""

    trigger: ClawbackTriggerEnum = ClawbackTriggerEnum.FINAL_PERIOD
    method: ClawbackMethodEnum = ClawbackMethodEnum.HYPOTHETICAL_LIQUIDATION


class WaterfallTier(Model):
    """
    One ordered waterfall rule.

    Examples:
        ```python
        roc = WaterfallTier(id="roc", type=TierTypeEnum.RETURN_OF_CAPITAL)

        pref = WaterfallTier(
            id="pref",
            type=TierTypeEnum.PREFERRED_RETURN,
            hurdle_irr=0.08,
            distribution_splits={"lp": 0.9, "gp": 0.1},
        )

        promote = WaterfallTier(
            id="promote",
            type=TierTypeEnum.PROMOTE,
            distribution_splits={"lp": 0.7, "gp": 0.3},
            enable_catch_up=True,
            catch_up_target_split={"lp": 0.8, "gp": 0.2},
            clawback=ClawbackPolicy(),
        )
        ```
    """

    id: str = Field(..., min_length=1)
    type: TierTypeEnum
    distribution_splits: Dict[str, float] = Field(
        default_factory=dict, description="Partner id -> split weight for this tier"
    )
    hurdle_irr: Optional[float] = Field(
        default=None, gt=-1.0, description="IRR each partner is brought up to"
    )
    compound_pref: bool = Field(
        default=False,
        description="Use an annually compounding pref account instead of an IRR hurdle",
    )
    pref_rate: Optional[float] = Field(default=None, ge=0)
    enable_catch_up: bool = False
    catch_up_target_split: Optional[Dict[str, float]] = None
    clawback: Optional[ClawbackPolicy] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_clawback(cls, data: Any) -> Any:
        """Fold flat ``enable_clawback`` / ``clawback_*`` fields into a policy."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        enabled = data.pop("enable_clawback", None)
        trigger = data.pop("clawback_trigger", None)
        method = data.pop("clawback_method", None)
        if enabled and data.get("clawback") is None:
            policy: Dict[str, Any] = {}
            if trigger is not None:
                policy["trigger"] = trigger
            if method is not None:
                policy["method"] = method
            data["clawback"] = policy
        return data

    @property
    def uses_compound_pref(self) -> bool:
        return self.type == TierTypeEnum.PREFERRED_RETURN and self.compound_pref


class WaterfallConfig(Model):
    """
    Equity classes plus the ordered tier list.

    An omitted or empty ``tiers`` list means a single pro-rata tier: capital
    calls by contribution %, distributions by distribution %. An empty
    ``equity_classes`` list means a single owner receiving everything.
    """

    equity_classes: List[EquityClass] = Field(default_factory=list)
    tiers: Optional[List[WaterfallTier]] = None

    @property
    def is_multi_tier(self) -> bool:
        return bool(self.tiers)

    @property
    def partner_ids(self) -> List[str]:
        return [c.id for c in self.resolved_classes()]

    def resolved_classes(self) -> List[EquityClass]:
        return list(self.equity_classes) or [DEFAULT_OWNER]

    def clawback_tier(self) -> Optional[WaterfallTier]:
        for tier in self.tiers or []:
            if tier.clawback is not None:
                return tier
        return None

    def referenced_partner_ids(self) -> List[str]:
        """Every partner id mentioned by any tier split or catch-up target."""
        seen: List[str] = []
        for tier in self.tiers or []:
            for key in list(tier.distribution_splits) + list(
                tier.catch_up_target_split or {}
            ):
                if key not in seen:
                    seen.append(key)
        return seen

    def validate_structure(self) -> None:
        """
        Check the equity classes and tier graph.

        Raises:
            ConfigurationError: on any structural problem listed in the
                module docstring, duplicate partner ids, or contribution
                percentages that sum to zero
        """
        classes = self.resolved_classes()
        ids = [c.id for c in classes]
        if len(set(ids)) != len(ids):
            self._fail("Duplicate equity class ids", partner_ids=ids)
        if sum(c.contribution_pct for c in classes) <= 0:
            self._fail("Equity class contribution percentages sum to zero")
        if not self.is_multi_tier and sum(
            c.effective_distribution_pct for c in classes
        ) <= 0:
            self._fail("Equity class distribution percentages sum to zero")

        tiers = self.tiers or []
        tier_ids = [t.id for t in tiers]
        if len(set(tier_ids)) != len(tier_ids):
            self._fail("Duplicate tier ids", tier_ids=tier_ids)

        kinds = [t.type for t in tiers]
        if kinds.count(TierTypeEnum.RETURN_OF_CAPITAL) > 1:
            self._fail("At most one return_of_capital tier is allowed")
        if kinds.count(TierTypeEnum.PROMOTE) > 1:
            self._fail("At most one promote tier is allowed")
        if TierTypeEnum.PROMOTE in kinds and kinds[-1] != TierTypeEnum.PROMOTE:
            self._fail("The promote tier must be the last tier")

        known = set(ids)
        for tier in tiers:
            self._validate_tier(tier, known)

    def _validate_tier(self, tier: WaterfallTier, known: set) -> None:
        prefix = f"Tier '{tier.id}'"
        if tier.type == TierTypeEnum.PREFERRED_RETURN:
            if tier.compound_pref and tier.pref_rate is None:
                self._fail(f"{prefix}: compound_pref requires pref_rate", tier_id=tier.id)
            if not tier.compound_pref and tier.hurdle_irr is None:
                self._fail(f"{prefix}: preferred_return requires hurdle_irr", tier_id=tier.id)

        if tier.type != TierTypeEnum.RETURN_OF_CAPITAL:
            self._validate_weights(
                tier.id, "distribution_splits", tier.distribution_splits, known
            )

        if tier.enable_catch_up:
            if tier.type != TierTypeEnum.PROMOTE:
                self._fail(f"{prefix}: catch-up is only available on promote", tier_id=tier.id)
            if not tier.catch_up_target_split:
                self._fail(f"{prefix}: catch-up requires catch_up_target_split", tier_id=tier.id)
            self._validate_weights(
                tier.id, "catch_up_target_split", tier.catch_up_target_split, known
            )

        if tier.clawback is not None and tier.type != TierTypeEnum.PROMOTE:
            self._fail(f"{prefix}: clawback is only available on promote", tier_id=tier.id)

    def _validate_weights(
        self, tier_id: str, name: str, weights: Dict[str, float], known: set
    ) -> None:
        prefix = f"Tier '{tier_id}': {name}"
        unknown = sorted(set(weights) - known)
        if unknown:
            self._fail(
                f"{prefix} references unknown partners {unknown}",
                tier_id=tier_id,
                unknown_partner_ids=unknown,
            )
        if any(w < 0 for w in weights.values()):
            self._fail(f"{prefix} has negative weights", tier_id=tier_id)
        if sum(weights.values()) <= 0:
            self._fail(f"{prefix} must have a positive total", tier_id=tier_id)

    @staticmethod
    def _fail(message: str, **details: Any) -> None:
        raise ConfigurationError(
            message, stage=PipelineStageEnum.WATERFALL, details=details
        )
