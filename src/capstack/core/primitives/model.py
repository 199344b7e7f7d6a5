# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Configuration and result records are immutable once built. Mutable
    runtime state (partner ledgers, warning logs) lives in plain objects
    created and discarded inside a single engine call.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,  # Immutable records; runtime state lives in external objects
        extra="forbid",  # Catches typos and missing field definitions immediately
    )
