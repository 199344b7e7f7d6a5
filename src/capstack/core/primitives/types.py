# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Constrained numeric types shared by configuration models."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

PositiveFloat = Annotated[float, Field(ge=0)]
PositiveInt = Annotated[int, Field(ge=0)]
FloatBetween0And1 = Annotated[float, Field(ge=0, le=1)]
StrictlyPositiveInt = Annotated[int, Field(gt=0)]
