# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the waterfall module.

Covers tier configuration, the tier evaluator, the hurdle solver, clawback
and the engine-level conservation checks.
"""
