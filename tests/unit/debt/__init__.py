# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the debt module.

Covers tranche definitions, amortization, aggregation and covenant checks.
"""
