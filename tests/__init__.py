# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capstack test suite.

This package contains unit tests for each engine and integration tests that
run the full capital and waterfall pipeline.
"""
