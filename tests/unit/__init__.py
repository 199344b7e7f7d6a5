# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Capstack components.

This package contains isolated tests that exercise one engine or building
block at a time.
"""
