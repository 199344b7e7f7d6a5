# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Integration tests for Capstack components.

These tests run the pipeline end to end and check the identities that hold
across stage boundaries.
"""
