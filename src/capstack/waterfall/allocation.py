# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Weight normalization and exact-sum pro-rata splits."""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np


def weights_for(partner_ids: Sequence[str], mapping: Mapping[str, float]) -> np.ndarray:
    """Weights aligned to ``partner_ids``; missing partners weigh zero."""
    return np.array([float(mapping.get(pid, 0.0)) for pid in partner_ids])


def normalize(weights: np.ndarray) -> np.ndarray:
    """Scale weights to sum to 1.0; an all-zero vector splits equally."""
    total = weights.sum()
    if abs(total) < 1e-10:
        return np.full(len(weights), 1.0 / len(weights))
    return weights / total


def split_pro_rata(amount: float, weights: np.ndarray) -> np.ndarray:
    """
    Split ``amount`` by ``weights`` so the shares sum to ``amount``.

    The largest-weight partner absorbs the floating-point remainder, so a
    zero-weight partner never receives a rounding residue. Zero shares are
    returned as +0.0 even when ``amount`` is negative.
    """
    shares = amount * normalize(weights)
    anchor = int(np.argmax(weights))
    shares[anchor] = amount - (shares.sum() - shares[anchor])
    return shares + 0.0
