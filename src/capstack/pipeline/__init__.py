# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .contracts import PipelineContractValidator
from .orchestrator import run_pipeline, run_pipeline_strict
from .results import (
    AuditRecord,
    PipelineFailure,
    PipelineOutput,
    PipelineResult,
    PipelineSuccess,
)

__all__ = [
    "PipelineContractValidator",
    "run_pipeline",
    "run_pipeline_strict",
    "AuditRecord",
    "PipelineFailure",
    "PipelineOutput",
    "PipelineResult",
    "PipelineSuccess",
]
