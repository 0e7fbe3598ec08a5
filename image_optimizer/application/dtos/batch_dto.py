from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from image_optimizer.application.dtos.optimization_dto import (
    OptimizationFailure,
    OptimizationResult,
)


class BatchItem(BaseModel):
    """One file to optimize in a batch."""

    path: str = Field(..., description="Path of the image file", examples=["uploads/2024/photo.jpg"])
    identifier: str = Field(..., description="Logical image identifier", examples=["42"])


class BatchItemResult(BaseModel):
    """Per-item outcome: exactly one of ``result`` / ``error`` is set."""

    path: str
    identifier: str
    result: Optional[OptimizationResult] = None
    error: Optional[OptimizationFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchOptimizeResponse(BaseModel):
    """Aggregate outcome of a batch run."""

    items: list[BatchItemResult] = Field(default_factory=list, description="Outcomes in input order")
    aborted: bool = Field(False, description="True when a fatal error stopped further submissions")
    skipped: list[BatchItem] = Field(default_factory=list, description="Items never started because of the abort")

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if not item.ok)

    @property
    def total_savings(self) -> int:
        return sum(item.result.savings for item in self.items if item.result is not None)
