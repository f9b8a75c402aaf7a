"""Schemas subpackage — Pydantic request/response models."""

from mapframe.schemas.viewport import (
    ExtentModel,
    FullExtentResponse,
    OutputSize,
    PixelBatchRequest,
    PixelBatchResponse,
    PixelTransformModel,
    PointModel,
    RenderFlagsModel,
    SourceOut,
    TransformPointRequest,
    TransformPointResponse,
    ViewportInputs,
    ViewportState,
)

__all__ = [
    "ExtentModel",
    "FullExtentResponse",
    "OutputSize",
    "PixelBatchRequest",
    "PixelBatchResponse",
    "PixelTransformModel",
    "PointModel",
    "RenderFlagsModel",
    "SourceOut",
    "TransformPointRequest",
    "TransformPointResponse",
    "ViewportInputs",
    "ViewportState",
]
