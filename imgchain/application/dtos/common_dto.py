"""Common DTOs for API responses and the operation catalog."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from imgchain.domain.entities.processing_step import ProcessingParams
from imgchain.domain.services.operation_catalog import FIELD_SCHEMAS, OperationSpec


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: str = Field(..., description="Error message describing what went wrong")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Health status", example="healthy")
    capability: str = Field(..., description="Image transform capability state", example="ready")
    opencv_version: Optional[str] = Field(None, description="Loaded OpenCV version", example="4.10.0")


class RootResponse(BaseModel):
    """Root endpoint response model."""
    status: str = Field(..., description="API status", example="ok")
    service: str = Field(..., description="Service name", example="imgchain-backend")
    version: str = Field(..., description="API version", example="0.1.0")


class ParameterInfo(BaseModel):
    """One parameter of an operation with its default and form hints."""
    name: str = Field(..., description="Snapshot field name", example="threshold")
    label: str = Field(..., description="Human readable label", example="Threshold")
    default: Any = Field(..., description="Default value", example=127)
    minimum: Optional[float] = Field(None, description="Suggested minimum", example=0)
    maximum: Optional[float] = Field(None, description="Suggested maximum", example=255)
    step: Optional[float] = Field(None, description="Suggested increment", example=1)
    size: Optional[int] = Field(None, description="Component count for vector parameters")


class OperationInfo(BaseModel):
    """Catalog entry of a processing operation."""
    id: str = Field(..., description="Operation identifier", example="Thresholding")
    name: str = Field(..., description="Enum name accepted as an alias", example="THRESHOLDING")
    grayscale: bool = Field(..., description="Whether the operation converts its input to luma first")
    description: str = Field("", description="What the operation does")
    parameters: list[ParameterInfo] = Field(default_factory=list, description="Parameters the operation reads")

    @classmethod
    def from_spec(cls, spec: OperationSpec) -> OperationInfo:
        defaults = ProcessingParams().to_dict()
        params = []
        for name in spec.fields:
            schema = FIELD_SCHEMAS[name]
            params.append(
                ParameterInfo(
                    name=name,
                    label=schema.label,
                    default=defaults[name],
                    minimum=schema.minimum,
                    maximum=schema.maximum,
                    step=schema.step,
                    size=schema.size,
                )
            )
        return cls(
            id=spec.id.value,
            name=spec.id.name,
            grayscale=spec.grayscale,
            description=spec.description,
            parameters=params,
        )


class OperationsResponse(BaseModel):
    """The full operation catalog."""
    operations: list[OperationInfo] = Field(..., description="Supported operations in menu order")
