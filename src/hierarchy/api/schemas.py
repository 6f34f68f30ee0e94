"""Pydantic request/response schemas for the category API."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from pydantic import BaseModel, Field

# --- Request Schemas ---


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Power Tools",
                    "description": "Corded and cordless drills, saws and sanders",
                    "parent_id": "5b0c7f4e-6d3a-4f5e-9c59-1f0d7a3e2b11",
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    parent_id: str | None = None


class UpdateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Cordless Power Tools",
                    "description": "Battery-powered drills and drivers",
                    "expected_version": 0,
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    expected_version: int | None = None


class MoveCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"new_parent_id": "9a1e2c3d-4b5f-4a6b-8c7d-0e1f2a3b4c5d"},
                {"new_parent_id": None},
            ]
        }
    }

    new_parent_id: str | None = None
    expected_version: int | None = None


# --- Response Schemas ---


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str
    parent_id: str | None = None
    level: int
    path: str
    children_count: int = 0
    product_count: int = 0
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_view(cls, view) -> CategoryResponse:
        return cls.model_validate(asdict(view))


class CategoryNodeResponse(BaseModel):
    category: CategoryResponse
    children: list[CategoryNodeResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node) -> CategoryNodeResponse:
        return cls.model_validate(asdict(node))


class CategoryHierarchyResponse(BaseModel):
    roots: list[CategoryNodeResponse]


class CategoryPathResponse(BaseModel):
    path: list[CategoryResponse]


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str | dict | list


CategoryNodeResponse.model_rebuild()
