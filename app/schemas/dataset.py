from typing import Any, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class DatasetTestRequest(CamelModel):
    message: Optional[str] = None


class DatasetAddRequest(CamelModel):
    category: str
    key: str
    response: str
    tags: list[str] = []
    priority: int = 0
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class DatasetUpdateRequest(CamelModel):
    category: str
    key: str
    new_response: str


class DatasetDeleteRequest(CamelModel):
    category: str
    key: str


class DatasetImportRequest(CamelModel):
    responses: dict[str, Any]


class MatchPayload(CamelModel):
    response: str
    category: str
    confidence: float
    match_type: str
    matched_key: str
    detected_language: str
    id: Optional[str] = None


class DatasetTestResponse(CamelModel):
    success: bool = True
    query: str
    match: Optional[MatchPayload] = None
    has_match: bool


class DatasetStats(CamelModel):
    total_responses: int
    total_categories: int
    total_usage: int
    category_stats: dict[str, int]


class DatasetStatsResponse(CamelModel):
    success: bool = True
    stats: DatasetStats


class DatasetImportResponse(CamelModel):
    success: bool = True
    message: str
    success_count: int
    error_count: int
    errors: Optional[list[str]] = None
