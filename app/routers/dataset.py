"""Curated response dataset: read-only queries and admin maintenance."""

import os
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.dataset import (
    DatasetAddRequest,
    DatasetDeleteRequest,
    DatasetImportRequest,
    DatasetImportResponse,
    DatasetStats,
    DatasetStatsResponse,
    DatasetTestRequest,
    DatasetTestResponse,
    DatasetUpdateRequest,
    MatchPayload,
)
from app.services import dataset_service
from app.services.matcher_service import find_response

router = APIRouter(prefix="/api/dataset", tags=["dataset"])


def _require_admin_token(provided: Optional[str]) -> None:
    expected = os.environ.get("DATASET_ADMIN_TOKEN")
    if not expected:
        raise HTTPException(status_code=500, detail="DATASET_ADMIN_TOKEN not configured")
    if not provided or provided != expected:
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")


def require_admin(x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token")) -> None:
    _require_admin_token(x_admin_token)


# === PUBLIC ===


@router.get("/stats", response_model=DatasetStatsResponse)
def get_stats(db: Session = Depends(get_db)):
    return DatasetStatsResponse(stats=DatasetStats(**dataset_service.get_stats(db)))


@router.get("/categories")
def get_categories(db: Session = Depends(get_db)):
    return {"success": True, "categories": dataset_service.get_categories(db)}


@router.get("/category/{category_name}")
def get_category(category_name: str, db: Session = Depends(get_db)):
    return {
        "success": True,
        "category": category_name,
        "responses": dataset_service.get_category(db, category_name),
    }


@router.post("/test", response_model=DatasetTestResponse)
def test_message(request: DatasetTestRequest, db: Session = Depends(get_db)):
    """Run a message through the matcher without the AI stages."""
    if not request.message:
        raise HTTPException(status_code=400, detail="Message is required")

    match = find_response(db, request.message)
    payload = None
    if match:
        payload = MatchPayload(
            response=match.response,
            category=match.category,
            confidence=match.confidence,
            match_type=match.match_type,
            matched_key=match.matched_key,
            detected_language=match.detected_language,
            id=str(match.entry_id) if match.entry_id else None,
        )
    return DatasetTestResponse(query=request.message, match=payload, has_match=match is not None)


@router.get("/search")
def search(
    q: Optional[str] = None,
    limit: int = Query(default=dataset_service.SEARCH_DEFAULT_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")

    results = dataset_service.search_responses(db, q, limit)
    return {"success": True, "query": q, "results": results, "count": len(results)}


# === ADMIN ===


@router.post("/add", dependencies=[Depends(require_admin)])
def add_response(request: DatasetAddRequest, db: Session = Depends(get_db)):
    added = dataset_service.add_response(
        db,
        request.category,
        request.key,
        request.response,
        confidence=request.confidence,
        priority=request.priority,
        tags=request.tags,
    )
    if not added:
        raise HTTPException(status_code=400, detail="Failed to add response (may already exist)")

    return {
        "success": True,
        "message": "Response added successfully",
        "category": request.category,
        "key": request.key,
        "response": request.response,
    }


@router.put("/update", dependencies=[Depends(require_admin)])
def update_response(request: DatasetUpdateRequest, db: Session = Depends(get_db)):
    if not request.new_response.strip():
        raise HTTPException(status_code=400, detail="Category, key, and newResponse are required")

    if not dataset_service.update_response(db, request.category, request.key, request.new_response):
        raise HTTPException(status_code=404, detail="Response not found")

    return {
        "success": True,
        "message": "Response updated successfully",
        "category": request.category,
        "key": request.key,
        "newResponse": request.new_response,
    }


@router.delete("/delete", dependencies=[Depends(require_admin)])
def delete_response(request: DatasetDeleteRequest, db: Session = Depends(get_db)):
    if not dataset_service.delete_response(db, request.category, request.key):
        raise HTTPException(status_code=404, detail="Response not found")

    return {
        "success": True,
        "message": "Response deleted successfully",
        "category": request.category,
        "key": request.key,
    }


@router.post(
    "/import",
    response_model=DatasetImportResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def import_responses(request: DatasetImportRequest, db: Session = Depends(get_db)):
    summary = dataset_service.bulk_import(db, request.responses)
    return DatasetImportResponse(
        message=f"Import completed: {summary['success_count']} successful, {summary['error_count']} failed",
        success_count=summary["success_count"],
        error_count=summary["error_count"],
        errors=summary["errors"] or None,
    )
