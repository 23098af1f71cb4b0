from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.logging_config import get_logger
from app.models import DatasetEntry
from app.services.language_service import CROSS_LANGUAGE_CATEGORIES, get_default_fallback

logger = get_logger("dataset_service")

LANGUAGE_CANDIDATE_LIMIT = 15
GENERAL_CANDIDATE_LIMIT = 20
SEARCH_DEFAULT_LIMIT = 20

FALLBACK_CATEGORY = "fallback"
FALLBACK_DEFAULT_KEY = "default"
GENERIC_FALLBACK_RESPONSE = "I don't have an answer for that right now."


def _clean(value: str) -> str:
    return (value or "").strip().lower()


def _ranked(query: Query) -> Query:
    return query.order_by(DatasetEntry.priority.desc(), DatasetEntry.confidence.desc())


def _matches_text(message: str):
    """Key or response contains the message, case-insensitively and without wildcards."""
    return or_(
        DatasetEntry.key.icontains(message, autoescape=True),
        DatasetEntry.response.icontains(message, autoescape=True),
    )


# === LOOKUPS USED BY THE MATCHER ===


def find_exact_entry(db: Session, key: str) -> Optional[DatasetEntry]:
    """Best-ranked active entry whose key equals the message."""
    return _ranked(db.query(DatasetEntry).filter(DatasetEntry.key == key, DatasetEntry.is_active.is_(True))).first()


def find_language_candidates(
    db: Session,
    message: str,
    language: str,
    limit: int = LANGUAGE_CANDIDATE_LIMIT,
) -> list[DatasetEntry]:
    """Active entries for the language (or cross-language categories) containing the message."""
    language_filter = or_(
        DatasetEntry.category == language,
        DatasetEntry.category.in_(sorted(CROSS_LANGUAGE_CATEGORIES)),
        cast(DatasetEntry.tags, String).like(f'%"{language}"%'),
    )
    query = db.query(DatasetEntry).filter(
        DatasetEntry.is_active.is_(True),
        language_filter,
        _matches_text(message),
    )
    return _ranked(query).limit(limit).all()


def find_general_candidates(db: Session, message: str, limit: int = GENERAL_CANDIDATE_LIMIT) -> list[DatasetEntry]:
    """Active entries containing the message, regardless of language."""
    query = db.query(DatasetEntry).filter(DatasetEntry.is_active.is_(True), _matches_text(message))
    return _ranked(query).limit(limit).all()


def increment_usage(db: Session, entry_id: UUID) -> None:
    """Bump usage counter for an entry. Failures are logged and dropped."""
    try:
        db.query(DatasetEntry).filter(DatasetEntry.id == entry_id).update(
            {
                DatasetEntry.usage_count: DatasetEntry.usage_count + 1,
                DatasetEntry.last_used_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Usage increment failed for {entry_id}: {e}")


def get_fallback_response(db: Session, language: str = "english") -> str:
    """Stored fallback/default override, else the built-in message for the language."""
    try:
        override = (
            db.query(DatasetEntry)
            .filter(
                DatasetEntry.category == FALLBACK_CATEGORY,
                DatasetEntry.key == FALLBACK_DEFAULT_KEY,
                DatasetEntry.is_active.is_(True),
            )
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error getting fallback: {e}")
        return GENERIC_FALLBACK_RESPONSE

    if override:
        return override.response
    return get_default_fallback(language)


# === ADMINISTRATION ===


def add_response(
    db: Session,
    category: str,
    key: str,
    response: str,
    created_by: Optional[str] = None,
    confidence: float = 1.0,
    priority: int = 0,
    tags: Optional[list[str]] = None,
) -> bool:
    """Create an entry. Returns False if (category, key) is already taken, even by a deleted row."""
    category = _clean(category)
    key = _clean(key)
    response = (response or "").strip()
    if not category or not key or not response:
        return False

    existing = db.query(DatasetEntry).filter(DatasetEntry.category == category, DatasetEntry.key == key).first()
    if existing:
        logger.info(f"Duplicate dataset key: {category}/{key} already exists")
        return False

    now = datetime.now(timezone.utc)
    entry = DatasetEntry(
        category=category,
        key=key,
        response=response,
        is_active=True,
        created_by=created_by,
        usage_count=0,
        confidence=confidence,
        priority=priority,
        tags=[_clean(tag) for tag in (tags or []) if _clean(tag)],
        created_at=now,
        updated_at=now,
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Duplicate dataset key: {category}/{key} already exists")
        return False

    logger.info("Added dataset response", extra={"context": {"category": category, "key": key}})
    return True


def _find_active(db: Session, category: str, key: str) -> Optional[DatasetEntry]:
    return (
        db.query(DatasetEntry)
        .filter(
            DatasetEntry.category == _clean(category),
            DatasetEntry.key == _clean(key),
            DatasetEntry.is_active.is_(True),
        )
        .first()
    )


def update_response(db: Session, category: str, key: str, new_response: str) -> bool:
    entry = _find_active(db, category, key)
    if not entry:
        return False

    entry.response = new_response.strip()
    entry.updated_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("Updated dataset response", extra={"context": {"category": entry.category, "key": entry.key}})
    return True


def delete_response(db: Session, category: str, key: str) -> bool:
    """Soft delete: the row stays, so its (category, key) cannot be reused."""
    entry = _find_active(db, category, key)
    if not entry:
        return False

    entry.is_active = False
    entry.updated_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("Deactivated dataset response", extra={"context": {"category": entry.category, "key": entry.key}})
    return True


def get_category(db: Session, category: str) -> dict[str, str]:
    entries = (
        db.query(DatasetEntry)
        .filter(DatasetEntry.category == _clean(category), DatasetEntry.is_active.is_(True))
        .order_by(DatasetEntry.key.asc())
        .all()
    )
    return {entry.key: entry.response for entry in entries}


def get_categories(db: Session) -> list[str]:
    rows = (
        db.query(DatasetEntry.category)
        .filter(DatasetEntry.is_active.is_(True), DatasetEntry.category != FALLBACK_CATEGORY)
        .distinct()
        .order_by(DatasetEntry.category.asc())
        .all()
    )
    return [row[0] for row in rows]


def get_stats(db: Session) -> dict:
    rows = (
        db.query(
            DatasetEntry.category,
            func.count(DatasetEntry.id),
            func.coalesce(func.sum(DatasetEntry.usage_count), 0),
        )
        .filter(DatasetEntry.is_active.is_(True))
        .group_by(DatasetEntry.category)
        .all()
    )

    category_stats = {category: int(count) for category, count, _ in rows}
    return {
        "total_responses": sum(category_stats.values()),
        "total_categories": len(category_stats),
        "total_usage": sum(int(usage) for _, _, usage in rows),
        "category_stats": category_stats,
    }


def bulk_import(db: Session, responses: dict, created_by: Optional[str] = None) -> dict:
    """Import a {category: {key: response}} mapping. Duplicates are counted as errors."""
    success_count = 0
    error_count = 0
    errors: list[str] = []

    for category, category_responses in responses.items():
        if not isinstance(category_responses, dict):
            error_count += 1
            errors.append(f"Invalid category {category}: expected an object of responses")
            continue

        for key, response in category_responses.items():
            if not isinstance(response, str):
                error_count += 1
                errors.append(f"Invalid response for {category}/{key}")
                continue

            if add_response(db, category, key, response, created_by=created_by):
                success_count += 1
            else:
                error_count += 1
                errors.append(f"Failed to add: {category}/{key}")

    logger.info(
        "Bulk import finished",
        extra={"context": {"success_count": success_count, "error_count": error_count}},
    )
    return {"success_count": success_count, "error_count": error_count, "errors": errors}


def search_responses(db: Session, term: str, limit: int = SEARCH_DEFAULT_LIMIT) -> list[dict]:
    entries = (
        db.query(DatasetEntry)
        .filter(DatasetEntry.is_active.is_(True), _matches_text(term))
        .limit(limit)
        .all()
    )
    return [
        {
            "id": str(entry.id),
            "category": entry.category,
            "key": entry.key,
            "response": entry.response,
            "usage": entry.usage_count or 0,
            "confidence": entry.confidence,
        }
        for entry in entries
    ]
