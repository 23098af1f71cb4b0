from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.logging_config import get_logger
from app.models import DatasetEntry
from app.services.dataset_service import (
    find_exact_entry,
    find_general_candidates,
    find_language_candidates,
    increment_usage,
)
from app.services.language_service import detect_language, is_language_relevant
from app.services.similarity_service import calculate_similarity

logger = get_logger("matcher_service")

LANGUAGE_BOOST = 1.2
PARTIAL_MATCH_THRESHOLD = 0.5


@dataclass
class MatchResult:
    response: str
    category: str
    confidence: float
    match_type: str  # exact, partial
    matched_key: str
    detected_language: str
    entry_id: Optional[UUID] = None


def _unique_candidates(*groups: list[DatasetEntry]) -> list[DatasetEntry]:
    seen: set = set()
    unique: list[DatasetEntry] = []
    for group in groups:
        for entry in group:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            unique.append(entry)
    return unique


def score_candidate(message: str, entry: DatasetEntry, language: str) -> float:
    """Similarity of the message to the entry key, boosted for language-relevant entries."""
    score = calculate_similarity(message, entry.key)
    if is_language_relevant(entry.category, entry.tags, language):
        score *= LANGUAGE_BOOST
    return score


def select_best_candidate(
    message: str, candidates: list[DatasetEntry], language: str
) -> tuple[Optional[DatasetEntry], float]:
    """Highest-scoring candidate above the partial threshold. Earlier candidates win ties."""
    best_entry = None
    best_score = 0.0
    for entry in candidates:
        score = score_candidate(message, entry, language)
        if score > best_score and score > PARTIAL_MATCH_THRESHOLD:
            best_entry = entry
            best_score = score
    return best_entry, best_score


def find_response(db: Session, user_message: str) -> Optional[MatchResult]:
    """
    Look the message up in the curated dataset.

    An exact key match short-circuits with confidence 1.0. Otherwise
    language-biased and general candidates containing the message are
    scored and the best one above the threshold is returned as a partial
    match. The winning entry's usage counter is incremented.

    Store errors are logged and reported as no match.
    """
    message = (user_message or "").lower().strip()
    if not message:
        return None

    detected_language = detect_language(message)
    logger.debug(f"Detected language: {detected_language} for message: '{message[:50]}'")

    try:
        exact = find_exact_entry(db, message)
        if exact:
            result = MatchResult(
                response=exact.response,
                category=exact.category,
                confidence=1.0,
                match_type="exact",
                matched_key=exact.key,
                detected_language=detected_language,
                entry_id=exact.id,
            )
            increment_usage(db, exact.id)
            return result

        language_matches = find_language_candidates(db, message, detected_language)
        general_matches = find_general_candidates(db, message)
        candidates = _unique_candidates(language_matches, general_matches)

        best_entry, best_score = select_best_candidate(message, candidates, detected_language)
        if not best_entry:
            return None

        result = MatchResult(
            response=best_entry.response,
            category=best_entry.category,
            confidence=min(best_score, 1.0),
            match_type="partial",
            matched_key=best_entry.key,
            detected_language=detected_language,
            entry_id=best_entry.id,
        )
        increment_usage(db, best_entry.id)
        return result

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error finding dataset response: {e}", exc_info=True)
        return None
