from app.services.language_service import detect_language
from app.services.matcher_service import MatchResult, find_response
from app.services.resolution_service import (
    FileAnalysisOutcome,
    ResolutionOutcome,
    analyze_file,
    resolve_message,
)
from app.services.similarity_service import calculate_similarity
