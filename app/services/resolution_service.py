"""
Decide where the answer to a chat message comes from.

Stages, first success wins:
1. curated dataset, high confidence
2. Gemini completion, with retry on 500/503
3. backup phrase mapping
4. curated dataset, low confidence, with a disclaimer
5. localized "I don't know" message
"""

import os
from dataclasses import dataclass, field
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from app.logging_config import StageLogger, get_logger
from app.services import backup_service
from app.services.dataset_service import get_fallback_response
from app.services.file_service import ExtractedFile
from app.services.language_service import detect_language, get_language_instruction, get_partial_match_note
from app.services.llm import GeminiProvider, LLMProvider, LLMResponse
from app.services.matcher_service import MatchResult, find_response
from app.services.result import Result
from app.services.retry import CHAT_RETRY_POLICY, FILE_RETRY_POLICY, RetryPolicy, call_with_retry

logger = get_logger("resolution_service")

GEMINI_API_URL = os.environ.get(
    "GEMINI_API_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent",
)
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_TIMEOUT_SECONDS = float(os.environ.get("GEMINI_TIMEOUT_SECONDS", "30"))

HIGH_CONFIDENCE_THRESHOLD = 0.6
LOW_CONFIDENCE_THRESHOLD = 0.3

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1000
FILE_TEMPERATURE = 0.7
FILE_MAX_TOKENS = 2000
FILE_EXCERPT_CHARS = 1000

SOURCE_DATASET = "custom-dataset"
SOURCE_GEMINI = "gemini"
SOURCE_BACKUP = "backup"
SOURCE_DATASET_FALLBACK = "custom-dataset-fallback"
SOURCE_FINAL_FALLBACK = "final-fallback"
SOURCE_FILE_FALLBACK = "fallback"


@dataclass
class ResolutionOutcome:
    response: str
    source: str
    detected_language: Optional[str] = None
    category: Optional[str] = None
    confidence: Optional[float] = None
    match_type: Optional[str] = None


@dataclass
class FileAnalysisOutcome:
    response: str
    source: str
    file_name: str
    file_type: str
    extracted_text_length: int
    additional_info: dict = field(default_factory=dict)


def get_llm_provider() -> Optional[LLMProvider]:
    if not GEMINI_API_KEY:
        return None
    return GeminiProvider(api_key=GEMINI_API_KEY, api_url=GEMINI_API_URL, timeout_seconds=GEMINI_TIMEOUT_SECONDS)


def build_chat_prompt(message: str, language: str) -> str:
    return f"{get_language_instruction(language)}\n\nUser question: {message}"


def request_completion(
    prompt: str,
    temperature: float,
    max_tokens: int,
    policy: RetryPolicy,
) -> Result[str]:
    """Call Gemini under the retry policy. Never raises."""
    llm = get_llm_provider()
    if llm is None:
        return Result.failure("Gemini API key not configured", "ai_not_configured")

    try:
        response: LLMResponse = call_with_retry(
            lambda: llm.generate(prompt, temperature=temperature, max_tokens=max_tokens),
            policy,
            status_of=lambda r: r.status_code,
            operation="gemini",
        )
    except httpx.HTTPError as e:
        logger.error(f"Gemini API unreachable: {e}")
        return Result.failure(str(e), "ai_unavailable")
    except ValueError as e:
        logger.error(f"Gemini API returned an unreadable body: {e}")
        return Result.failure(str(e), "ai_bad_response")

    if not response.ok:
        code = "ai_quota" if response.status_code == 429 else "ai_error"
        if code == "ai_quota":
            logger.warning("Gemini API quota exceeded")
        return Result.failure(response.error or "Unknown error", code, status_code=response.status_code)

    if not response.content:
        return Result.failure("Gemini returned no candidates", "ai_empty", status_code=response.status_code)

    return Result.success(response.content)


def _from_match(match: MatchResult, source: str, response: Optional[str] = None) -> ResolutionOutcome:
    return ResolutionOutcome(
        response=response if response is not None else match.response,
        source=source,
        detected_language=match.detected_language,
        category=match.category,
        confidence=match.confidence,
        match_type=match.match_type,
    )


def resolve_message(db: Session, message: str) -> ResolutionOutcome:
    """Run the resolution stages for one chat message. Always returns an outcome."""
    language = detect_language(message.lower().strip())
    stage_log = StageLogger(logger, {"language": language})

    # 1. Curated dataset, high confidence
    match = find_response(db, message)
    if match and match.confidence > HIGH_CONFIDENCE_THRESHOLD:
        stage_log.info(
            "Resolved from dataset",
            context={"stage": SOURCE_DATASET, "match_type": match.match_type, "confidence": match.confidence},
        )
        return _from_match(match, SOURCE_DATASET)

    # 2. Gemini
    completion = request_completion(
        build_chat_prompt(message, language),
        temperature=CHAT_TEMPERATURE,
        max_tokens=CHAT_MAX_TOKENS,
        policy=CHAT_RETRY_POLICY,
    )
    if completion.ok:
        stage_log.info("Resolved from Gemini", context={"stage": SOURCE_GEMINI})
        return ResolutionOutcome(response=completion.value, source=SOURCE_GEMINI, detected_language=language)
    stage_log.warning(
        "Gemini stage failed",
        context={"stage": SOURCE_GEMINI, "error_code": completion.error_code, "status": completion.status_code},
    )

    # 3. Backup mapping
    mapping = backup_service.fetch_backup_mapping()
    if mapping is not None:
        backup_text = backup_service.find_backup_response(mapping, message)
        stage_log.info("Resolved from backup API", context={"stage": SOURCE_BACKUP})
        return ResolutionOutcome(
            response=f"{backup_service.BACKUP_PREFIX}{backup_text}",
            source=SOURCE_BACKUP,
            detected_language=language,
        )

    # 4. Curated dataset, low confidence
    if match and match.confidence > LOW_CONFIDENCE_THRESHOLD:
        stage_log.info(
            "Using low-confidence dataset match",
            context={"stage": SOURCE_DATASET_FALLBACK, "confidence": round(match.confidence, 2)},
        )
        note = get_partial_match_note(match.detected_language)
        return _from_match(match, SOURCE_DATASET_FALLBACK, response=f"{match.response}{note}")

    # 5. Localized default
    stage_log.warning("All response methods failed, using final fallback", context={"stage": SOURCE_FINAL_FALLBACK})
    return ResolutionOutcome(
        response=get_fallback_response(db, language),
        source=SOURCE_FINAL_FALLBACK,
        detected_language=language,
    )


def build_file_prompt(extracted: ExtractedFile, custom_prompt: Optional[str] = None) -> str:
    file_type_info = f"File Type: {extracted.file_type}"
    if extracted.pages:
        file_type_info += f" (Pages: {extracted.pages})"

    if custom_prompt:
        return f"{custom_prompt}\n\n{file_type_info}\nFile Content:\n{extracted.text}"
    return (
        f"Please summarize and analyze the following {extracted.file_type.lower()} content:\n\n"
        f"{file_type_info}\nContent:\n{extracted.text}"
    )


def build_file_fallback(extracted: ExtractedFile, file_name: str) -> str:
    text = extracted.text
    excerpt = text[:FILE_EXCERPT_CHARS]
    if len(text) > FILE_EXCERPT_CHARS:
        excerpt += "..."
    return (
        f"I've successfully extracted {len(text)} characters from your {extracted.file_type.lower()} "
        f'"{file_name}". However, our AI service is temporarily unavailable. '
        f"Here's the extracted content:\n\n{excerpt}"
    )


def analyze_file(
    extracted: ExtractedFile,
    file_name: str,
    custom_prompt: Optional[str] = None,
) -> FileAnalysisOutcome:
    """Send extracted document text to Gemini, or return an excerpt when it is unavailable."""
    completion = request_completion(
        build_file_prompt(extracted, custom_prompt),
        temperature=FILE_TEMPERATURE,
        max_tokens=FILE_MAX_TOKENS,
        policy=FILE_RETRY_POLICY,
    )

    if completion.ok:
        response, source = completion.value, SOURCE_GEMINI
    else:
        logger.warning(
            "File analysis fell back to excerpt",
            extra={"context": {"file_name": file_name, "error_code": completion.error_code}},
        )
        response, source = build_file_fallback(extracted, file_name), SOURCE_FILE_FALLBACK

    return FileAnalysisOutcome(
        response=response,
        source=source,
        file_name=file_name,
        file_type=extracted.file_type,
        extracted_text_length=len(extracted.text),
        additional_info=extracted.info(),
    )
