import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.logging_config import get_logger
from app.schemas.chat import ChatRequest, ChatResponse, FileAnalysisResponse
from app.services.file_service import ExtractionError, UnsupportedFileTypeError, extract_text
from app.services.resolution_service import analyze_file, resolve_message

router = APIRouter(prefix="/api/ai", tags=["ai"])
logger = get_logger("ai_router")

MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", str(15 * 1024 * 1024)))


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
@router.post("/chat-anonymous", response_model=ChatResponse, response_model_exclude_none=True)
def handle_chat(request: ChatRequest, db: Session = Depends(get_db)):
    """Answer a chat message from the dataset, Gemini, backup or fallback."""
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    logger.info("Processing message", extra={"context": {"length": len(request.message)}})
    outcome = resolve_message(db, request.message)

    return ChatResponse(
        success=True,
        response=outcome.response,
        source=outcome.source,
        detected_language=outcome.detected_language,
        confidence=outcome.confidence,
        category=outcome.category,
        match_type=outcome.match_type,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/file", response_model=FileAnalysisResponse)
@router.post("/file-anonymous", response_model=FileAnalysisResponse)
def handle_file(
    file: Optional[UploadFile] = File(default=None),
    custom_prompt: Optional[str] = Form(default=None, alias="customPrompt"),
):
    """Extract text from an uploaded document and have Gemini analyze it."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"File exceeds {MAX_UPLOAD_BYTES} bytes")

    file_name = file.filename or "file"
    mime_type = file.content_type or "application/octet-stream"
    logger.info(f"Processing file: {file_name} ({mime_type})")

    try:
        extracted = extract_text(data, mime_type, file_name)
    except UnsupportedFileTypeError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except ExtractionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if not extracted.text.strip():
        raise HTTPException(
            status_code=400,
            detail=f"Could not extract text from {file_name} or the file appears to be empty",
        )

    outcome = analyze_file(extracted, file_name, custom_prompt)

    return FileAnalysisResponse(
        success=True,
        response=outcome.response,
        source=outcome.source,
        file_name=outcome.file_name,
        file_type=outcome.file_type,
        extracted_text_length=outcome.extracted_text_length,
        additional_info=outcome.additional_info,
        timestamp=datetime.now(timezone.utc),
    )
