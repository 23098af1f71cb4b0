from datetime import datetime
from typing import Any, Optional

from app.schemas.base import CamelModel


class ChatRequest(CamelModel):
    message: Optional[str] = None
    is_anonymous: bool = False


class ChatResponse(CamelModel):
    success: bool
    response: str
    source: str
    detected_language: Optional[str] = None
    confidence: Optional[float] = None
    category: Optional[str] = None
    match_type: Optional[str] = None
    timestamp: datetime


class FileAnalysisResponse(CamelModel):
    success: bool
    response: str
    source: str
    file_name: str
    file_type: str
    extracted_text_length: int
    additional_info: dict[str, Any] = {}
    timestamp: datetime
