from app.schemas.chat import ChatRequest, ChatResponse, FileAnalysisResponse
from app.schemas.dataset import (
    DatasetAddRequest,
    DatasetDeleteRequest,
    DatasetImportRequest,
    DatasetTestRequest,
    DatasetUpdateRequest,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "FileAnalysisResponse",
    "DatasetAddRequest",
    "DatasetDeleteRequest",
    "DatasetImportRequest",
    "DatasetTestRequest",
    "DatasetUpdateRequest",
]
