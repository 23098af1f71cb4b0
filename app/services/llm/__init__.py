from app.services.llm.base import LLMProvider, LLMResponse
from app.services.llm.gemini_provider import GeminiProvider

__all__ = ["LLMProvider", "LLMResponse", "GeminiProvider"]
