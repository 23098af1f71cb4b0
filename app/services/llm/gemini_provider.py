from typing import Optional

import httpx

from app.logging_config import get_logger
from app.services.llm.base import LLMProvider, LLMResponse

logger = get_logger("llm.gemini")


def extract_candidate_text(data) -> str:
    """Text of the first part of the first candidate, or empty string for any other shape."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return ""
    text = parts[0].get("text")
    return text if isinstance(text, str) else ""


class GeminiProvider(LLMProvider):
    """Gemini generateContent API provider."""

    def __init__(self, api_key: str, api_url: str, timeout_seconds: float = 30.0):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds

    def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout_seconds: Optional[float] = None,
    ) -> LLMResponse:
        """Single generateContent call. Non-2xx statuses are returned, not raised."""
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        logger.debug(f"Gemini request: prompt_len={len(prompt)}, max_tokens={max_tokens}")

        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        with httpx.Client(timeout=timeout) as client:
            response = client.post(
                self.api_url,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )

        logger.debug(f"Gemini response status: {response.status_code}")

        if not response.is_success:
            error = _error_message(response)
            logger.warning(f"Gemini error: {response.status_code} - {error}")
            return LLMResponse(status_code=response.status_code, error=error)

        data = response.json()
        content = extract_candidate_text(data)
        metadata = data if isinstance(data, dict) else {}
        logger.debug(f"Gemini content: {content[:100] if content else 'EMPTY'}")

        return LLMResponse(
            status_code=response.status_code,
            content=content,
            model=metadata.get("modelVersion"),
            usage=metadata.get("usageMetadata"),
        )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or "Unknown error"
    if isinstance(data, dict):
        error = data.get("error") or {}
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    return "Unknown error"
