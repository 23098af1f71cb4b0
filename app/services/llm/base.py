from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class LLMResponse:
    status_code: int
    content: str = ""
    model: Optional[str] = None
    error: Optional[str] = None
    usage: Optional[dict] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class LLMProvider(ABC):
    """Abstract base class for completion providers."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> LLMResponse:
        """Send one completion request. Transport errors propagate."""
        pass
