"""Base classes shared by LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional


# Called with (status, percent) while a model download is in progress
ProgressCallback = Callable[[str, Optional[int]], None]


@dataclass
class LLMResponse:
    """Result from an LLM generation call, including token usage."""

    content: str
    model: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the provider can be reached."""
        pass

    @abstractmethod
    def get_available_models(self) -> list[str]:
        """List the models the provider can serve."""
        pass

    @abstractmethod
    def generate(
        self,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 200,
    ) -> LLMResponse:
        """Generate a completion for the prompt.

        Args:
            prompt: The full prompt text.
            temperature: Sampling temperature.
            max_tokens: Maximum number of tokens to generate.

        Returns:
            An LLMResponse with the generated text and token usage.

        Raises:
            LLMError: If generation fails.
        """
        pass
