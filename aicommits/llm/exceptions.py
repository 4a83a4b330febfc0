"""LLM-related exception classes.

Contains all exception classes for LLM operations:
- LLMError: Base exception for LLM-related errors
- OllamaError: Raised when a request to the Ollama server fails
"""

from typing import Optional


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recovery_hint = recovery_hint

    @property
    def display_hint(self) -> str:
        """The recovery hint, or a generic one when none is set."""
        return self.recovery_hint or "Check the error above and try again."


_CONNECTION_MARKERS = (
    "connection refused",
    "all connection attempts failed",
    "failed to establish",
)


class OllamaError(LLMError):
    """Raised when a request to the Ollama server fails."""

    def __init__(self, message: str, original_error: Optional[str] = None):
        original_error = original_error or ""
        lowered = original_error.lower()
        recovery_hint = "Check that Ollama is installed and running."

        if any(marker in lowered for marker in _CONNECTION_MARKERS):
            recovery_hint = (
                "Ollama is not running. Start it with:\n"
                "  ollama serve\n"
                "Or install it from https://ollama.com/download"
            )
        elif "model" in lowered and "not found" in lowered:
            recovery_hint = (
                "The specified model is not available. Pull it with:\n"
                "  ollama pull <model-name>\n"
                "Or list available models with:\n"
                "  ollama list"
            )

        super().__init__(message, "OLLAMA_ERROR", recovery_hint)
        self.original_error = original_error
