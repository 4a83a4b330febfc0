"""LLM module for ai-commits.

This module talks to a local Ollama server to turn a staged diff into a
conventional commit message.
"""

import logging
from typing import Optional

from aicommits.config import Config
from aicommits.llm.base import BaseLLMProvider, LLMResponse, ProgressCallback
from aicommits.llm.exceptions import LLMError, OllamaError
from aicommits.llm.ollama_provider import OllamaProvider
from aicommits.llm.prompts import (
    ParsedCommitMessage,
    create_commit_prompt,
    format_diff_for_prompt,
    parse_commit_message_response,
)

logger = logging.getLogger(__name__)

# Low temperature for consistent formatting
GENERATION_TEMPERATURE = 0.1
GENERATION_MAX_TOKENS = 150


def get_provider(config: Config) -> OllamaProvider:
    """Get an LLM provider instance for the configuration.

    Both supported provider names speak the Ollama HTTP API.

    Args:
        config: The effective configuration.

    Returns:
        The provider instance.
    """
    return OllamaProvider.from_config(config)


def _unavailable_error() -> LLMError:
    return LLMError(
        "Ollama is not available or not running",
        "OLLAMA_UNAVAILABLE",
        "Start Ollama with: ollama serve",
    )


def generate_commit_message(
    prompt: str,
    config: Config,
    on_progress: Optional[ProgressCallback] = None,
    provider: Optional[OllamaProvider] = None,
) -> LLMResponse:
    """Generate a commit message for the prompt.

    Pulls the configured model first if it is not available locally.

    Args:
        prompt: The prompt from create_commit_prompt().
        config: The effective configuration.
        on_progress: Progress callback used while pulling a model.
        provider: Provider override, defaults to one built from config.

    Returns:
        The raw LLMResponse.

    Raises:
        LLMError: If Ollama is unreachable or generation fails.
    """
    provider = provider or get_provider(config)
    try:
        if not provider.is_available():
            raise _unavailable_error()

        if not provider.has_model():
            logger.warning("Model %s not found locally. Attempting to pull...", provider.model)
            provider.pull_model(on_progress)

        return provider.generate(
            prompt,
            temperature=GENERATION_TEMPERATURE,
            max_tokens=GENERATION_MAX_TOKENS,
        )
    except LLMError as e:
        if e.recovery_hint:
            logger.error(
                "Recovery suggestion:\n%s", e.recovery_hint, extra={"recovery_hint": e.recovery_hint}
            )
        raise
    except Exception as e:
        raise LLMError(f"Failed to generate commit message: {e}", "GENERATION_FAILED") from e


def validate_ollama_config(
    config: Config,
    provider: Optional[OllamaProvider] = None,
) -> bool:
    """Validate that Ollama is reachable with the configured model.

    Args:
        config: The effective configuration.
        provider: Provider override, defaults to one built from config.

    Returns:
        True if the model is available, False if only the server is.

    Raises:
        LLMError: If Ollama is not running.
    """
    provider = provider or get_provider(config)

    if not provider.is_available():
        error = _unavailable_error()
        logger.error(
            "Recovery suggestion:\n%s", error.recovery_hint, extra={"recovery_hint": error.recovery_hint}
        )
        raise error

    if not provider.has_model():
        logger.warning(
            "Model %s is not available locally. Pull it with: ollama pull %s",
            provider.model,
            provider.model,
        )
        return False

    return True


# Export commonly used items
__all__ = [
    "BaseLLMProvider",
    "LLMError",
    "LLMResponse",
    "OllamaError",
    "OllamaProvider",
    "ParsedCommitMessage",
    "ProgressCallback",
    "create_commit_prompt",
    "format_diff_for_prompt",
    "generate_commit_message",
    "get_provider",
    "parse_commit_message_response",
    "validate_ollama_config",
]
