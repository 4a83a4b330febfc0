"""Ollama provider implementation."""

import json
import logging
from typing import Any, Optional

import httpx

from aicommits.config import Config
from aicommits.llm.base import BaseLLMProvider, LLMResponse, ProgressCallback
from aicommits.llm.exceptions import OllamaError

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2:3b"
DEFAULT_TIMEOUT = 30.0
DEFAULT_PULL_TIMEOUT = 300.0


class OllamaProvider(BaseLLMProvider):
    """Client for a local Ollama server.

    Endpoints used:
    - GET /api/tags: availability check and model listing
    - POST /api/generate: non-streaming text completion
    - POST /api/pull: model download with streamed progress
    """

    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        pull_timeout: float = DEFAULT_PULL_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the Ollama provider.

        Args:
            model: The model to use. Defaults to llama3.2:3b.
            base_url: Server URL. Defaults to http://localhost:11434.
            timeout: Timeout in seconds for regular requests.
            pull_timeout: Timeout in seconds for model downloads.
            transport: Optional httpx transport, mainly for tests.
        """
        self.model = model or DEFAULT_MODEL
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.pull_timeout = pull_timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: Config, transport: Optional[httpx.BaseTransport] = None
    ) -> "OllamaProvider":
        """Build a provider from the llm section of the configuration."""
        return cls(
            model=config.llm.model,
            base_url=config.llm.base_url,
            timeout=config.llm.timeout,
            pull_timeout=config.llm.pull_timeout,
            transport=transport,
        )

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
            headers={"Content-Type": "application/json"},
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request to the Ollama API.

        Raises:
            OllamaError: On timeouts and connection failures.
        """
        try:
            with self._client(self.timeout) as client:
                return client.request(method, endpoint, json=payload)
        except httpx.TimeoutException:
            raise OllamaError("Request timed out", f"Timeout after {self.timeout}s")
        except httpx.HTTPError as e:
            raise OllamaError("Failed to connect to Ollama", str(e))

    def is_available(self) -> bool:
        """Check if Ollama is available and running.

        Returns:
            True if /api/tags answered successfully.
        """
        try:
            response = self._request("GET", "/api/tags")
            return response.is_success
        except OllamaError as e:
            logger.warning("Ollama availability check failed: %s (%s)", e, e.original_error)
            return False

    def get_available_models(self) -> list[str]:
        """Get the names of locally available models.

        Raises:
            OllamaError: If the model list cannot be read.
        """
        response = self._request("GET", "/api/tags")
        if not response.is_success:
            raise OllamaError(
                f"Failed to get models: {response.status_code} {response.reason_phrase}"
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise OllamaError("Failed to get available models", str(e))

        return [m["name"] for m in data.get("models") or [] if m.get("name")]

    def has_model(self, model: Optional[str] = None) -> bool:
        """Check if a model is available locally.

        Args:
            model: Model name, defaults to the configured model.

        Returns:
            True if the model is listed. Failures are reported as False.
        """
        model = model or self.model
        try:
            return model in self.get_available_models()
        except OllamaError as e:
            logger.warning("Model availability check failed for %s: %s", model, e)
            return False

    def pull_model(
        self,
        on_progress: Optional[ProgressCallback] = None,
        model: Optional[str] = None,
    ) -> None:
        """Download a model, reporting progress as it streams in.

        Args:
            on_progress: Called with (status, percent) for each status update.
            model: Model name, defaults to the configured model.

        Raises:
            OllamaError: If the download fails.
        """
        model = model or self.model
        logger.info("Pulling model %s...", model)

        try:
            with self._client(self.pull_timeout) as client:
                with client.stream("POST", "/api/pull", json={"name": model}) as response:
                    if not response.is_success:
                        raise OllamaError(
                            f"Failed to pull model {model}: "
                            f"{response.status_code} {response.reason_phrase}"
                        )
                    for line in response.iter_lines():
                        self._handle_pull_line(line, model, on_progress)
        except httpx.TimeoutException:
            raise OllamaError(
                f"Failed to pull model {model}", f"Timeout after {self.pull_timeout}s"
            )
        except httpx.HTTPError as e:
            raise OllamaError(f"Failed to pull model {model}", str(e))

        logger.info("Model %s pulled successfully", model)

    @staticmethod
    def _handle_pull_line(
        line: str, model: str, on_progress: Optional[ProgressCallback]
    ) -> None:
        if not line.strip():
            return
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            # Partial or non-JSON progress lines are ignored
            return

        if data.get("error"):
            raise OllamaError(f"Failed to pull model {model}", data["error"])

        status = data.get("status")
        if not status:
            return

        percent = None
        completed, total = data.get("completed"), data.get("total")
        if completed and total:
            percent = round(completed / total * 100)

        if on_progress:
            on_progress(status, percent)

    def generate(
        self,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 200,
    ) -> LLMResponse:
        """Generate text with Ollama.

        Args:
            prompt: The full prompt text.
            temperature: Sampling temperature, low for consistent formatting.
            max_tokens: Maximum number of tokens to generate.

        Returns:
            An LLMResponse with the trimmed completion and token counts.

        Raises:
            OllamaError: If the request fails or the model returns nothing.
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        response = self._request("POST", "/api/generate", payload)

        if not response.is_success:
            raise OllamaError(
                f"Generation failed: {response.status_code} {response.reason_phrase}",
                response.text,
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise OllamaError("Invalid response from Ollama", str(e))

        content = data.get("response")
        if not content:
            raise OllamaError("No response from model", json.dumps(data))

        return LLMResponse(
            content=content.strip(),
            model=self.model,
            prompt_tokens=data.get("prompt_eval_count") or 0,
            completion_tokens=data.get("eval_count") or 0,
        )
