"""Ollama chat client used for Cypher generation and answer narration.

Every request is a single user turn; the caller gets back the list of
candidate completions (Ollama chat returns at most one).
"""

import logging
from dataclasses import dataclass

import ollama

from marvel_graphrag.config import Config

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the model server cannot produce a response."""


@dataclass
class Completion:
    """One candidate completion returned by the model."""

    text: str


class OllamaLLM:
    """Single-turn text generation against a local Ollama server."""

    def __init__(self, config: Config, client: ollama.Client | None = None):
        self.config = config
        self.model = config.ollama_model
        self.client = client or ollama.Client(
            host=config.ollama_host, timeout=config.llm_timeout
        )

    def generate(self, prompt: str, temperature: float | None = None) -> list[Completion]:
        """Send a prompt as one user message.

        Args:
            prompt: Full prompt text.
            temperature: Sampling temperature; server default when None.

        Returns:
            Candidate completions. Empty if the model answered with no text.

        Raises:
            LLMError: If the request fails for any reason.
        """
        options = {"temperature": temperature} if temperature is not None else None
        try:
            response = self.client.chat(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                options=options,
            )
        except Exception as e:
            logger.error(f"Ollama request to {self.model} failed: {e}")
            raise LLMError(f"LLM generation failed: {e}") from e

        content = response["message"]["content"] or ""
        if not content.strip():
            logger.warning(f"Empty response from {self.model}")
            return []
        return [Completion(text=content)]

    def is_available(self) -> bool:
        """Check whether the Ollama server answers."""
        try:
            self.client.list()
            return True
        except Exception as e:
            logger.debug(f"Ollama not reachable: {e}")
            return False
