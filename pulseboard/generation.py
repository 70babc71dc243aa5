"""
PULSEBOARD TEXT GENERATION
Claude-backed collaborator that turns an instruction prompt plus input text into prose

One call, no streaming, no retries: the SDK client is built with
max_retries=0 and a bounded timeout, and every SDK error surfaces as
ServiceUnavailableError for the caller to handle.
"""

import logging
from typing import Any, Optional

import anthropic

from .config import DEFAULT_GENERATION_TIMEOUT, DEFAULT_MODEL, Settings
from .shared.resilience import (
    ServiceNotConfiguredError,
    ServiceUnavailableError,
    tracked_call,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "anthropic"


class TextGenerator:
    """
    Generate text with Claude.

    Wraps the Anthropic Messages API behind generate(system_prompt, user_content).
    Without an API key the generator is unavailable and generate() raises
    ServiceNotConfiguredError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_GENERATION_TIMEOUT,
        client: Any = None,
    ):
        self.model = model
        self.timeout = timeout
        self.client = client

        if self.client is None and api_key:
            try:
                self.client = anthropic.Anthropic(
                    api_key=api_key,
                    timeout=timeout,
                    max_retries=0,
                )
            except Exception as e:
                logger.error(f"Failed to initialize Anthropic client: {e}")
                self.client = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextGenerator":
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.generation_timeout,
        )

    def is_available(self) -> bool:
        """Check if generator is available"""
        return self.client is not None

    @tracked_call(SERVICE_NAME)
    def _call_claude(self, system_prompt: str, user_content: str, max_tokens: int) -> str:
        """Make a single call to Claude"""
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_content}],
        )
        return "".join(
            getattr(block, "text", "") for block in response.content or []
        ).strip()

    def generate(self, system_prompt: str, user_content: str, max_tokens: int = 2000) -> str:
        """
        Produce text for user_content under the given instruction prompt.

        Raises:
            ServiceNotConfiguredError: no API key configured
            ServiceUnavailableError: the call failed or timed out
        """
        if not self.is_available():
            raise ServiceNotConfiguredError(SERVICE_NAME, "ANTHROPIC_API_KEY")

        try:
            return self._call_claude(system_prompt, user_content, max_tokens)
        except anthropic.APITimeoutError as e:
            raise ServiceUnavailableError(
                SERVICE_NAME, f"timed out after {self.timeout}s", last_exception=e
            ) from e
        except Exception as e:
            raise ServiceUnavailableError(SERVICE_NAME, str(e)[:200], last_exception=e) from e
