"""Gemini explainer implementation."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError

from failure_explainer.errors import (
    ConfigurationError,
    MalformedResponseError,
    ProtocolError,
    TransientNetworkError,
)
from failure_explainer.explainers.base import Explainer
from failure_explainer.explainers.gemini.config import PLACEHOLDER_API_KEY, GeminiConfig
from failure_explainer.explainers.gemini.models import GenerateContentResponse

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class GeminiExplainer(Explainer):
    """Explainer backed by the Gemini generateContent API."""

    config: GeminiConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GeminiConfig
    ) -> AsyncGenerator["GeminiExplainer", None]:
        """Create explainer with managed session lifecycle."""
        timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            yield cls(
                config=config,
                session=session,
                max_retries=config.max_retries,
                retry_delay=config.retry_delay,
                deadline=config.deadline,
            )

    def api_key(self) -> str:
        """Return the configured API key.

        Raises:
            ConfigurationError: If the key is missing, blank or the placeholder

        """
        api_key = (
            self.config.api_key.get_secret_value().strip()
            if self.config.api_key is not None
            else ""
        )
        if not api_key or api_key == PLACEHOLDER_API_KEY:
            raise ConfigurationError(
                "Gemini API key is not configured. "
                f"Please replace '{PLACEHOLDER_API_KEY}' with your actual key."
            )
        return api_key

    async def generate(self, prompt: str) -> str:
        """Send the prompt to Gemini and return the first candidate's text."""
        # The API authenticates with a query parameter, not a header
        params = {"key": self.api_key()}
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        log.info("Requesting explanation from %s", self.config.api_url)
        try:
            async with self.session.post(
                self.config.api_url, params=params, json=payload
            ) as response:
                if response.status != 200:
                    text = await response.text(errors="replace")
                    raise ProtocolError(response.status, text)
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as e:
            raise TransientNetworkError(f"Request to Gemini failed: {e!r}") from e
        except ValueError as e:
            raise MalformedResponseError(f"Response body is not JSON: {e}") from e

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            response = GenerateContentResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected response shape: {e}") from e

        text = response.first_text()
        if not text or not text.strip():
            raise MalformedResponseError(
                "Response has no text at candidates[0].content.parts[0].text"
            )
        return text
