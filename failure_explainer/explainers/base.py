"""Abstract base class for failure explainers."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from failure_explainer.errors import ConfigurationError, RetryableExplanationError
from failure_explainer.models.explanation import (
    Explanation,
    ExplanationResult,
    ExplanationUnavailable,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Explainer(ABC):
    """Abstract base for services that explain test failures.

    Subclasses make a single attempt in ``generate``; ``explain`` owns the
    retry policy: a fixed number of retries with a fixed delay between
    attempts, no backoff and no jitter.
    """

    max_retries: int = 3
    retry_delay: float = 1.0
    deadline: float | None = None

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Make one attempt at generating an explanation.

        Args:
            prompt: Natural-language prompt describing the failure

        Returns:
            Non-empty explanation text

        Raises:
            ConfigurationError: If the explainer cannot be used at all
            RetryableExplanationError: If this attempt failed

        """

    async def explain(self, prompt: str) -> ExplanationResult:
        """Generate an explanation, retrying transient failures.

        Args:
            prompt: Natural-language prompt describing the failure

        Returns:
            The explanation, or an unavailable marker carrying the reason

        Raises:
            asyncio.CancelledError: If a retry delay is interrupted

        """
        loop = asyncio.get_running_loop()
        give_up_at = None if self.deadline is None else loop.time() + self.deadline
        total = self.max_retries + 1
        attempts = 0

        while True:
            attempts += 1
            try:
                text = await self.generate(prompt)
            except ConfigurationError as e:
                log.error("Explainer is not configured: %s", e)
                return ExplanationUnavailable(reason=str(e), attempts=0)
            except RetryableExplanationError as e:
                last_error = e
                log.warning(
                    "Explanation attempt %d/%d failed: %s", attempts, total, e
                )
            else:
                return Explanation(text=text, attempts=attempts)

            if attempts >= total:
                break

            if give_up_at is not None and loop.time() + self.retry_delay >= give_up_at:
                log.warning("Explanation deadline of %ss reached", self.deadline)
                break

            try:
                await asyncio.sleep(self.retry_delay)
            except asyncio.CancelledError:
                log.warning("Retry delay interrupted after %d attempt(s)", attempts)
                raise

        return ExplanationUnavailable(reason=str(last_error), attempts=attempts)
