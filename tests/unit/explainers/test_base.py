"""Tests for the Explainer retry policy."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from unittest.mock import AsyncMock, call, patch

import pytest

from failure_explainer.errors import (
    ConfigurationError,
    ExplanationError,
    MalformedResponseError,
    ProtocolError,
    TransientNetworkError,
)
from failure_explainer.explainers.base import Explainer
from failure_explainer.models.explanation import Explanation, ExplanationUnavailable


@dataclass(frozen=True, kw_only=True)
class ScriptedExplainer(Explainer):
    """Explainer replaying scripted attempt outcomes, repeating the last one."""

    script: Sequence[str | ExplanationError] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    async def generate(self, prompt: str) -> str:
        """Return or raise the next scripted outcome."""
        outcome = self.script[min(len(self.prompts), len(self.script) - 1)]
        self.prompts.append(prompt)
        if isinstance(outcome, ExplanationError):
            raise outcome
        return outcome


class TestExplain:
    """Tests for explain."""

    async def test_returns_explanation_on_first_success(self) -> None:
        """A successful first attempt is returned without retries."""
        explainer = ScriptedExplainer(script=["the locator changed"], retry_delay=0)

        result = await explainer.explain("why?")

        assert result == Explanation(text="the locator changed", attempts=1)
        assert explainer.prompts == ["why?"]

    async def test_succeeds_on_fourth_attempt(self) -> None:
        """Three failures then success gives the text after exactly 4 attempts."""
        explainer = ScriptedExplainer(
            script=[
                ProtocolError(503, "unavailable"),
                ProtocolError(503, "unavailable"),
                ProtocolError(503, "unavailable"),
                "the API moved",
            ],
            retry_delay=0,
        )

        result = await explainer.explain("why?")

        assert result == Explanation(text="the API moved", attempts=4)
        assert len(explainer.prompts) == 4

    async def test_waits_fixed_delay_between_attempts(self) -> None:
        """Waits one second between attempts, without backoff."""
        explainer = ScriptedExplainer(
            script=[
                TransientNetworkError("reset"),
                TransientNetworkError("reset"),
                TransientNetworkError("reset"),
                "ok",
            ]
        )

        with patch(
            "failure_explainer.explainers.base.asyncio.sleep", new_callable=AsyncMock
        ) as sleep_mock:
            await explainer.explain("why?")

        assert sleep_mock.await_args_list == [call(1.0), call(1.0), call(1.0)]

    async def test_gives_up_after_four_attempts(self) -> None:
        """Always failing endpoints are tried 1 + 3 times."""
        explainer = ScriptedExplainer(
            script=[
                ProtocolError(500, "first"),
                ProtocolError(500, "second"),
                ProtocolError(500, "third"),
                ProtocolError(502, "last"),
            ],
            retry_delay=0,
        )

        result = await explainer.explain("why?")

        assert isinstance(result, ExplanationUnavailable)
        assert result.attempts == 4
        assert result.reason == "Unexpected response status: 502 last"
        assert len(explainer.prompts) == 4

    async def test_retries_malformed_responses(self) -> None:
        """Malformed responses are retried like network failures."""
        explainer = ScriptedExplainer(
            script=[MalformedResponseError("no candidates"), "fixed"], retry_delay=0
        )

        result = await explainer.explain("why?")

        assert result == Explanation(text="fixed", attempts=2)

    async def test_configuration_error_is_not_retried(self) -> None:
        """Configuration errors give up immediately with zero attempts."""
        explainer = ScriptedExplainer(
            script=[ConfigurationError("API key is not configured")]
        )

        with patch(
            "failure_explainer.explainers.base.asyncio.sleep", new_callable=AsyncMock
        ) as sleep_mock:
            result = await explainer.explain("why?")

        assert result == ExplanationUnavailable(
            reason="API key is not configured", attempts=0
        )
        sleep_mock.assert_not_awaited()

    async def test_respects_configured_retry_count(self) -> None:
        """max_retries bounds the number of retries."""
        explainer = ScriptedExplainer(
            script=[TransientNetworkError("timeout")], max_retries=1, retry_delay=0
        )

        result = await explainer.explain("why?")

        assert isinstance(result, ExplanationUnavailable)
        assert result.attempts == 2

    async def test_deadline_stops_retries(self) -> None:
        """No attempt starts once the deadline would be exceeded."""
        explainer = ScriptedExplainer(
            script=[TransientNetworkError("timeout")],
            retry_delay=0.05,
            deadline=0.01,
        )

        result = await explainer.explain("why?")

        assert isinstance(result, ExplanationUnavailable)
        assert result.attempts == 1

    async def test_cancelled_delay_stops_retries(self) -> None:
        """Cancelling during the retry delay ends the remaining attempts."""
        explainer = ScriptedExplainer(
            script=[ProtocolError(500, "down")], retry_delay=10
        )

        task = asyncio.create_task(explainer.explain("why?"))
        while not explainer.prompts:
            await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(explainer.prompts) == 1
