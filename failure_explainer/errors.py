"""Errors raised while generating failure explanations."""


class ExplanationError(Exception):
    """Base class for explanation generation failures."""


class ConfigurationError(ExplanationError):
    """Raised when the explainer credential is missing or still a placeholder.

    Never retried: no network call is made with an invalid credential.
    """


class RetryableExplanationError(ExplanationError):
    """Base class for failures that are retried up to the retry budget."""


class TransientNetworkError(RetryableExplanationError):
    """Raised on connection failures and timeouts."""


class ProtocolError(RetryableExplanationError):
    """Raised when the endpoint answers with an unexpected HTTP status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Unexpected response status: {status} {body}")
        self.status = status
        self.body = body


class MalformedResponseError(RetryableExplanationError):
    """Raised when a successful response lacks the explanation text."""
