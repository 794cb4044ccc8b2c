"""Payload helpers for Gemini API responses in tests."""

from typing import Any


def generate_content_response(
    *,
    text: str = "The endpoint returned 404 because the post id does not exist.",
    finish_reason: str = "STOP",
) -> dict[str, Any]:
    """Create a generateContent response payload for testing.

    Returns a realistic Gemini API response structure.
    """
    return {
        "candidates": [
            {
                "content": {
                    "parts": [{"text": text}],
                    "role": "model",
                },
                "finishReason": finish_reason,
                "index": 0,
            }
        ],
        "usageMetadata": {
            "promptTokenCount": 64,
            "candidatesTokenCount": 48,
            "totalTokenCount": 112,
        },
        "modelVersion": "gemini-2.0-flash",
    }


def blocked_prompt_response() -> dict[str, Any]:
    """Create a response whose prompt was blocked, so it has no candidates."""
    return {
        "promptFeedback": {"blockReason": "SAFETY"},
        "usageMetadata": {"promptTokenCount": 64, "totalTokenCount": 64},
    }


def error_response(*, code: int = 400, message: str = "API key not valid.") -> dict[str, Any]:
    """Create an error payload as returned with non-200 statuses."""
    return {
        "error": {
            "code": code,
            "message": message,
            "status": "INVALID_ARGUMENT",
        }
    }
