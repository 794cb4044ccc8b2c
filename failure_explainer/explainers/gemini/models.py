"""Pydantic models for Gemini generateContent responses."""

from collections.abc import Sequence

from pydantic import BaseModel


class Part(BaseModel):
    """A content part; only text parts are used."""

    text: str | None = None


class Content(BaseModel):
    """Generated content of a candidate."""

    parts: Sequence[Part] = ()


class Candidate(BaseModel):
    """A single generated candidate."""

    content: Content


class GenerateContentResponse(BaseModel):
    """Response from the generateContent API."""

    candidates: Sequence[Candidate] = ()

    def first_text(self) -> str | None:
        """Return candidates[0].content.parts[0].text, if present."""
        if not self.candidates or not self.candidates[0].content.parts:
            return None
        return self.candidates[0].content.parts[0].text
