"""Gemini explainer module."""

from failure_explainer.explainers.gemini.config import GeminiConfig
from failure_explainer.explainers.gemini.explainer import GeminiExplainer
from failure_explainer.explainers.gemini.manifest import gemini_manifest

__all__ = ["GeminiConfig", "GeminiExplainer", "gemini_manifest"]
