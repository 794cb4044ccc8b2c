"""Gemini explainer manifest."""

from failure_explainer.explainers.gemini.config import GeminiConfig
from failure_explainer.explainers.gemini.explainer import GeminiExplainer
from failure_explainer.explainers.manifest import ExplainerManifest

gemini_manifest = ExplainerManifest(
    config_cls=GeminiConfig,
    explainer_factory=GeminiExplainer.from_config,
)
