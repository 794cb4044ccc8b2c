"""Explainer manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from failure_explainer.config import ExplainerConfig
from failure_explainer.explainers.base import Explainer


@dataclass(frozen=True, kw_only=True)
class ExplainerManifest[ConfigT: ExplainerConfig]:
    """Manifest describing an explainer plugin.

    The manifest references the configuration class and the explainer factory
    so explainers are only imported and built when selected by key.
    """

    config_cls: type[ConfigT]
    explainer_factory: Callable[[ConfigT], AbstractAsyncContextManager[Explainer]]
