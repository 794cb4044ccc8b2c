"""Discovery of explainer plugins registered as entry points."""

import logging
from importlib.metadata import entry_points
from typing import Any

from failure_explainer.explainers.manifest import ExplainerManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "failure_explainer.explainers"


class ExplainerNotFoundError(Exception):
    """Raised when no usable explainer is registered under a key."""

    def __init__(
        self, key: str, available: list[str], detail: str = "not found"
    ) -> None:
        super().__init__(
            f"Explainer '{key}' {detail}. Available explainers: {available}"
        )
        self.key = key
        self.available = available


def available_explainers() -> list[str]:
    """Return the sorted keys of every installed explainer."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_explainer_manifest(key: str) -> ExplainerManifest[Any]:
    """Load the manifest of the explainer registered under ``key``.

    Raises:
        ExplainerNotFoundError: If the key is unknown, or its entry point does
            not resolve to an ExplainerManifest

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise ExplainerNotFoundError(key, available_explainers())

    entry = next(iter(matches))
    manifest = entry.load()
    if not isinstance(manifest, ExplainerManifest):
        raise ExplainerNotFoundError(
            key,
            available_explainers(),
            detail=f"points at {entry.value}, which is not an explainer manifest",
        )

    log.debug("Loaded explainer '%s' from %s", key, entry.value)
    return manifest
