"""Configuration for the failure explainer harness."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

API_KEY_ENV_VAR = "FAILURE_EXPLAINER_API_KEY"


class ExplainerConfig(BaseModel):
    """Retry settings shared by every explainer."""

    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)
    # Total time budget across attempts, None keeps the plain retry count
    deadline: float | None = Field(default=None, gt=0)


class HarnessConfig(BaseModel):
    """Process-wide configuration, loaded once per test session."""

    explainer: str = "gemini"
    explainer_config: dict[str, Any] = Field(default_factory=dict)
    report_path: Path | None = None
    screenshot_dir: Path = Path("target/screenshots")
    browser: Literal["chrome", "firefox", "edge"] = "chrome"
    headless: bool = False
    base_url: str = "https://www.google.com"
    api_base_url: str = "https://jsonplaceholder.typicode.com"

    @field_validator("browser", mode="before")
    @classmethod
    def normalize_browser(cls, value: Any) -> Any:
        """Accept browser names in any case."""
        if isinstance(value, str):
            return value.strip().lower()
        return value
