"""Configuration for the Gemini explainer."""

from pydantic import SecretStr

from failure_explainer.config import ExplainerConfig

PLACEHOLDER_API_KEY = "YOUR_FREE_GEMINI_API_KEY"
DEFAULT_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.0-flash:generateContent"
)


class GeminiConfig(ExplainerConfig):
    """Configuration for the Gemini explainer."""

    api_key: SecretStr | None = None
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30
