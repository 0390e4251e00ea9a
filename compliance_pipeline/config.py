"""
Configuration for the Compliance Extraction Pipeline
"""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

from .errors import ConfigurationError

# Load .env file
load_dotenv()


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class PipelineConfig:
    """Configuration settings for the pipeline."""

    # Model endpoint (any OpenAI-compatible chat-completions API)
    api_key: str = ""
    base_url: str = "https://api.deepseek.com/v1"
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: Optional[float] = None  # None = transport default

    # Record store
    data_dir: str = "data"
    mirror_dir: Optional[str] = None  # optional public copy for dashboards

    # Processing settings
    max_input_chars: int = 30000     # Max chars to send to the model

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load configuration from environment variables."""
        try:
            return cls(
                api_key=os.getenv("AI_API_KEY", ""),
                base_url=os.getenv("AI_BASE_URL", "https://api.deepseek.com/v1"),
                model=os.getenv("AI_MODEL", "deepseek-chat"),
                temperature=float(os.getenv("AI_TEMPERATURE", "0.7")),
                max_tokens=int(os.getenv("AI_MAX_TOKENS", "2000")),
                timeout=_optional_float(os.getenv("AI_TIMEOUT")),
                data_dir=os.getenv("DATA_DIR", "data"),
                mirror_dir=os.getenv("PUBLIC_DATA_DIR") or None,
                max_input_chars=int(os.getenv("MAX_TEXT_CHARS", "30000")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting in environment: {e}", cause=e)

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    def validate(self) -> bool:
        """Validate that required settings are present."""
        missing = []
        if not self.api_key:
            missing.append("AI_API_KEY")
        if not self.base_url:
            missing.append("AI_BASE_URL")
        if not self.model:
            missing.append("AI_MODEL")
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
        if self.max_tokens <= 0:
            raise ConfigurationError("AI_MAX_TOKENS must be positive")
        return True
