"""
Model Gateway
Single synchronous call to an OpenAI-compatible chat-completions endpoint.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import requests

from .config import PipelineConfig
from .errors import ServiceUnavailable
from .models import ChatMessage

logger = logging.getLogger(__name__)


class ModelGateway:
    """
    Send a message sequence to the chat-completions API and return the raw reply text.

    No retries, caching or streaming. Retry policy belongs to the caller.
    """

    def __init__(self, config: PipelineConfig, session: Optional[requests.Session] = None):
        """
        Initialize the gateway.

        Args:
            config: Pipeline configuration (endpoint, credentials, model settings)
            session: Optional requests session (a plain requests.post is used otherwise)

        Raises:
            ConfigurationError: if credentials or endpoint settings are missing
        """
        config.validate()
        self.config = config
        self.session = session
        self.last_usage: Optional[Dict[str, Any]] = None

        logger.info(f"Model gateway initialized with model: {self.config.model}")

    def _build_request_body(self, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [m.to_api() for m in messages],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "stream": False,
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

    def complete(self, messages: Sequence[ChatMessage]) -> str:
        """
        Make one request to the chat-completions endpoint.

        Args:
            messages: Conversation to send

        Returns:
            The assistant's raw text content

        Raises:
            ServiceUnavailable: network failure, non-2xx status or malformed envelope
        """
        url = self.config.completions_url
        body = self._build_request_body(messages)
        post = self.session.post if self.session is not None else requests.post

        logger.info(f"Calling model endpoint ({self.config.model})...")

        try:
            response = post(url, json=body, headers=self._headers(), timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"Model request failed: {e}")
            raise ServiceUnavailable(f"AI service unavailable: {e}", cause=e)

        if not 200 <= response.status_code < 300:
            logger.error(f"Model request returned HTTP {response.status_code}")
            raise ServiceUnavailable(
                f"AI service unavailable: HTTP {response.status_code} - {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceUnavailable("AI service unavailable: response body is not JSON", cause=e)

        content = self._extract_content(data)
        self.last_usage = data.get("usage")
        if self.last_usage:
            logger.debug(f"Token usage: {self.last_usage}")

        return content

    @staticmethod
    def _extract_content(data: Any) -> str:
        """Pull choices[0].message.content out of the response envelope."""
        try:
            message = data["choices"][0]["message"]
            content = message["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceUnavailable("AI service unavailable: invalid response envelope", cause=e)

        if not isinstance(content, str):
            raise ServiceUnavailable("AI service unavailable: response content is not text")
        return content

    def test_connection(self) -> bool:
        """Test if the endpoint is reachable and the model is listed."""
        url = f"{self.config.base_url.rstrip('/')}/models"
        try:
            response = requests.get(url, headers=self._headers(), timeout=5)
            if response.status_code == 200:
                models = response.json().get("data", [])
                model_ids = [m.get("id", "") for m in models if isinstance(m, dict)]
                if self.config.model in model_ids:
                    logger.info(f"Endpoint connection OK, model {self.config.model} available")
                    return True
                logger.warning(f"Model {self.config.model} not found. Available: {model_ids}")
                return False
            logger.warning(f"Endpoint returned HTTP {response.status_code}")
            return False
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Endpoint connection failed: {e}")
            return False
