"""HTTP client for the chat-completion service that writes budgeting advice."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException

try:
    from . import config
except ImportError:
    import config

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful financial advisor that provides concise, "
    "actionable budgeting advice."
)


class AdviceServiceError(RuntimeError):
    """The advice service could not produce a usable response."""


class AdviceClient:
    """Thin wrapper around a chat-completion style endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = config.ADVICE_MAX_TOKENS,
        temperature: float = config.ADVICE_TEMPERATURE,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise AdviceServiceError("API key not configured")
        self.api_key = api_key
        self.api_url = api_url or config.ADVICE_API_URL
        self.model = model or config.ADVICE_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout if timeout is not None else config.ADVICE_TIMEOUT
        self.session = session or requests.Session()

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': prompt},
            ],
            'max_tokens': self.max_tokens,
            'temperature': self.temperature,
        }

    def complete(self, prompt: str) -> str:
        """Send ``prompt`` and return the generated text.

        Raises:
            AdviceServiceError: on transport failure, a non-2xx status, or a
                body without ``choices[0].message.content``.
        """
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}',
        }
        try:
            response = self.session.post(
                self.api_url,
                headers=headers,
                json=self.build_payload(prompt),
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise AdviceServiceError(f"Request failed: {exc}") from exc

        if not response.ok:
            raise AdviceServiceError(f"API error: {response.status_code}")

        try:
            data = response.json()
            content = data['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AdviceServiceError(f"Malformed response: {exc}") from exc
        if not isinstance(content, str):
            raise AdviceServiceError("Malformed response: content is not text")
        logger.debug("Advice service returned %d characters", len(content))
        return content
