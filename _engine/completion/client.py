from typing import Any, Dict, Optional

import requests

from _data.openai import BASE_URL, LOW_EFFORT_MODELS, REQUEST_TIMEOUT
from _engine.errors import AuthenticationError, GatewayError


class CompletionClient:
    """Minimal client for an OpenAI-compatible chat completion endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        timeout: int = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.model in LOW_EFFORT_MODELS:
            payload["reasoning_effort"] = "low"
            payload["verbosity"] = "low"
        return payload

    def complete(self, prompt: str) -> str:
        """
        Send one prompt and return the trimmed text of the first choice.

        Raises:
            AuthenticationError: the endpoint answered 401.
            GatewayError: network failure, timeout, non-2xx status or a
                response body without a message.
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=self.build_payload(prompt),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise GatewayError(f"Network or API request failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError(
                "401 Unauthorized: the API key was rejected", status_code=401
            )
        if not 200 <= response.status_code < 300:
            raise GatewayError(
                f"API Error ({response.status_code}): {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GatewayError(f"Malformed completion response: {e}") from e
        if not isinstance(content, str):
            raise GatewayError("Malformed completion response: empty message content")
        return content.strip()
