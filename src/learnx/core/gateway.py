"""Client for the AI Gateway chat-completions endpoint."""

from __future__ import annotations

import logging

import requests
from pydantic import ValidationError

from learnx.core.config import Settings
from learnx.core.errors import GatewayError
from learnx.core.schemas import ChatCompletion, ChatCompletionRequest, ChatMessage

logger = logging.getLogger(__name__)


class GatewayClient:
    """Issues single chat-completion calls against the AI Gateway.

    One call per invocation: no retries, no streaming, and no timeout beyond
    the transport default.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        session: requests.Session | None = None,
    ):
        """Initialize the gateway client.

        Args:
            url: Full chat-completions endpoint URL
            api_key: Bearer credential for the gateway
            session: Optional requests session (useful for testing)
        """
        self.url = url
        self.api_key = api_key
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> GatewayClient:
        return cls(url=settings.gateway_url, api_key=settings.gateway_api_key)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def complete(
        self,
        model: str,
        messages: list[ChatMessage],
        modalities: list[str] | None = None,
    ) -> ChatCompletion:
        """Send one chat-completion request and decode the response.

        Args:
            model: Gateway model identifier
            messages: Messages to send
            modalities: Optional response modalities (e.g. ["image", "text"])

        Returns:
            The decoded ChatCompletion

        Raises:
            GatewayError: On transport failure, non-2xx status or an
                undecodable body
        """
        request = ChatCompletionRequest(
            model=model, messages=messages, modalities=modalities
        )

        try:
            response = self.session.post(
                self.url, headers=self.headers, json=request.to_payload()
            )
        except requests.exceptions.RequestException as e:
            logger.error("Gateway request failed: %s", e)
            raise GatewayError(f"Gateway request failed: {e}") from e

        if not response.ok:
            logger.error("API error: %s", response.text)
            raise GatewayError(f"API error: {response.status_code}")

        try:
            return ChatCompletion.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed gateway response: %s", e)
            raise GatewayError("Malformed gateway response") from e
