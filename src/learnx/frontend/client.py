"""HTTP client used by the pages to invoke the handler functions."""

from __future__ import annotations

import logging
from typing import Any

import requests

from learnx.core.config import get_api_base_url, get_request_timeout
from learnx.core.errors import LearnXError

logger = logging.getLogger(__name__)


class FunctionInvocationError(LearnXError):
    """Raised when a handler call fails; the message is the handler's error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class FunctionsClient:
    """Invokes handlers by name, e.g. invoke("generate-image", {...})."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or get_api_base_url()).rstrip("/")
        self.timeout = timeout or get_request_timeout()
        self.session = session or requests.Session()

    def function_url(self, name: str) -> str:
        return f"{self.base_url}/functions/{name}"

    def invoke(self, name: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body to a handler and return its JSON response.

        Raises:
            FunctionInvocationError: On transport failure or an error envelope
        """
        try:
            response = self.session.post(
                self.function_url(name), json=body, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise FunctionInvocationError(str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code != 200:
            message = (
                data.get("error")
                if isinstance(data, dict) and data.get("error")
                else f"API error: {response.status_code}"
            )
            logger.error("Function %s failed: %s", name, message)
            raise FunctionInvocationError(message, status_code=response.status_code)

        if not isinstance(data, dict):
            raise FunctionInvocationError(f"Function {name} returned a non-JSON body")
        return data
