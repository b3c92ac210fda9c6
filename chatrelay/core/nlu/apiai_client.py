"""
API.ai (Dialogflow v1) client over plain HTTP.

Talks to the ``/query`` endpoint with the agent's client access token.
"""

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from chatrelay.config.constants import (
    API_AI_PROTOCOL_VERSION,
    DEFAULT_API_AI_BASE_URL,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_NLU_LANGUAGE,
    DEFAULT_NLU_REQUEST_SOURCE,
    HTTP_USER_AGENT,
)
from chatrelay.core.nlu.base import NLUClient
from chatrelay.exceptions.base_exceptions import ProviderError
from chatrelay.models.nlu import NLUResult
from chatrelay.models.types import ConversationId


class ApiAiClient(NLUClient):
    """NLU adapter for the API.ai v1 query endpoint."""

    name = "apiai"

    def __init__(
            self,
            access_token: str,
            base_url: str = DEFAULT_API_AI_BASE_URL,
            language: str = DEFAULT_NLU_LANGUAGE,
            request_source: str = DEFAULT_NLU_REQUEST_SOURCE,
            timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
            http_client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.request_source = request_source

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json; charset=utf-8",
            "User-Agent": HTTP_USER_AGENT,
        }

    async def query(self, conversation_id: ConversationId, text: str) -> NLUResult:
        """Send a text request and map the v1 response."""
        body = {
            "query": text,
            "sessionId": conversation_id,
            "lang": self.language,
            "originalRequest": {"source": self.request_source},
        }

        try:
            response = await self.http_client.post(
                f"{self.base_url}/query",
                params={"v": API_AI_PROTOCOL_VERSION},
                json=body,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"API.ai request failed: {e}",
                provider=self.name,
                caused_by=e
            ) from e

        if response.status_code >= 400:
            raise ProviderError(
                f"API.ai answered HTTP {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                details={"body": response.text[:500]}
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(
                "API.ai answered with invalid JSON",
                provider=self.name,
                caused_by=e
            ) from e

        result = parse_query_response(payload)

        self.logger.debug(
            "API.ai query answered",
            conversation_id=conversation_id,
            action=result.action,
            intent=result.intent_name
        )
        return result

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_query_response(payload: Any) -> NLUResult:
    """
    Map a v1 ``/query`` response body to an NLUResult.

    Raises:
        ProviderError: When the body reports an error status, has no
            result or does not have the v1 shape
    """
    if not isinstance(payload, dict):
        raise ProviderError(
            f"API.ai response is not an object: {type(payload).__name__}",
            provider=ApiAiClient.name
        )

    status = _as_dict(payload.get("status"))
    code = status.get("code", 200)
    if isinstance(code, int) and code >= 400:
        raise ProviderError(
            status.get("errorDetails") or f"API.ai error {status.get('errorType', code)}",
            provider=ApiAiClient.name,
            status_code=code
        )

    result = payload.get("result")
    if not isinstance(result, dict):
        raise ProviderError(
            "API.ai response has no result",
            provider=ApiAiClient.name
        )

    fulfillment = _as_dict(result.get("fulfillment"))
    metadata = _as_dict(result.get("metadata"))

    try:
        return NLUResult(
            fulfillment_text=fulfillment.get("speech"),
            fulfillment_data=fulfillment.get("data"),
            fulfillment_messages=fulfillment.get("messages") or [],
            action=result.get("action"),
            contexts=result.get("contexts") or [],
            parameters=result.get("parameters") or {},
            resolved_query=result.get("resolvedQuery"),
            intent_name=metadata.get("intentName"),
        )
    except PydanticValidationError as e:
        raise ProviderError(
            "API.ai result does not match the v1 format",
            provider=ApiAiClient.name,
            details={"errors": e.error_count()},
            caused_by=e
        ) from e
