"""
Dialogflow v2 client based on the Google Cloud SDK.

The SDK is an optional extra (``pip install chat-relay[dialogflow]``)
and is loaded the first time the adapter is built. Credentials come from
the usual Google application-default lookup.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from chatrelay.config.constants import DIALOGFLOW_LANGUAGE_CODE
from chatrelay.core.nlu.base import NLUClient
from chatrelay.exceptions.base_exceptions import ConfigError, ProviderError
from chatrelay.models.nlu import NLUResult
from chatrelay.models.types import ConversationId


class DialogflowClient(NLUClient):
    """NLU adapter calling ``SessionsAsyncClient.detect_intent``."""

    name = "dialogflow"

    def __init__(
            self,
            project_id: str,
            language_code: str = DIALOGFLOW_LANGUAGE_CODE,
            sessions_client: Any = None
    ):
        super().__init__()
        if not project_id:
            raise ConfigError("Dialogflow project id is required", missing_keys=["APIAI_PROJECT_ID"])

        self.project_id = project_id
        self.language_code = language_code
        self._dialogflow: Any = None
        self._api_errors: Any = None
        self._load_dependency()
        self._client = sessions_client or self._dialogflow.SessionsAsyncClient()

    def _load_dependency(self) -> None:
        try:
            from google.api_core import exceptions as api_exceptions
            from google.cloud import dialogflow
        except ImportError as exc:
            raise ConfigError(
                "dialogflow backend requires the `google-cloud-dialogflow` package"
            ) from exc

        self._dialogflow = dialogflow
        self._api_errors = api_exceptions

    def session_path(self, conversation_id: ConversationId) -> str:
        return self._dialogflow.SessionsClient.session_path(self.project_id, conversation_id)

    async def query(self, conversation_id: ConversationId, text: str) -> NLUResult:
        """Run detect_intent for one text input."""
        dialogflow = self._dialogflow
        query_input = dialogflow.QueryInput(
            text=dialogflow.TextInput(text=text, language_code=self.language_code)
        )

        try:
            response = await self._client.detect_intent(
                request={
                    "session": self.session_path(conversation_id),
                    "query_input": query_input,
                }
            )
        except self._api_errors.GoogleAPIError as e:
            raise ProviderError(
                f"Dialogflow detect_intent failed: {e}",
                provider=self.name,
                caused_by=e
            ) from e

        query_result = type(response.query_result).to_dict(response.query_result)
        result = parse_query_result(query_result)

        self.logger.debug(
            "Dialogflow query answered",
            conversation_id=conversation_id,
            action=result.action,
            intent=result.intent_name
        )
        return result


def _first_payload(messages: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    for message in messages:
        payload = message.get("payload")
        if payload:
            return payload
    return None


def parse_query_result(query_result: Dict[str, Any]) -> NLUResult:
    """Map a v2 ``QueryResult`` (as a snake_case dict) to an NLUResult."""
    messages = [m for m in query_result.get("fulfillment_messages") or [] if isinstance(m, dict)]
    intent = query_result.get("intent")
    if not isinstance(intent, dict):
        intent = {}

    try:
        return NLUResult(
            fulfillment_text=query_result.get("fulfillment_text"),
            fulfillment_data=query_result.get("webhook_payload") or _first_payload(messages),
            fulfillment_messages=messages,
            action=query_result.get("action"),
            contexts=query_result.get("output_contexts") or [],
            parameters=query_result.get("parameters") or {},
            resolved_query=query_result.get("query_text"),
            intent_name=intent.get("display_name"),
        )
    except PydanticValidationError as e:
        raise ProviderError(
            "Dialogflow query result could not be mapped",
            provider=DialogflowClient.name,
            details={"errors": e.error_count()},
            caused_by=e
        ) from e
