"""
NLU provider adapters and the factory selecting one from settings.
"""

from chatrelay.config.constants import NLUBackend
from chatrelay.config.settings import Settings
from chatrelay.core.nlu.apiai_client import ApiAiClient
from chatrelay.core.nlu.base import NLUClient


def build_nlu_client(settings: Settings, backend: NLUBackend) -> NLUClient:
    """Create the adapter for ``backend`` configured from ``settings``."""
    if backend == NLUBackend.API_AI:
        return ApiAiClient(
            access_token=settings.API_AI_CLIENT_ACCESS_TOKEN,
            base_url=settings.API_AI_BASE_URL,
            language=settings.NLU_LANGUAGE,
            request_source=settings.NLU_REQUEST_SOURCE,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
        )

    from chatrelay.core.nlu.dialogflow_client import DialogflowClient

    return DialogflowClient(project_id=settings.APIAI_PROJECT_ID)


__all__ = [
    "ApiAiClient",
    "NLUClient",
    "build_nlu_client",
]
