"""
Abstract NLU client.

Every provider adapter turns one utterance into an ``NLUResult`` or
raises ``ProviderError``. Adapters never retry.
"""

from abc import ABC, abstractmethod

from chatrelay.models.nlu import NLUResult
from chatrelay.models.types import ConversationId
from chatrelay.utils.logger import get_logger


class NLUClient(ABC):
    """Base class for NLU provider adapters."""

    name = "base"

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    async def query(self, conversation_id: ConversationId, text: str) -> NLUResult:
        """
        Send one utterance to the provider.

        Args:
            conversation_id: Provider session correlating the user's turns
            text: Raw user text

        Returns:
            NLUResult describing the provider's answer

        Raises:
            ProviderError: On transport failure or an error answer
        """

    async def close(self) -> None:
        """Release network resources held by the adapter."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
