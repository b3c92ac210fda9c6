"""
In-memory session store.

Maps a Messenger user id to the conversation id used with the NLU
provider. Entries are created on first contact and kept for the life of
the process.
"""

import asyncio
import uuid
from typing import Dict, Optional

from chatrelay.models.types import ConversationId, UserId
from chatrelay.utils.logger import get_logger

logger = get_logger(__name__)


class SessionStore:
    """User id to conversation id mapping guarded by a single lock."""

    def __init__(self):
        self._sessions: Dict[UserId, ConversationId] = {}
        self._lock = asyncio.Lock()

    async def get_or_create(self, user_id: UserId) -> ConversationId:
        """Return the user's conversation id, creating it on first call."""
        async with self._lock:
            conversation_id = self._sessions.get(user_id)
            if conversation_id is None:
                conversation_id = str(uuid.uuid1())
                self._sessions[user_id] = conversation_id
                logger.info(
                    "Session created",
                    user_id=user_id,
                    conversation_id=conversation_id
                )
            return conversation_id

    def get(self, user_id: UserId) -> Optional[ConversationId]:
        return self._sessions.get(user_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions
