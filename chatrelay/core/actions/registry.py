"""
Action registry.

Maps the action names returned by the NLU provider to handler
functions building the replies. Handlers are plain functions of the NLU
result and the reply templates, so each one can be tested on its own
and new actions are added by registering, not by editing a dispatcher.
"""

from typing import Callable, Dict, List, Optional

from chatrelay.config.constants import CLARIFICATION_TEXT
from chatrelay.core.actions.templates import ReplyTemplates
from chatrelay.models.nlu import NLUResult
from chatrelay.models.replies import OutboundReply, TextReply
from chatrelay.models.types import ActionName
from chatrelay.utils.logger import get_logger

logger = get_logger(__name__)

ActionHandler = Callable[[NLUResult, ReplyTemplates], List[OutboundReply]]


def echo_fulfillment(result: NLUResult) -> List[OutboundReply]:
    """Reply with the provider's own text, or ask for clarification."""
    return [TextReply(text=result.fulfillment_text or CLARIFICATION_TEXT)]


class ActionRegistry:
    """Registry of action handlers sharing one set of templates."""

    def __init__(self, templates: Optional[ReplyTemplates] = None):
        self.templates = templates if templates is not None else ReplyTemplates()
        self._handlers: Dict[ActionName, ActionHandler] = {}

    def register(self, action: ActionName, handler: Optional[ActionHandler] = None):
        """
        Register ``handler`` for ``action``.

        Usable directly or as a decorator::

            @registry.register("send-map")
            def send_map(result, templates): ...
        """
        def _register(func: ActionHandler) -> ActionHandler:
            if action in self._handlers:
                logger.warning("Replacing action handler", action=action)
            self._handlers[action] = func
            return func

        if handler is not None:
            return _register(handler)
        return _register

    def get(self, action: ActionName) -> Optional[ActionHandler]:
        return self._handlers.get(action)

    @property
    def actions(self) -> List[ActionName]:
        return sorted(self._handlers)

    def __contains__(self, action: object) -> bool:
        return action in self._handlers

    def dispatch(self, action: ActionName, result: NLUResult) -> List[OutboundReply]:
        """Build the replies for ``action``; unknown actions echo the text."""
        handler = self._handlers.get(action)
        if handler is None:
            logger.debug("Unhandled action, echoing fulfillment text", action=action)
            return echo_fulfillment(result)
        return handler(result, self.templates)
