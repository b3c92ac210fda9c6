"""
Action dispatch: registry, built-in handlers, templates and reply resolution.
"""

from chatrelay.core.actions.handlers import DEFAULT_ACTIONS, create_default_registry
from chatrelay.core.actions.registry import ActionHandler, ActionRegistry
from chatrelay.core.actions.resolver import resolve_replies
from chatrelay.core.actions.templates import ReplyTemplates

__all__ = [
    "DEFAULT_ACTIONS",
    "ActionHandler",
    "ActionRegistry",
    "ReplyTemplates",
    "create_default_registry",
    "resolve_replies",
]
