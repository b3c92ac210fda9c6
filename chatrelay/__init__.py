"""
Chat Relay - Messenger to NLU chatbot relay.

This package receives user text from a Facebook Messenger webhook or a
console, asks an NLU provider (API.ai / Dialogflow) what to do with it,
and delivers the resulting reply through the Messenger Send API.
"""

__version__ = "1.0.0"
__title__ = "chat-relay"

__all__ = ["__version__"]
