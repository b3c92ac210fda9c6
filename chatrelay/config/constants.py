"""
Application constants and enumerations.

This module defines the constant values, canned user-facing texts and
platform identifiers used throughout the relay.
"""

from enum import Enum

# Service Information
SERVICE_NAME = "chat-relay"
SERVICE_VERSION = "1.0.0"
SERVICE_DESCRIPTION = "Messenger to API.ai / Dialogflow chatbot relay"

# User-facing texts
GREETING_TEXT = "Hello world, I am a chat bot"
CLARIFICATION_TEXT = "I'm not sure what you want. Can you be more specific?"
PROVIDER_FALLBACK_TEXT = "Sorry, something went wrong. Please try again later."

# Console front-end
CONSOLE_USER_PROMPT = "User : "
CONSOLE_BOT_PREFIX = "Bot  : "
CONSOLE_ERROR_TEXT = "Have error!"
CONSOLE_FAREWELL_TEXT = "Have a great day!"

# Messenger platform
MESSENGER_OBJECT_PAGE = "page"
HUB_MODE_SUBSCRIBE = "subscribe"
DEFAULT_GRAPH_API_BASE_URL = "https://graph.facebook.com"
DEFAULT_GRAPH_API_VERSION = "v3.0"
LINK_TARGET_PREFIX = "http"

# Attachment types that are turned into an NLU query
RECOGNIZED_ATTACHMENT_TYPES = frozenset({
    "image",
    "audio",
    "video",
    "file",
    "location",
    "fallback",
    "template",
})
ATTACHMENT_QUERY_TEMPLATE = "{type} attachment"

# API.ai v1
DEFAULT_API_AI_BASE_URL = "https://api.api.ai/v1"
API_AI_PROTOCOL_VERSION = "20150910"
DEFAULT_NLU_LANGUAGE = "en"
DEFAULT_NLU_REQUEST_SOURCE = "fb"
DIALOGFLOW_LANGUAGE_CODE = "en-US"

# HTTP
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
HTTP_USER_AGENT = f"ChatRelay/{SERVICE_VERSION}"


class SenderAction(str, Enum):
    """Messenger sender actions."""
    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"


class NLUBackend(str, Enum):
    """Available NLU provider adapters."""
    API_AI = "apiai"
    DIALOGFLOW = "dialogflow"


class RunMode(str, Enum):
    """Front-ends the relay can run as."""
    SERVER = "server"
    CONSOLE = "console"

