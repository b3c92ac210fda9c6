"""
Console channel: prints replies instead of sending them.
"""

import json
import sys
from typing import Any, Dict, List, Optional, TextIO

from chatrelay.config.constants import CONSOLE_BOT_PREFIX
from chatrelay.core.channels.base_channel import BaseChannel, DeliveryResult
from chatrelay.models.replies import (
    GenericCardReply,
    ImageReply,
    OutboundReply,
    PayloadReply,
    QuickReplyReply,
    TextReply,
    VideoReply,
)
from chatrelay.models.types import RecipientId
from chatrelay.utils.metrics import RelayMetrics


def _describe_button(button) -> str:
    target = button.url if button.type == "web_url" else button.payload
    return f"{button.title} -> {target}"


class ConsoleChannel(BaseChannel):
    """Writes each reply as ``Bot  : <line>`` to an output stream."""

    def __init__(self, output: Optional[TextIO] = None, metrics: Optional[RelayMetrics] = None):
        super().__init__(metrics)
        self.output = output or sys.stdout

    @property
    def channel_name(self) -> str:
        return "console"

    def format_message(self, reply: OutboundReply) -> Dict[str, Any]:
        """Render a reply as printable lines."""
        lines: List[str]

        if isinstance(reply, TextReply):
            lines = [reply.text]
        elif isinstance(reply, ImageReply):
            lines = [f"[image] {reply.url}"]
        elif isinstance(reply, VideoReply):
            lines = [f"[{e.media_type}] {e.url}" for e in reply.elements]
        elif isinstance(reply, QuickReplyReply):
            options = " | ".join(r.title for r in reply.replies)
            lines = [f"{reply.text} [{options}]"]
        elif isinstance(reply, GenericCardReply):
            lines = []
            for element in reply.elements:
                line = f"[card] {element.title}"
                if element.subtitle:
                    line += f" - {element.subtitle}"
                if element.buttons:
                    line += " (" + ", ".join(_describe_button(b) for b in element.buttons) + ")"
                lines.append(line)
        elif isinstance(reply, PayloadReply):
            text = reply.message.get("text")
            lines = [text if isinstance(text, str) else json.dumps(reply.message)]
        else:
            raise TypeError(f"Unsupported reply type: {type(reply).__name__}")

        return {"lines": lines}

    async def send_reply(self, recipient_id: RecipientId, reply: OutboundReply) -> DeliveryResult:
        for line in self.format_message(reply)["lines"]:
            self.write_line(line)
        return self._create_success_result(recipient_id, kind=reply.type)

    def write_line(self, text: str) -> None:
        self.output.write(f"{CONSOLE_BOT_PREFIX}{text}\n")
        self.output.flush()
