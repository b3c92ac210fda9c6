"""
Console front-end.

Reads user lines from stdin, answers each through the configured NLU
backend on one fixed session and prints the replies until end of input.
"""

import asyncio
import sys
from typing import Optional, TextIO

from chatrelay.config.constants import (
    CONSOLE_ERROR_TEXT,
    CONSOLE_FAREWELL_TEXT,
    CONSOLE_USER_PROMPT,
    RunMode,
)
from chatrelay.config.settings import Settings, get_settings, validate_configuration
from chatrelay.core.actions import ReplyTemplates, create_default_registry
from chatrelay.core.channels import ConsoleChannel
from chatrelay.core.nlu import build_nlu_client
from chatrelay.exceptions.base_exceptions import ConfigError, ProviderError
from chatrelay.models.types import ConversationId
from chatrelay.services.conversation_service import ConversationService
from chatrelay.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

CONSOLE_USER_ID = "console"


async def run_console(
        service: ConversationService,
        session_id: ConversationId,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None
) -> None:
    """
    Run the read-answer-print loop until the input is exhausted.

    Args:
        service: Conversation service whose channel prints the replies
        session_id: NLU session shared by every turn
        input_stream: Source of user lines (stdin by default)
        output_stream: Where prompts and the farewell go (stdout by default)
    """
    input_stream = input_stream or sys.stdin
    output_stream = output_stream or sys.stdout

    while True:
        output_stream.write(CONSOLE_USER_PROMPT)
        output_stream.flush()

        line = await asyncio.to_thread(input_stream.readline)
        if not line:
            break

        text = line.strip()
        if not text:
            continue

        try:
            replies = await service.answer(session_id, text)
        except ProviderError as e:
            e.log_error(logger, session_id=session_id)
            service.channel.write_line(CONSOLE_ERROR_TEXT)
            continue

        await service.channel.send_replies(CONSOLE_USER_ID, replies)

    output_stream.write(f"\n{CONSOLE_FAREWELL_TEXT}\n")
    output_stream.flush()


def build_console_service(settings: Settings, output: Optional[TextIO] = None) -> ConversationService:
    """Wire the console backend, registry and channel from settings."""
    templates = (
        ReplyTemplates.from_file(settings.ACTION_TEMPLATES_FILE)
        if settings.ACTION_TEMPLATES_FILE else ReplyTemplates()
    )
    return ConversationService(
        nlu_client=build_nlu_client(settings, settings.CONSOLE_NLU_BACKEND),
        registry=create_default_registry(templates),
        channel=ConsoleChannel(output=output),
    )


async def _serve(settings: Settings) -> None:
    service = build_console_service(settings)
    try:
        await run_console(service, settings.APIAI_SESSION_ID)
    finally:
        await service.nlu_client.close()


def main() -> None:
    """Entry point of ``chatrelay-console``."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL.value, settings.LOG_FORMAT)

    try:
        validate_configuration(settings, RunMode.CONSOLE)
        asyncio.run(_serve(settings))
    except ConfigError as e:
        e.log_error(logger)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.stdout.write(f"\n{CONSOLE_FAREWELL_TEXT}\n")

    sys.exit(0)


if __name__ == "__main__":
    main()
