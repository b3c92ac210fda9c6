"""
Delivery channels: Messenger Send API and console output.
"""

from chatrelay.core.channels.base_channel import BaseChannel, DeliveryResult
from chatrelay.core.channels.console_channel import ConsoleChannel
from chatrelay.core.channels.messenger_channel import MessengerChannel

__all__ = [
    "BaseChannel",
    "DeliveryResult",
    "ConsoleChannel",
    "MessengerChannel",
]
