"""Server-sent event broadcast hub."""

from .hub import (
    HEARTBEAT_FRAME,
    BroadcastHub,
    Channel,
    ChannelClosedError,
    QueueChannel,
    Subscription,
    format_event,
    initial_event,
)

__all__ = [
    "HEARTBEAT_FRAME",
    "BroadcastHub",
    "Channel",
    "ChannelClosedError",
    "QueueChannel",
    "Subscription",
    "format_event",
    "initial_event",
]
