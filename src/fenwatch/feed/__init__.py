"""Push-feed path: direct position emission, channel tap, move submission."""

from fenwatch.feed.channel import (
    Channel,
    ChannelTap,
    MoveSender,
    TappedChannel,
    move_payload,
)
from fenwatch.feed.handler import FeedHandler
from fenwatch.feed.session import GameSession

__all__ = [
    "Channel",
    "ChannelTap",
    "FeedHandler",
    "GameSession",
    "MoveSender",
    "TappedChannel",
    "move_payload",
]
