"""Channel tap and move submission.

The host opens its network channel through a :class:`ChannelTap` instead
of calling the opener directly. The tap keeps a reference to the newest
channel so moves can be sent on it later, and lets observers see both
directions of traffic:

- outbound hooks run on every ``send``;
- inbound hooks run for every frame the host passes to ``deliver``.
"""

import json
from typing import Any, Callable, Protocol

from loguru import logger

Hook = Callable[[str], None]

# Move submission flags expected by the remote side
MOVE_BLUR = 1
MOVE_LAG_MS = 10000
MOVE_ACK = 1


class Channel(Protocol):
    """Send-capable channel with a known open/closed state."""

    @property
    def is_open(self) -> bool: ...

    def send(self, data: str) -> Any: ...

    def close(self) -> Any: ...


class TappedChannel:
    """A channel whose traffic is visible to the tap's hooks."""

    def __init__(self, channel: Channel, tap: "ChannelTap") -> None:
        self.channel = channel
        self.tap = tap

    @property
    def is_open(self) -> bool:
        return bool(self.channel.is_open)

    def send(self, data: str) -> Any:
        self.tap._run_hooks(self.tap.outbound_hooks, data)
        return self.channel.send(data)

    def deliver(self, data: str) -> None:
        """Hand an inbound frame to the inbound hooks."""
        self.tap._run_hooks(self.tap.inbound_hooks, data)

    def close(self) -> Any:
        return self.channel.close()


class ChannelTap:
    """Wrap a channel-opening callable.

    Example:
        tap = ChannelTap(websocket.create_connection)
        tap.inbound_hooks.append(feed.handle_message)
        ws = tap.open(url)
        for frame in ws.channel:
            ws.deliver(frame)
    """

    def __init__(self, opener: Callable[..., Channel]) -> None:
        self.opener = opener
        self.current: TappedChannel | None = None
        self.inbound_hooks: list[Hook] = []
        self.outbound_hooks: list[Hook] = []

    def open(self, *args: Any, **kwargs: Any) -> TappedChannel:
        """Open a channel through the wrapped opener and remember it."""
        tapped = TappedChannel(self.opener(*args, **kwargs), self)
        self.current = tapped
        logger.debug("Channel opened, reference stored for move submission")
        return tapped

    @property
    def is_open(self) -> bool:
        return self.current is not None and self.current.is_open

    @staticmethod
    def _run_hooks(hooks: list[Hook], data: str) -> None:
        for hook in list(hooks):
            try:
                hook(data)
            except Exception:
                logger.exception(f"Channel hook {hook!r} failed")


def move_payload(uci: str) -> dict[str, Any]:
    """Build the move-submission message for ``uci``."""
    return {"t": "move", "d": {"u": uci, "b": MOVE_BLUR, "l": MOVE_LAG_MS, "a": MOVE_ACK}}


class MoveSender:
    """Submit moves on the tap's current channel."""

    def __init__(self, tap: ChannelTap) -> None:
        self.tap = tap

    def submit(self, uci: str) -> bool:
        """Send ``uci`` if the channel is open.

        Returns:
            True if the move was sent. A closed or missing channel drops
            the move without retrying.
        """
        if not self.tap.is_open:
            logger.debug(f"Channel not open, dropping move {uci}")
            return False

        assert self.tap.current is not None
        self.tap.current.send(json.dumps(move_payload(uci), separators=(",", ":")))
        logger.info(f"Move submitted: {uci}")
        return True
