"""Emission Sink: the single place confirmed positions leave the pipeline."""

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from fenwatch.core.position import NormalizedPosition

FEN_PUSH = "FENPush"

Listener = Callable[[str], None]


@dataclass
class EmissionState:
    """The last position published, used to suppress duplicates."""

    last_placement: str | None = None
    last_active: str | None = None

    def record(self, position: NormalizedPosition) -> None:
        self.last_placement = position.placement
        self.last_active = position.active

    def is_new(self, position: NormalizedPosition) -> bool:
        """True if ``position`` differs from the last emission on placement or turn."""
        return (
            position.placement != self.last_placement
            or position.active != self.last_active
        )


class EmissionSink:
    """Broadcast confirmed positions to external listeners.

    Listeners receive the raw position string under the ``FENPush``
    notification. Delivery is fire-and-forget, in subscription order; a
    listener that raises is logged and the remaining listeners still run.
    """

    name = FEN_PUSH

    def __init__(self, state: EmissionState | None = None) -> None:
        self.state = state if state is not None else EmissionState()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, raw: str | None) -> None:
        """Broadcast ``raw`` to all listeners. Empty input is ignored."""
        if not raw:
            return

        logger.debug(f"{self.name}: {raw}")
        for listener in list(self._listeners):
            try:
                listener(raw)
            except Exception:
                logger.exception(f"{self.name} listener {listener!r} failed")

    def emit(self, position: NormalizedPosition) -> None:
        """Record ``position`` as last emitted, then publish its raw string."""
        self.state.record(position)
        self.publish(position.raw)
