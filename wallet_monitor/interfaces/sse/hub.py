"""Per-account publish/subscribe hub feeding server-sent event streams."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Protocol

from wallet_monitor.modules.balances.models import BalanceSnapshot
from wallet_monitor.schemas import BalanceStreamEvent

logger = logging.getLogger(__name__)

HEARTBEAT_FRAME = ": heartbeat\n\n"

LatestLoader = Callable[[str], Awaitable[Optional[BalanceSnapshot]]]


def format_event(event: BalanceStreamEvent) -> str:
    return f"data: {event.model_dump_json(by_alias=True, exclude_none=True)}\n\n"


def initial_event(snapshot: Optional[BalanceSnapshot]) -> BalanceStreamEvent:
    if snapshot is None:
        return BalanceStreamEvent(type="initial")
    return BalanceStreamEvent(
        type="initial",
        balance=snapshot.balance,
        balance_minor_units=snapshot.balance_minor_units,
        checked_at=snapshot.checked_at,
    )


class ChannelClosedError(Exception):
    """Raised when writing to a channel whose consumer has gone away."""


class Channel(Protocol):
    async def send(self, frame: str) -> None:
        ...

    def close(self) -> None:
        ...


class QueueChannel:
    """Bounded frame queue drained by one streaming response.

    A channel whose consumer has not drained anything for ``stale_after``
    seconds while frames are waiting rejects further writes.
    """

    def __init__(
        self,
        maxsize: int = 100,
        stale_after: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=maxsize)
        self._stale_after = stale_after
        self._clock = clock
        self._last_drain = clock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_stale(self) -> bool:
        if self._stale_after is None or self._queue.empty():
            return False
        return self._clock() - self._last_drain > self._stale_after

    async def send(self, frame: str) -> None:
        if self._closed:
            raise ChannelClosedError("channel closed")
        if self.is_stale():
            self.close()
            raise ChannelClosedError("consumer stopped draining")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull as exc:
            self.close()
            raise ChannelClosedError("channel buffer full") from exc

    async def receive(self) -> Optional[str]:
        """Next frame, or ``None`` once the channel is closed."""
        if self._closed and self._queue.empty():
            return None
        frame = await self._queue.get()
        self._last_drain = self._clock()
        return frame

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            pass


@dataclass(slots=True, eq=False)
class Subscription:
    account_id: str
    channel: Channel
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class BroadcastHub:
    def __init__(
        self,
        latest_loader: Optional[LatestLoader] = None,
        *,
        heartbeat_interval: float = 30.0,
        stale_grace: float = 15.0,
        queue_size: int = 100,
    ) -> None:
        self._latest_loader = latest_loader
        self._subscribers: Dict[str, Dict[str, Subscription]] = {}
        self.heartbeat_interval = heartbeat_interval
        self.stale_grace = stale_grace
        self.queue_size = queue_size
        self._heartbeat_task: Optional[asyncio.Task] = None

    def open_channel(self) -> QueueChannel:
        return QueueChannel(
            maxsize=self.queue_size,
            stale_after=self.heartbeat_interval + self.stale_grace,
        )

    async def subscribe(self, account_id: str, channel: Optional[Channel] = None) -> Subscription:
        """Register a subscriber and send it the ``initial`` event."""
        snapshot = await self._latest_loader(account_id) if self._latest_loader else None
        subscription = Subscription(account_id=account_id, channel=channel or self.open_channel())
        self._subscribers.setdefault(account_id, {})[subscription.id] = subscription
        logger.info(
            "Stream client connected for account %s. Total: %d",
            account_id,
            len(self._subscribers[account_id]),
        )
        await self._deliver(subscription, format_event(initial_event(snapshot)))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.account_id)
        if subscribers is None or subscribers.pop(subscription.id, None) is None:
            return
        if not subscribers:
            self._subscribers.pop(subscription.account_id, None)
        subscription.channel.close()
        logger.info(
            "Stream client disconnected for account %s. Remaining: %d",
            subscription.account_id,
            len(subscribers),
        )

    async def publish(self, account_id: str, event: BalanceStreamEvent) -> int:
        """Deliver ``event`` to every subscriber of the account; returns the delivered count."""
        subscribers = list(self._subscribers.get(account_id, {}).values())
        if not subscribers:
            return 0
        frame = format_event(event)
        logger.debug("Broadcasting to %d clients for account %s", len(subscribers), account_id)
        delivered = 0
        for subscription in subscribers:
            if await self._deliver(subscription, frame):
                delivered += 1
        return delivered

    async def heartbeat(self) -> int:
        delivered = 0
        for subscribers in list(self._subscribers.values()):
            for subscription in list(subscribers.values()):
                if await self._deliver(subscription, HEARTBEAT_FRAME):
                    delivered += 1
        return delivered

    def subscriber_count(self, account_id: str) -> int:
        return len(self._subscribers.get(account_id, {}))

    def stats(self) -> dict[str, int]:
        return {account_id: len(subscribers) for account_id, subscribers in self._subscribers.items()}

    def start(self) -> None:
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

    async def stop(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        for subscribers in list(self._subscribers.values()):
            for subscription in list(subscribers.values()):
                self.unsubscribe(subscription)

    async def _deliver(self, subscription: Subscription, frame: str) -> bool:
        try:
            await subscription.channel.send(frame)
            return True
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Dropping stream client for account %s: %s", subscription.account_id, exc)
            self.unsubscribe(subscription)
            return False

    async def _heartbeat_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.heartbeat_interval)
                await self.heartbeat()
        except asyncio.CancelledError:
            logger.debug("Stream heartbeat task cancelled")
            raise
