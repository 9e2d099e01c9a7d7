import asyncio
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

_CLOSED = object()

class TransportClosedError(ConnectionError):
    """Send attempted on a transport that has been closed"""

class SlowConsumerError(ConnectionError):
    """Consumer fell too far behind and its buffer is full"""

class QueueTransport:
    """
    Non-blocking sink backed by a bounded asyncio queue.

    ``send`` never waits: a full buffer raises ``SlowConsumerError`` so the
    broadcaster can evict the subscriber instead of stalling everyone else.
    The consumer drains frames with ``receive``, which returns ``None`` once
    the transport is closed and every frame queued before closing was read.
    """

    def __init__(self, maxsize: int = 1000):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: Union[str, bytes]) -> None:
        if self._closed:
            raise TransportClosedError("transport is closed")
        try:
            self.queue.put_nowait(frame)
        except asyncio.QueueFull:
            raise SlowConsumerError(f"consumer buffer full ({self.queue.maxsize} frames)")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            # wakes a consumer blocked on an empty queue
            self.queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass

    async def receive(self) -> Optional[Union[str, bytes]]:
        if self._closed and self.queue.empty():
            return None
        item = await self.queue.get()
        if item is _CLOSED:
            return None
        return item

    def pending(self) -> int:
        return self.queue.qsize()
