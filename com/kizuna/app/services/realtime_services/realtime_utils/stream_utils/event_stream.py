import logging
from typing import Callable
from com.kizuna.app.services.realtime_services.realtime_utils.transport_utils.queue_transport import QueueTransport

logger = logging.getLogger(__name__)

class EventStream:
    """
    Async iterator over the SSE frames of one subscriber.

    Closing is idempotent and deregisters the subscriber synchronously, so
    nothing broadcast after ``close`` returns is ever yielded.
    """

    def __init__(self, subscriber_id: str, transport: QueueTransport, on_close: Callable[[str], bool]):
        self.subscriber_id = subscriber_id
        self.transport = transport
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        frame = await self.transport.receive()
        if frame is None or self._closed:
            self.close()
            raise StopAsyncIteration
        return frame

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._on_close(self.subscriber_id)
        logger.debug(f"Event stream {self.subscriber_id} closed")

    async def aclose(self) -> None:
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
