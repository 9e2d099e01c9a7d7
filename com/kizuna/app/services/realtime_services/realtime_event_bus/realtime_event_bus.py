import json
import time
import uuid
import asyncio
import logging
import contextlib
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus_schema import (
    EventType, RealtimeEvent, Subscriber, Frame
)
from com.kizuna.app.services.realtime_services.realtime_utils.transport_utils.queue_transport import QueueTransport
from com.kizuna.app.services.realtime_services.realtime_utils.stream_utils.event_stream import EventStream

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def generate_event_id(prefix: str, key: Optional[str] = None) -> str:
    parts = [prefix]
    if key:
        parts.append(key)
    parts.append(str(int(time.time() * 1000)))
    parts.append(uuid.uuid4().hex[:9])
    return "_".join(parts)

def connection_predicate(subscriber: Subscriber, event: RealtimeEvent) -> bool:
    """Routing rule for socket connections"""
    if event.user_id and event.user_id == subscriber.user_id:
        return True
    if event.session_id and event.session_id == subscriber.session_id:
        return True
    if event.priority == Priority.CRITICAL:
        return True
    return event.type.value in subscriber.subscriptions

def stream_predicate(subscriber: Subscriber, event: RealtimeEvent) -> bool:
    """Routing rule for SSE streams: only the caller's own user or session"""
    return event.user_id == subscriber.user_id or event.session_id == subscriber.session_id

def encode_sse_frame(payload: Dict[str, Any]) -> bytes:
    return f"data: {json.dumps(payload)}\n\n".encode("utf-8")

def encode_sse_event(event: RealtimeEvent) -> bytes:
    return encode_sse_frame(event.to_payload())

def encode_socket_event(event: RealtimeEvent) -> str:
    return json.dumps({"type": "realtime_event", "data": event.to_payload()})

def parse_event_types(event_types: Iterable[str]) -> Optional[List[str]]:
    """Validated event type values, or None when any entry is unknown"""
    try:
        return [EventType(event_type).value for event_type in event_types]
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected event types {event_types!r}: {e}")
        return None

class RealtimeEventBus:
    """
    In-process pub/sub for dashboards and customer streams.

    All mutation happens on the event loop thread. ``broadcast`` is a plain
    synchronous loop: each delivery is a non-blocking ``send`` on the
    subscriber's transport, and any failure evicts only that subscriber.
    """

    def __init__(
        self,
        history_size: int = 1000,
        idle_timeout_seconds: float = 30 * 60,
        sweep_interval_seconds: float = 5 * 60,
        subscriber_queue_size: int = 1000,
        clock: Callable[[], datetime] = utc_now
    ):
        self.subscribers: Dict[str, Subscriber] = {}
        self.event_history: Deque[RealtimeEvent] = deque(maxlen=history_size)
        self.history_size = history_size
        self.idle_timeout = timedelta(seconds=idle_timeout_seconds)
        self.sweep_interval_seconds = sweep_interval_seconds
        self.subscriber_queue_size = subscriber_queue_size
        self.clock = clock
        self._sweep_task: Optional[asyncio.Task] = None
        logger.debug(f"RealtimeEventBus initialized - history {history_size}, idle timeout {idle_timeout_seconds}s")

    # Lifecycle

    async def start(self) -> None:
        """Start the periodic idle-connection sweep on the running loop"""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("Realtime event bus started")

    async def shutdown(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        for subscriber_id in list(self.subscribers):
            self.remove_connection(subscriber_id)
        logger.info("Realtime event bus shut down")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            self.sweep_idle_connections()

    def sweep_idle_connections(self, now: Optional[datetime] = None) -> List[str]:
        """Evict socket connections idle for longer than the timeout"""
        now = now or self.clock()
        expired = [
            subscriber.id for subscriber in self.subscribers.values()
            if subscriber.idle_evictable and now - subscriber.last_activity > self.idle_timeout
        ]
        for subscriber_id in expired:
            logger.info(f"Evicting idle connection {subscriber_id}")
            self.remove_connection(subscriber_id)
        return expired

    # Connection table

    def add_connection(
        self,
        connection_id: str,
        user_id: str,
        session_id: str,
        transport: Any,
        subscriptions: Optional[Iterable[str]] = None
    ) -> Subscriber:
        """Register a socket-style connection and send it the handshake"""
        if connection_id in self.subscribers:
            logger.warning(f"Connection {connection_id} already registered, replacing it")
            self.remove_connection(connection_id)

        subscriber = Subscriber(
            id=connection_id,
            user_id=user_id,
            session_id=session_id,
            transport=transport,
            predicate=connection_predicate,
            encoder=encode_socket_event,
            last_activity=self.clock(),
            subscriptions=set(subscriptions or [])
        )
        self.subscribers[connection_id] = subscriber
        self._deliver(subscriber, json.dumps({
            "type": "connection_established",
            "data": {"connectionId": connection_id, "timestamp": self.clock().isoformat()}
        }))
        logger.info(f"Connection established: {connection_id}")
        return subscriber

    def remove_connection(self, connection_id: str) -> bool:
        subscriber = self.subscribers.pop(connection_id, None)
        if subscriber is None:
            return False
        try:
            subscriber.transport.close()
        except Exception as e:
            logger.debug(f"Error closing transport for {connection_id}: {e}")
        logger.info(f"Connection removed: {connection_id}")
        return True

    def get_connection(self, connection_id: str) -> Optional[Subscriber]:
        return self.subscribers.get(connection_id)

    def get_connection_count(self) -> int:
        return len(self.subscribers)

    def touch(self, connection_id: str) -> bool:
        """Record client activity so the sweep keeps the connection"""
        subscriber = self.subscribers.get(connection_id)
        if subscriber is None:
            return False
        subscriber.last_activity = self.clock()
        return True

    def subscribe(self, connection_id: str, event_types: Iterable[str]) -> bool:
        """Add event types to a connection; an unknown type rejects the whole call"""
        subscriber = self.subscribers.get(connection_id)
        types = parse_event_types(event_types)
        if subscriber is None or types is None:
            return False
        subscriber.subscriptions.update(types)
        logger.debug(f"Connection {connection_id} subscriptions: {sorted(subscriber.subscriptions)}")
        return True

    def unsubscribe(self, connection_id: str, event_types: Iterable[str]) -> bool:
        subscriber = self.subscribers.get(connection_id)
        types = parse_event_types(event_types)
        if subscriber is None or types is None:
            return False
        subscriber.subscriptions.difference_update(types)
        return True

    # Streams

    def create_stream(self, user_id: str, session_id: str) -> EventStream:
        """Open an SSE stream; the handshake frame is always the first frame"""
        subscriber_id = f"sse_{uuid.uuid4().hex}"
        transport = QueueTransport(maxsize=self.subscriber_queue_size)
        transport.send(encode_sse_frame({
            "type": "connection_established",
            "timestamp": self.clock().isoformat(),
            "userId": user_id,
            "sessionId": session_id,
        }))
        self.subscribers[subscriber_id] = Subscriber(
            id=subscriber_id,
            user_id=user_id,
            session_id=session_id,
            transport=transport,
            predicate=stream_predicate,
            encoder=encode_sse_event,
            last_activity=self.clock(),
            idle_evictable=False
        )
        logger.info(f"Event stream opened: {subscriber_id} (user {user_id}, session {session_id})")
        return EventStream(subscriber_id, transport, self.remove_connection)

    # Broadcasting

    def broadcast(self, event: RealtimeEvent) -> int:
        """Record the event and deliver it to every matching subscriber"""
        self.event_history.append(event)
        delivered = 0
        for subscriber in list(self.subscribers.values()):
            if subscriber.id not in self.subscribers:
                continue
            if not subscriber.predicate(subscriber, event):
                continue
            if self._deliver(subscriber, subscriber.encoder(event)):
                delivered += 1
        logger.debug(f"Broadcast {event.type.value} event {event.id} to {delivered} subscribers")
        return delivered

    def _deliver(self, subscriber: Subscriber, frame: Frame) -> bool:
        try:
            subscriber.transport.send(frame)
        except Exception as e:
            logger.warning(f"Failed to deliver to {subscriber.id}, evicting: {e}")
            self.remove_connection(subscriber.id)
            return False
        subscriber.last_activity = self.clock()
        return True

    def get_event_history(
        self,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        limit: int = 50
    ) -> List[RealtimeEvent]:
        """Most recent matching events, newest first"""
        if limit <= 0:
            return []
        events = list(self.event_history)
        if user_id:
            events = [event for event in events if event.user_id == user_id]
        if session_id:
            events = [event for event in events if event.session_id == session_id]
        return list(reversed(events[-limit:]))

    # Convenience emitters

    def build_event(
        self,
        event_type: EventType,
        data: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
        key: Optional[str] = None
    ) -> RealtimeEvent:
        event_type = EventType(event_type)
        return RealtimeEvent(
            id=generate_event_id(event_type.value, key),
            type=event_type,
            timestamp=self.clock(),
            data=data or {},
            user_id=user_id,
            session_id=session_id,
            priority=Priority(priority)
        )

    def send_complaint_update(self, complaint_id: str, status: str, details: Any) -> RealtimeEvent:
        event = self.build_event(
            EventType.COMPLAINT,
            data={"complaintId": complaint_id, "status": status, "details": details, "action": "status_update"},
            priority=Priority.MEDIUM,
            key=complaint_id
        )
        self.broadcast(event)
        return event

    def send_solution_notification(self, user_id: str, solution: Any) -> RealtimeEvent:
        event = self.build_event(
            EventType.SOLUTION,
            data={"solution": solution, "action": "solution_provided"},
            user_id=user_id,
            priority=Priority.HIGH,
            key=user_id
        )
        self.broadcast(event)
        return event

    def send_escalation_alert(self, session_id: str, reason: str, priority: Priority = Priority.HIGH) -> RealtimeEvent:
        priority = Priority(priority)
        event = self.build_event(
            EventType.ESCALATION,
            data={
                "reason": reason,
                "action": "escalation_required",
                "requiresImmediate": priority == Priority.CRITICAL,
            },
            session_id=session_id,
            priority=priority,
            key=session_id
        )
        self.broadcast(event)
        return event

    def send_status_update(
        self,
        data: Dict[str, Any],
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        priority: Priority = Priority.LOW
    ) -> RealtimeEvent:
        event = self.build_event(EventType.STATUS_UPDATE, data=data, user_id=user_id,
                                 session_id=session_id, priority=priority)
        self.broadcast(event)
        return event

    def send_voice_call_event(self, session_id: str, event_type: str, data: Optional[Dict[str, Any]] = None) -> RealtimeEvent:
        payload = {"eventType": event_type}
        payload.update(data or {})
        event = self.build_event(EventType.VOICE_CALL, data=payload, session_id=session_id,
                                 priority=Priority.HIGH, key=session_id)
        self.broadcast(event)
        return event
