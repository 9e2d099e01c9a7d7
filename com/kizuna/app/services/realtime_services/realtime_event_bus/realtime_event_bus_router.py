import json
import time
import uuid
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from fastapi.responses import StreamingResponse
from com.kizuna.app.common.network_responses import NetworkResponse, HTTPCode
from com.kizuna.app.common.service_container import ServiceContainer, get_services
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus_schema import BroadcastEventRequest
from com.kizuna.app.services.realtime_services.realtime_utils.transport_utils.queue_transport import QueueTransport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/realtime", tags=["Realtime"])
network_response = NetworkResponse()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

@router.get("/stream")
async def event_stream(
    http_request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    services: ServiceContainer = Depends(get_services)
):
    """Server-sent events for one user and session"""
    start_time = time.time()
    if not user_id or not session_id:
        logger.warning("Stream requested without userId or sessionId")
        return network_response.json_response(
            http_code=HTTPCode.BAD_REQUEST,
            error_message="Missing userId or sessionId",
            resource=http_request.url.path,
            start_time=start_time
        )

    stream = services.event_bus.create_stream(user_id, session_id)

    async def frames():
        try:
            async for frame in stream:
                yield frame
        finally:
            stream.close()

    return StreamingResponse(frames(), media_type="text/event-stream", headers=SSE_HEADERS)

@router.post("/events", response_model=dict)
async def broadcast_event(
    http_request: Request,
    request: BroadcastEventRequest,
    services: ServiceContainer = Depends(get_services)
):
    start_time = time.time()
    event = services.event_bus.build_event(
        request.type,
        data=request.data,
        user_id=request.user_id,
        session_id=request.session_id,
        priority=request.priority
    )
    delivered = services.event_bus.broadcast(event)
    logger.info(f"Broadcast event {event.id} to {delivered} subscribers")
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Event broadcast",
        data={"eventId": event.id, "delivered": delivered},
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("/history", response_model=dict)
async def get_event_history(
    http_request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    limit: int = Query(50, description="Number of recent events to retrieve", ge=1, le=1000),
    services: ServiceContainer = Depends(get_services)
):
    """Recent events for catch-up after a missed connection, newest first"""
    start_time = time.time()
    events = services.event_bus.get_event_history(user_id=user_id, session_id=session_id, limit=limit)
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message=f"Retrieved {len(events)} events",
        data={"events": [event.to_payload() for event in events]},
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("/connections", response_model=dict)
async def get_connections(http_request: Request, services: ServiceContainer = Depends(get_services)):
    start_time = time.time()
    subscribers = list(services.event_bus.subscribers.values())
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message=f"{len(subscribers)} live connections",
        data={"count": len(subscribers), "connections": [subscriber.describe() for subscriber in subscribers]},
        resource=http_request.url.path,
        start_time=start_time
    )

@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    user_id: str = Query(..., alias="userId"),
    session_id: str = Query(..., alias="sessionId")
):
    """
    Dashboard socket. Clients may send JSON control messages:
    {"action": "subscribe" | "unsubscribe", "types": [...]} or {"action": "ping"}.
    """
    services: ServiceContainer = websocket.app.state.services
    bus = services.event_bus
    await websocket.accept()

    connection_id = f"ws_{uuid.uuid4().hex}"
    transport = QueueTransport(maxsize=services.config.subscriber_queue_size)
    bus.add_connection(connection_id, user_id, session_id, transport)

    async def pump():
        while True:
            frame = await transport.receive()
            if frame is None:
                break
            await websocket.send_text(frame)
        # transport closed by the bus: evicted, swept or shut down
        if websocket.application_state == WebSocketState.CONNECTED:
            logger.info(f"Closing socket {connection_id} after eviction")
            await websocket.close()

    pump_task = asyncio.create_task(pump())
    try:
        while websocket.application_state == WebSocketState.CONNECTED:
            text = await websocket.receive_text()
            if not bus.touch(connection_id):
                logger.info(f"Socket {connection_id} is no longer registered, ending session")
                break
            _handle_control_message(bus, connection_id, text, transport)
    except WebSocketDisconnect:
        logger.info(f"Socket {connection_id} disconnected")
    finally:
        bus.remove_connection(connection_id)
        pump_task.cancel()
        await asyncio.gather(pump_task, return_exceptions=True)

def _handle_control_message(bus, connection_id: str, text: str, transport: QueueTransport) -> None:
    try:
        message = json.loads(text)
        action = message.get("action")
        if action in ("subscribe", "unsubscribe"):
            operation = bus.subscribe if action == "subscribe" else bus.unsubscribe
            if not operation(connection_id, message.get("types", [])):
                _send_reply(bus, connection_id, transport, {"type": "error", "error": f"invalid event types for {action}"})
        elif action == "ping":
            _send_reply(bus, connection_id, transport, {"type": "pong"})
        else:
            logger.debug(f"Ignoring unknown action from {connection_id}: {action}")
    except (ValueError, AttributeError) as e:
        logger.warning(f"Bad control message from {connection_id}: {e}")
        _send_reply(bus, connection_id, transport, {"type": "error", "error": "invalid control message"})

def _send_reply(bus, connection_id: str, transport: QueueTransport, message: dict) -> None:
    """Reply on the socket's own queue; a closed or full queue evicts the connection"""
    try:
        transport.send(json.dumps(message))
    except ConnectionError as e:
        logger.warning(f"Cannot reply to {connection_id}, evicting: {e}")
        bus.remove_connection(connection_id)
