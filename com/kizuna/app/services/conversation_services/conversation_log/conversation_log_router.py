import time
import logging
from fastapi import APIRouter, Depends, Request
from com.kizuna.app.common.network_responses import NetworkResponse, HTTPCode
from com.kizuna.app.common.service_container import ServiceContainer, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/conversations", tags=["Conversations"])
network_response = NetworkResponse()

@router.get("/active", response_model=dict)
async def get_active_conversations(http_request: Request, services: ServiceContainer = Depends(get_services)):
    """Active conversations, most recently active first"""
    start_time = time.time()
    conversations = services.conversation_logs.get_active_conversations()
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message=f"Retrieved {len(conversations)} active conversations",
        data={"conversations": conversations},
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("/{session_id}", response_model=dict)
async def get_conversation_log(session_id: str, http_request: Request, services: ServiceContainer = Depends(get_services)):
    start_time = time.time()
    conversation = services.conversation_logs.get(session_id)
    if conversation is None:
        logger.debug(f"No conversation log for session {session_id}")
        return network_response.json_response(
            http_code=HTTPCode.NOT_FOUND,
            error_message=f"No conversation found for session {session_id}",
            resource=http_request.url.path,
            start_time=start_time
        )
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Conversation retrieved",
        data=conversation,
        resource=http_request.url.path,
        start_time=start_time
    )
