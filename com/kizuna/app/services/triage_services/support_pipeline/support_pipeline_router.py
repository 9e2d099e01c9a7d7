import time
import logging
from fastapi import APIRouter, Depends, Request
from com.kizuna.app.common.network_responses import NetworkResponse, HTTPCode
from com.kizuna.app.common.service_container import ServiceContainer, get_services
from com.kizuna.app.services.triage_services.support_pipeline.support_pipeline_schema import InboundMessageRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Support Triage"])
network_response = NetworkResponse()

@router.post("/messages", response_model=dict)
async def inbound_message(
    http_request: Request,
    request: InboundMessageRequest,
    services: ServiceContainer = Depends(get_services)
):
    """
    Triage an inbound customer message

    Request body:
    - sessionId: str (required)
    - message: str (required)
    - userId: str (optional, derived from the session if missing)
    - suggestedResponse: str (optional, reply text produced upstream)
    - businessType: str (optional, detected from the message if missing)
    """
    start_time = time.time()
    logger.info(f"=== MESSAGE START === session {request.session_id}")

    try:
        if not request.message.strip():
            logger.warning("Empty message received")
            return network_response.json_response(
                http_code=HTTPCode.BAD_REQUEST,
                error_message="Message cannot be empty",
                resource=http_request.url.path,
                start_time=start_time
            )

        outcome = services.support_pipeline.handle_message(
            request.session_id,
            request.user_id,
            request.message,
            suggested_response=request.suggested_response,
            business_type=request.business_type
        )
        logger.info(f"=== MESSAGE END === requires approval: {outcome.requires_approval}")

        return network_response.success_response(
            http_code=HTTPCode.SUCCESS,
            message="Request sent for approval" if outcome.requires_approval and not outcome.auto_approved
            else "Message handled",
            data=outcome,
            resource=http_request.url.path,
            start_time=start_time
        )
    except Exception as e:
        logger.error(f"Unexpected error handling message: {str(e)}", exc_info=True)
        logger.info("=== MESSAGE END (SYSTEM ERROR) ===")
        return network_response.json_response(
            http_code=HTTPCode.INTERNAL_SERVER_ERROR,
            error_message="An unexpected error occurred. Please try again later.",
            resource=http_request.url.path,
            start_time=start_time
        )
