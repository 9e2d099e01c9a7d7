import time
import logging
from fastapi import APIRouter, Depends, Request
from com.kizuna.app.common.network_responses import NetworkResponse, HTTPCode
from com.kizuna.app.common.service_container import ServiceContainer, get_services
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import (
    ApproveRequestBody, CreateApprovalRequest, RejectRequestBody
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/approvals", tags=["Approvals"])
network_response = NetworkResponse()

@router.post("", response_model=dict)
async def create_approval_request(
    http_request: Request,
    request: CreateApprovalRequest,
    services: ServiceContainer = Depends(get_services)
):
    """Create an approval request for a suggested bot reply"""
    start_time = time.time()
    logger.info(f"=== CREATE APPROVAL START === session {request.session_id}")

    try:
        approval = services.approval_workflow.create_request(
            request.session_id,
            request.user_id,
            request.user_message,
            request.suggested_response,
            request.suggested_action,
            request.business_type,
            request.language
        )
        if approval is None:
            return network_response.json_response(
                http_code=HTTPCode.BAD_REQUEST,
                error_message="sessionId, userId and userMessage are required",
                resource=http_request.url.path,
                start_time=start_time
            )

        logger.info(f"=== CREATE APPROVAL END === {approval.id} ({approval.status.value})")
        return network_response.success_response(
            http_code=HTTPCode.CREATED,
            message="Approval request created",
            data=approval,
            resource=http_request.url.path,
            start_time=start_time
        )
    except Exception as e:
        logger.error(f"Unexpected error creating approval request: {str(e)}", exc_info=True)
        return network_response.json_response(
            http_code=HTTPCode.INTERNAL_SERVER_ERROR,
            error_message="An unexpected error occurred. Please try again later.",
            resource=http_request.url.path,
            start_time=start_time
        )

@router.get("/pending", response_model=dict)
async def get_pending_approvals(http_request: Request, services: ServiceContainer = Depends(get_services)):
    start_time = time.time()
    pending = services.approval_workflow.list_pending()
    logger.debug(f"Returning {len(pending)} pending approvals")
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message=f"Retrieved {len(pending)} pending approvals",
        data={"approvals": pending, "stats": services.approval_workflow.get_stats()},
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("/stats", response_model=dict)
async def get_approval_stats(http_request: Request, services: ServiceContainer = Depends(get_services)):
    start_time = time.time()
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Approval statistics retrieved",
        data=services.approval_workflow.get_stats(),
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("/{request_id}", response_model=dict)
async def get_approval_request(request_id: str, http_request: Request, services: ServiceContainer = Depends(get_services)):
    start_time = time.time()
    approval = services.approval_workflow.get_request(request_id)
    if approval is None:
        return network_response.json_response(
            http_code=HTTPCode.NOT_FOUND,
            error_message=f"Approval request {request_id} not found",
            resource=http_request.url.path,
            start_time=start_time
        )
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Approval request retrieved",
        data=approval,
        resource=http_request.url.path,
        start_time=start_time
    )

@router.post("/{request_id}/approve", response_model=dict)
async def approve_request(
    request_id: str,
    http_request: Request,
    body: ApproveRequestBody,
    services: ServiceContainer = Depends(get_services)
):
    """Approve a pending request, optionally overriding the reply text"""
    start_time = time.time()
    logger.info(f"=== APPROVE START === {request_id} by {body.admin_id}")

    if services.approval_workflow.get_request(request_id) is None:
        return network_response.json_response(
            http_code=HTTPCode.NOT_FOUND,
            error_message=f"Approval request {request_id} not found",
            resource=http_request.url.path,
            start_time=start_time
        )

    if not services.approval_workflow.approve(request_id, body.admin_id, body.admin_response):
        logger.info(f"=== APPROVE END (CONFLICT) === {request_id}")
        return network_response.json_response(
            http_code=HTTPCode.CONFLICT,
            error_message="Request is not pending and cannot be approved",
            resource=http_request.url.path,
            start_time=start_time
        )

    logger.info(f"=== APPROVE END === {request_id}")
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Request approved",
        data=services.approval_workflow.get_request(request_id),
        resource=http_request.url.path,
        start_time=start_time
    )

@router.post("/{request_id}/reject", response_model=dict)
async def reject_request(
    request_id: str,
    http_request: Request,
    body: RejectRequestBody,
    services: ServiceContainer = Depends(get_services)
):
    start_time = time.time()
    logger.info(f"=== REJECT START === {request_id} by {body.admin_id}")

    if services.approval_workflow.get_request(request_id) is None:
        return network_response.json_response(
            http_code=HTTPCode.NOT_FOUND,
            error_message=f"Approval request {request_id} not found",
            resource=http_request.url.path,
            start_time=start_time
        )

    if not services.approval_workflow.reject(request_id, body.admin_id, body.reason):
        logger.info(f"=== REJECT END (CONFLICT) === {request_id}")
        return network_response.json_response(
            http_code=HTTPCode.CONFLICT,
            error_message="Request is not pending and cannot be rejected",
            resource=http_request.url.path,
            start_time=start_time
        )

    logger.info(f"=== REJECT END === {request_id}")
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Request rejected",
        data=services.approval_workflow.get_request(request_id),
        resource=http_request.url.path,
        start_time=start_time
    )
