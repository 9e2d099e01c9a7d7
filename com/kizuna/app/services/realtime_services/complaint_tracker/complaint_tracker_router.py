import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from com.kizuna.app.common.network_responses import NetworkResponse, HTTPCode
from com.kizuna.app.common.service_container import ServiceContainer, get_services
from com.kizuna.app.services.realtime_services.complaint_tracker.complaint_tracker_schema import (
    CreateComplaintRequest, UpdateComplaintRequest
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/complaints", tags=["Complaints"])
network_response = NetworkResponse()

@router.post("", response_model=dict)
async def create_complaint(
    http_request: Request,
    request: CreateComplaintRequest,
    services: ServiceContainer = Depends(get_services)
):
    start_time = time.time()
    resolution = services.complaint_tracker.file_complaint(
        request.user_id, request.session_id, request.complaint, request.business_type
    )
    message = "Complaint received, solution provided" if resolution.solution else "Complaint received, needs analysis"
    return network_response.success_response(
        http_code=HTTPCode.CREATED,
        message=message,
        data=resolution,
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("", response_model=dict)
async def list_solutions(
    http_request: Request,
    business_type: Optional[str] = Query(None, alias="businessType"),
    category: Optional[str] = Query(None),
    services: ServiceContainer = Depends(get_services)
):
    start_time = time.time()
    solutions = services.complaint_tracker.list_solutions(business_type, category)
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message=f"{len(solutions)} catalogue entries",
        data={"complaints": solutions},
        resource=http_request.url.path,
        start_time=start_time
    )

@router.post("/{complaint_id}/status", response_model=dict)
async def update_complaint(
    complaint_id: str,
    http_request: Request,
    request: UpdateComplaintRequest,
    services: ServiceContainer = Depends(get_services)
):
    start_time = time.time()
    if not services.complaint_tracker.update_complaint(complaint_id, request.status, request.details):
        return network_response.json_response(
            http_code=HTTPCode.NOT_FOUND,
            error_message=f"Complaint {complaint_id} not found",
            resource=http_request.url.path,
            start_time=start_time
        )
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Complaint updated",
        data=services.complaint_tracker.get_complaint(complaint_id),
        resource=http_request.url.path,
        start_time=start_time
    )

@router.get("/{complaint_id}", response_model=dict)
async def get_complaint(complaint_id: str, http_request: Request, services: ServiceContainer = Depends(get_services)):
    start_time = time.time()
    complaint = services.complaint_tracker.get_complaint(complaint_id)
    if complaint is None:
        return network_response.json_response(
            http_code=HTTPCode.NOT_FOUND,
            error_message=f"Complaint {complaint_id} not found",
            resource=http_request.url.path,
            start_time=start_time
        )
    return network_response.success_response(
        http_code=HTTPCode.SUCCESS,
        message="Complaint retrieved",
        data=complaint,
        resource=http_request.url.path,
        start_time=start_time
    )
