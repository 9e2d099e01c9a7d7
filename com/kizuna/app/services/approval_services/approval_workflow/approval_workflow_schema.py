from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import Field
from com.kizuna.app.common.schema_base import CamelModel
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority

class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    AUTO_APPROVED = "auto_approved"

class ApprovalRequest(CamelModel):
    id: str
    session_id: str
    user_id: str
    user_message: str
    suggested_response: str
    suggested_action: str
    priority: Priority
    business_type: str
    language: str
    timestamp: datetime
    status: ApprovalStatus = ApprovalStatus.PENDING
    admin_id: Optional[str] = None
    admin_response: Optional[str] = None
    auto_approval_reason: Optional[str] = None
    auto_approval_rule: Optional[str] = None
    resolved_at: Optional[datetime] = None

class ApprovalStats(CamelModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    auto_approved: int = 0
    auto_approval_rate: float = 0.0
    approval_rate: float = 0.0

class CreateApprovalRequest(CamelModel):
    session_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    user_message: str = Field(..., min_length=1)
    suggested_response: str = ""
    suggested_action: str = "GENERAL_INQUIRY"
    business_type: str = "general"
    language: str = "en"

class ApproveRequestBody(CamelModel):
    admin_id: str = Field(..., min_length=1)
    admin_response: Optional[str] = None

class RejectRequestBody(CamelModel):
    admin_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
