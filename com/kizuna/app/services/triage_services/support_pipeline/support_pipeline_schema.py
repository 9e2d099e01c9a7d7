from typing import Optional
from pydantic import Field
from com.kizuna.app.common.schema_base import CamelModel
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import ApprovalRequest
from com.kizuna.app.services.language_services.language_detector.language_detector_schema import LanguageDetectionResult
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import TriageResult

class InboundMessageRequest(CamelModel):
    session_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    message: str = Field(..., min_length=1, max_length=4000)
    suggested_response: Optional[str] = None
    business_type: Optional[str] = None

class TriageOutcome(CamelModel):
    session_id: str
    user_id: str
    language: LanguageDetectionResult
    triage: TriageResult
    should_escalate: bool
    suggested_action: str
    business_type: str
    requires_approval: bool
    approval_request: Optional[ApprovalRequest] = None
    response: Optional[str] = None
    auto_approved: bool = False
