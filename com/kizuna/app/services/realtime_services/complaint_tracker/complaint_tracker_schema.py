from datetime import datetime
from typing import Any, List, Optional, Tuple
from pydantic import Field
from com.kizuna.app.common.schema_base import CamelModel, FrozenCamelModel
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority

class ComplaintUpdate(CamelModel):
    timestamp: datetime
    status: str
    details: Any = None

class Complaint(CamelModel):
    id: str
    user_id: str
    session_id: str
    complaint: str
    business_type: str
    status: str = "received"
    timestamp: datetime
    priority: Priority
    updates: List[ComplaintUpdate] = []

class CreateComplaintRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    complaint: str = Field(..., min_length=1)
    business_type: str = "general"

class UpdateComplaintRequest(CamelModel):
    status: str = Field(..., min_length=1)
    details: Optional[Any] = None

class ComplaintSolution(FrozenCamelModel):
    """Catalogue entry: a known complaint and the scripted resolution for it"""
    id: str
    category: str
    subcategory: str
    complaint: str
    solution: str
    priority: Priority
    estimated_time: str
    escalation_required: bool = False
    local_terms: Tuple[str, ...] = ()
    common_phrases: Tuple[str, ...] = ()
    follow_up_actions: Tuple[str, ...] = ()

class SolutionRecommendations(CamelModel):
    priority: Priority
    estimated_time: str
    escalation_required: bool
    follow_up_actions: List[str]

class ComplaintResolution(CamelModel):
    complaint: Complaint
    solution: Optional[ComplaintSolution] = None
    recommendations: Optional[SolutionRecommendations] = None
