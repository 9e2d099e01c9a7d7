from enum import Enum
from typing import List, Tuple
from pydantic import BaseModel
from com.kizuna.app.common.schema_base import FrozenCamelModel

class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]

PRIORITY_RANK = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.CRITICAL: 4,
}

class EscalationType(str, Enum):
    NONE = "none"
    COMPLAINT = "complaint"
    EMERGENCY = "emergency"

class TriageRule(BaseModel):
    """One keyword tier; tiers are evaluated in table order, first hit wins"""
    priority: Priority
    escalation_type: EscalationType
    keywords: Tuple[str, ...]

class TriageResult(FrozenCamelModel):
    priority: Priority
    escalation_type: EscalationType
    matched_keyword: str = ""

    @property
    def should_escalate(self) -> bool:
        return self.escalation_type != EscalationType.NONE or self.priority == Priority.CRITICAL

class ActionRule(BaseModel):
    action: str
    keywords: Tuple[str, ...]

class BusinessTypeRule(BaseModel):
    business_type: str
    keywords: Tuple[str, ...]

SIMPLE_ACTIONS: List[str] = [
    "GREETING_RESPONSE",
    "ACKNOWLEDGMENT",
    "DATA_BUNDLE_INQUIRY",
    "GENERAL_INQUIRY",
]
