import logging
from typing import List, Optional
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import (
    Priority, EscalationType, TriageRule, ActionRule, BusinessTypeRule
)

logger = logging.getLogger(__name__)

# Urgency tiers, highest first
TRIAGE_RULES: List[TriageRule] = [
    TriageRule(
        priority=Priority.CRITICAL,
        escalation_type=EscalationType.EMERGENCY,
        keywords=("emergency", "urgent", "critical", "fraud", "security", "hack", "stolen"),
    ),
    TriageRule(
        priority=Priority.HIGH,
        escalation_type=EscalationType.COMPLAINT,
        keywords=("problem", "issue", "not working", "broken", "failed", "error", "complaint"),
    ),
    TriageRule(
        priority=Priority.MEDIUM,
        escalation_type=EscalationType.NONE,
        keywords=("help", "support", "question", "how to", "need", "want"),
    ),
]

# Suggested next action, first hit wins
ACTION_RULES: List[ActionRule] = [
    ActionRule(action="GREETING_RESPONSE", keywords=("hello", "hi")),
    ActionRule(action="ACKNOWLEDGMENT", keywords=("thank",)),
    ActionRule(action="DATA_BUNDLE_INQUIRY", keywords=("data", "bundle")),
    ActionRule(action="NETWORK_TROUBLESHOOTING", keywords=("network", "signal")),
    ActionRule(action="BILLING_INQUIRY", keywords=("bill", "payment")),
    ActionRule(action="ACCOUNT_INQUIRY", keywords=("account", "balance")),
    ActionRule(action="LOAN_APPLICATION_INFO", keywords=("loan", "borrow")),
    ActionRule(action="TECHNICAL_SUPPORT", keywords=("problem", "issue", "not working")),
    ActionRule(action="URGENT_ESCALATION", keywords=("urgent", "emergency")),
]
DEFAULT_ACTION = "GENERAL_INQUIRY"

# Messages containing any of these always go to a human
ALWAYS_REVIEW_KEYWORDS = (
    "urgent", "emergency", "critical", "fraud", "security", "hack", "stolen",
    "complaint", "angry", "frustrated", "terrible", "awful", "hate",
    "refund", "dispute", "legal", "court", "lawyer",
)

BUSINESS_TYPE_RULES: List[BusinessTypeRule] = [
    BusinessTypeRule(business_type="telecom", keywords=("data", "network", "airtime")),
    BusinessTypeRule(business_type="banking", keywords=("account", "bank", "loan")),
    BusinessTypeRule(business_type="utilities", keywords=("power", "water", "electricity")),
    BusinessTypeRule(business_type="ecommerce", keywords=("order", "delivery", "product")),
]
GENERAL_BUSINESS_TYPE = "general"

def find_keyword(message: str, keywords) -> Optional[str]:
    """First keyword found as a case-insensitive substring of message"""
    message_lower = (message or "").lower()
    for keyword in keywords:
        if keyword in message_lower:
            return keyword
    return None
