import re
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import ApprovalRequest
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority

logger = logging.getLogger(__name__)

GREETING_KEYWORDS = ["hello", "hi", "hujambo", "nkulamuse", "good morning", "good afternoon"]
INFO_KEYWORDS = ["hours", "location", "contact", "phone number", "address"]
ACKNOWLEDGMENT_KEYWORDS = ["thank", "thanks", "webale", "asante", "ok", "okay"]

@dataclass(frozen=True)
class AutoApprovalRule:
    name: str
    predicate: Callable[[ApprovalRequest], bool]
    reason: str

def contains_keyword(text: str, keywords: Sequence[str]) -> bool:
    """Whole-word, case-insensitive keyword check ("hi" does not match "this")"""
    text_lower = (text or "").lower()
    return any(re.search(rf"\b{re.escape(keyword)}\b", text_lower) for keyword in keywords)

def is_greeting(request: ApprovalRequest) -> bool:
    return contains_keyword(request.user_message, GREETING_KEYWORDS)

def is_basic_info(request: ApprovalRequest) -> bool:
    return contains_keyword(request.user_message, INFO_KEYWORDS) and request.priority == Priority.LOW

def is_faq(request: ApprovalRequest) -> bool:
    return "FAQ" in (request.suggested_action or "") and request.priority != Priority.CRITICAL

def is_acknowledgment(request: ApprovalRequest) -> bool:
    return contains_keyword(request.user_message, ACKNOWLEDGMENT_KEYWORDS)

# Evaluated in this order; the first match supplies the reason
DEFAULT_AUTO_APPROVAL_RULES: List[AutoApprovalRule] = [
    AutoApprovalRule("greeting", is_greeting, "Standard greeting response"),
    AutoApprovalRule("basic_info", is_basic_info, "Basic information request"),
    AutoApprovalRule("faq", is_faq, "FAQ response"),
    AutoApprovalRule("acknowledgment", is_acknowledgment, "Simple acknowledgment"),
]

def match_auto_approval_rule(request: ApprovalRequest, rules: Sequence[AutoApprovalRule]) -> Optional[AutoApprovalRule]:
    """First matching rule, never one for a critical request"""
    if request.priority == Priority.CRITICAL:
        logger.debug(f"Request {request.id} is critical, skipping auto-approval")
        return None
    for rule in rules:
        if rule.predicate(request):
            logger.debug(f"Request {request.id} matched auto-approval rule '{rule.name}'")
            return rule
    return None
