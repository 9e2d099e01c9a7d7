import logging
from typing import Dict, List, Optional
from com.kizuna.app.services.realtime_services.complaint_tracker.complaint_tracker_schema import ComplaintSolution
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import (
    Priority, EscalationType, TriageRule
)

logger = logging.getLogger(__name__)

# Complaint urgency, highest first; anything else is medium
COMPLAINT_PRIORITY_RULES: List[TriageRule] = [
    TriageRule(
        priority=Priority.CRITICAL,
        escalation_type=EscalationType.EMERGENCY,
        keywords=("urgent", "emergency", "critical", "immediately", "help"),
    ),
    TriageRule(
        priority=Priority.HIGH,
        escalation_type=EscalationType.COMPLAINT,
        keywords=("problem", "issue", "not working", "failed", "broken"),
    ),
]

# Match weights
DESCRIPTION_SCORE = 10
PHRASE_SCORE = 5
LOCAL_TERM_SCORE = 3
CATEGORY_SCORE = 2

TELECOM_SOLUTIONS: List[ComplaintSolution] = [
    ComplaintSolution(
        id="tel_001",
        category="Data Services",
        subcategory="Bundle Purchase",
        complaint="Cannot buy data bundles, system keeps failing",
        solution=(
            "Sorry the bundle menu is failing. Dial *131# and choose option 1, or use *100# as the "
            "alternative menu. You can also send DATA to 131. Tell me which bundle you want and I can "
            "process it for you now."
        ),
        priority=Priority.HIGH,
        estimated_time="2-5 minutes",
        local_terms=("bundles", "sente", "data"),
        common_phrases=("system failing", "cannot buy", "not working"),
        follow_up_actions=("Verify bundle activation", "Check account balance", "Send confirmation SMS"),
    ),
    ComplaintSolution(
        id="tel_002",
        category="Network Issues",
        subcategory="Poor Signal",
        complaint="No network coverage in my area, calls keep dropping",
        solution=(
            "Sorry about the coverage problem. Switch your phone to 3G mode and restart it, and check that "
            "airplane mode is off. Share your location and the network team will investigate within 24 hours. "
            "Two extra days have been added to your bundle."
        ),
        priority=Priority.CRITICAL,
        estimated_time="24-48 hours",
        escalation_required=True,
        local_terms=("network", "signal", "calls"),
        common_phrases=("no coverage", "calls dropping", "poor signal"),
        follow_up_actions=("Report to network team", "Provide compensation", "Schedule follow-up", "Send SMS updates"),
    ),
    ComplaintSolution(
        id="tel_003",
        category="Billing",
        subcategory="Unexpected Charges",
        complaint="Strange charges on my account, money deducted without my knowledge",
        solution=(
            "We are reviewing your recent transactions for auto-renewals, premium SMS and roaming charges. "
            "Unauthorized charges are reversed within 24 hours and premium services will be blocked. "
            "Dial *131*0# to see your active services."
        ),
        priority=Priority.HIGH,
        estimated_time="1-24 hours",
        local_terms=("sente", "charges", "money"),
        common_phrases=("strange charges", "money deducted", "unauthorized"),
        follow_up_actions=("Investigate charges", "Process refund", "Block premium services", "Send transaction history"),
    ),
]

BANKING_SOLUTIONS: List[ComplaintSolution] = [
    ComplaintSolution(
        id="bank_001",
        category="Mobile Money",
        subcategory="Failed Transaction",
        complaint="Sent money but recipient didn't receive it, money deducted from my account",
        solution=(
            "Please share the transaction ID, the recipient number and the amount. The transfer will be "
            "completed or reversed within 2 hours and the fees refunded. You will get an SMS update every hour."
        ),
        priority=Priority.CRITICAL,
        estimated_time="30 minutes - 2 hours",
        escalation_required=True,
        local_terms=("sente", "mobile money", "send"),
        common_phrases=("didn't receive", "money deducted", "failed transaction"),
        follow_up_actions=("Trace transaction", "Contact recipient bank", "Process reversal/completion",
                           "Refund fees", "Send updates"),
    ),
    ComplaintSolution(
        id="bank_002",
        category="Account Access",
        subcategory="Locked Account",
        complaint="My account is locked, cannot access mobile banking or withdraw money",
        solution=(
            "Confirm your full name, account number and three recent transactions. Once verified the account "
            "is unlocked within 15 minutes and a new PIN is sent by SMS. Any branch can give emergency cash "
            "with your ID in the meantime."
        ),
        priority=Priority.CRITICAL,
        estimated_time="15-30 minutes",
        local_terms=("account", "locked", "pin"),
        common_phrases=("cannot access", "account locked", "withdraw money"),
        follow_up_actions=("Verify identity", "Unlock account", "Reset PIN", "Enable notifications", "Waive fees"),
    ),
    ComplaintSolution(
        id="bank_003",
        category="Loan Services",
        subcategory="Loan Application",
        complaint="Applied for loan 2 weeks ago, no response, need money urgently",
        solution=(
            "Your application has moved to the priority queue and a loan officer will call within 2 hours. "
            "Missing documents are listed in the SMS we just sent. An instant micro-loan is available while "
            "you wait."
        ),
        priority=Priority.HIGH,
        estimated_time="2-24 hours",
        escalation_required=True,
        local_terms=("loan", "sente", "money"),
        common_phrases=("no response", "need money urgently", "applied for loan"),
        follow_up_actions=("Check application status", "Fast-track processing", "Contact loan officer",
                           "Offer alternatives", "Provide timeline"),
    ),
]

UTILITIES_SOLUTIONS: List[ComplaintSolution] = [
    ComplaintSolution(
        id="util_001",
        category="Electricity",
        subcategory="Power Outage",
        complaint="No electricity for 3 days, food spoiling, need immediate solution",
        solution=(
            "A technical team is on the way and will arrive within 4 hours. Your case is marked as an "
            "emergency, a free generator can be arranged, and the outage period will not be billed."
        ),
        priority=Priority.CRITICAL,
        estimated_time="2-8 hours",
        escalation_required=True,
        local_terms=("masanyu", "power", "electricity"),
        common_phrases=("no electricity", "food spoiling", "immediate solution"),
        follow_up_actions=("Dispatch technical team", "Arrange generator", "Process compensation",
                           "Provide updates", "Restore power"),
    ),
    ComplaintSolution(
        id="util_002",
        category="Water Supply",
        subcategory="No Water",
        complaint="No water supply for 5 days, family struggling, children getting sick",
        solution=(
            "A water truck is dispatched and will deliver 1000 liters within 2 hours, then daily until supply "
            "returns. Engineers will assess the lines within 6 hours and you will not be billed for the outage."
        ),
        priority=Priority.CRITICAL,
        estimated_time="2-48 hours",
        escalation_required=True,
        local_terms=("amazzi", "water", "supply"),
        common_phrases=("no water supply", "family struggling", "children getting sick"),
        follow_up_actions=("Dispatch water truck", "Investigate problem", "Provide medical support",
                           "Start repairs", "Process compensation"),
    ),
    ComplaintSolution(
        id="util_003",
        category="Billing",
        subcategory="High Bill",
        complaint="Electricity bill is 10 times normal amount, cannot afford to pay",
        solution=(
            "Payment on this bill is suspended while a technician checks the meter within 24 hours. A corrected "
            "bill follows within 48 hours and any overpayment is refunded."
        ),
        priority=Priority.HIGH,
        estimated_time="24-48 hours",
        local_terms=("bili", "masanyu", "sente"),
        common_phrases=("10 times normal", "cannot afford", "high bill"),
        follow_up_actions=("Investigate meter", "Suspend payment", "Recalculate bill", "Process refund", "Upgrade meter"),
    ),
]

ECOMMERCE_SOLUTIONS: List[ComplaintSolution] = [
    ComplaintSolution(
        id="ecom_001",
        category="Delivery",
        subcategory="Late Delivery",
        complaint="Ordered item 2 weeks ago, still not delivered, need it urgently",
        solution=(
            "Your order is upgraded to free same-day delivery and the courier will call 30 minutes before "
            "arrival. If it is not delivered within 24 hours you get a full refund."
        ),
        priority=Priority.HIGH,
        estimated_time="4-24 hours",
        local_terms=("delivery", "order", "item"),
        common_phrases=("still not delivered", "need it urgently", "2 weeks ago"),
        follow_up_actions=("Track package", "Contact courier", "Upgrade delivery", "Process compensation",
                           "Guarantee delivery"),
    ),
    ComplaintSolution(
        id="ecom_002",
        category="Product Quality",
        subcategory="Damaged Item",
        complaint="Received broken phone, screen cracked, packaging was damaged",
        solution=(
            "A replacement phone is dispatched within 2 hours with same-day delivery, and the damaged one is "
            "collected at the same time. A full refund is available if you prefer."
        ),
        priority=Priority.CRITICAL,
        estimated_time="2-8 hours",
        escalation_required=True,
        local_terms=("phone", "broken", "damaged"),
        common_phrases=("screen cracked", "packaging damaged", "broken phone"),
        follow_up_actions=("Dispatch replacement", "Collect damaged item", "Process compensation",
                           "Extend warranty", "Follow up"),
    ),
    ComplaintSolution(
        id="ecom_003",
        category="Payment",
        subcategory="Payment Failed",
        complaint="Payment deducted from account but order shows as failed, money gone",
        solution=(
            "Your money is safe. We are checking with the payment gateway and the bank, and within 2 hours the "
            "order is completed or the payment refunded."
        ),
        priority=Priority.CRITICAL,
        estimated_time="30 minutes - 2 hours",
        local_terms=("payment", "sente", "money"),
        common_phrases=("money deducted", "order failed", "money gone"),
        follow_up_actions=("Verify payment", "Contact bank", "Process order/refund", "Send confirmation",
                           "Provide compensation"),
    ),
]

ALL_COMPLAINT_SOLUTIONS: Dict[str, List[ComplaintSolution]] = {
    "telecom": TELECOM_SOLUTIONS,
    "banking": BANKING_SOLUTIONS,
    "utilities": UTILITIES_SOLUTIONS,
    "ecommerce": ECOMMERCE_SOLUTIONS,
}

def score_solution(query_lower: str, solution: ComplaintSolution) -> int:
    score = 0
    if query_lower in solution.complaint.lower():
        score += DESCRIPTION_SCORE
    score += PHRASE_SCORE * sum(1 for phrase in solution.common_phrases if phrase.lower() in query_lower)
    score += LOCAL_TERM_SCORE * sum(1 for term in solution.local_terms if term.lower() in query_lower)
    if solution.category.lower() in query_lower:
        score += CATEGORY_SCORE
    if solution.subcategory.lower() in query_lower:
        score += CATEGORY_SCORE
    return score

def find_relevant_solution(
    query: str,
    business_type: str,
    catalogue: Optional[Dict[str, List[ComplaintSolution]]] = None
) -> Optional[ComplaintSolution]:
    """Best scoring catalogue entry for the business type; earliest entry wins ties, None when nothing scores"""
    query_lower = (query or "").lower().strip()
    if not query_lower:
        return None

    candidates = (catalogue if catalogue is not None else ALL_COMPLAINT_SOLUTIONS).get(business_type, [])
    best, best_score = None, 0
    for solution in candidates:
        score = score_solution(query_lower, solution)
        if score > best_score:
            best, best_score = solution, score

    if best is not None:
        logger.debug(f"Complaint matched solution {best.id} with score {best_score}")
    return best

def list_solutions(
    business_type: Optional[str] = None,
    category: Optional[str] = None,
    catalogue: Optional[Dict[str, List[ComplaintSolution]]] = None
) -> List[ComplaintSolution]:
    """Catalogue entries for a known business type, filtered by category substring; everything otherwise"""
    catalogue = catalogue if catalogue is not None else ALL_COMPLAINT_SOLUTIONS
    if business_type and business_type in catalogue:
        solutions = catalogue[business_type]
        if category:
            solutions = [solution for solution in solutions if category.lower() in solution.category.lower()]
        return list(solutions)
    return [solution for solutions in catalogue.values() for solution in solutions]
