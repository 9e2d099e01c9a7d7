import time
import uuid
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import (
    ApprovalRequest, ApprovalStatus, ApprovalStats
)
from com.kizuna.app.services.approval_services.approval_utils.auto_approval_utils.auto_approval_rules import (
    AutoApprovalRule, DEFAULT_AUTO_APPROVAL_RULES, match_auto_approval_rule
)
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log import ConversationLogStore
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log_schema import (
    ConversationStatus, MessageType, MessageApprovalStatus
)
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus import RealtimeEventBus
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier import TriageClassifier
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority

logger = logging.getLogger(__name__)

def generate_request_id() -> str:
    return f"approval_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class ApprovalWorkflow:
    """
    Approval requests for bot replies that need a human decision.

    pending -> approved | rejected is the only transition; auto_approved is
    assigned at creation and is terminal. Operations report failure through
    their return value and never raise on bad state.
    """

    def __init__(
        self,
        conversation_logs: ConversationLogStore,
        event_bus: Optional[RealtimeEventBus] = None,
        classifier: Optional[TriageClassifier] = None,
        rules: Sequence[AutoApprovalRule] = DEFAULT_AUTO_APPROVAL_RULES,
        clock: Callable[[], datetime] = utc_now
    ):
        self.requests: Dict[str, ApprovalRequest] = {}
        self.conversation_logs = conversation_logs
        self.event_bus = event_bus
        self.classifier = classifier or TriageClassifier()
        self.rules = list(rules)
        self.clock = clock
        logger.debug(f"ApprovalWorkflow initialized with rules {[rule.name for rule in self.rules]}")

    def create_request(
        self,
        session_id: str,
        user_id: str,
        user_message: str,
        suggested_response: str,
        suggested_action: str,
        business_type: str,
        language: str
    ) -> Optional[ApprovalRequest]:
        """Create a request, auto-approving it when a rule allows. Returns None on missing fields."""
        missing = [
            name for name, value in (("session_id", session_id), ("user_id", user_id), ("user_message", user_message))
            if not value or not str(value).strip()
        ]
        if missing:
            logger.warning(f"Cannot create approval request, missing {', '.join(missing)}")
            return None

        request = ApprovalRequest(
            id=generate_request_id(),
            session_id=session_id,
            user_id=user_id,
            user_message=user_message,
            suggested_response=suggested_response or "",
            suggested_action=suggested_action or "",
            priority=self.classifier.calculate_priority(user_message, suggested_action or ""),
            business_type=business_type or "general",
            language=language or "en",
            timestamp=self.clock()
        )

        rule = match_auto_approval_rule(request, self.rules)
        if rule is not None:
            request.status = ApprovalStatus.AUTO_APPROVED
            request.auto_approval_rule = rule.name
            request.auto_approval_reason = rule.reason

        self.requests[request.id] = request
        logger.info(f"Created approval request {request.id} ({request.priority.value}, {request.status.value})")

        self.conversation_logs.append(
            session_id,
            user_id,
            user_message,
            MessageType.USER,
            language=request.language,
            requires_approval=True,
            approval_status=(MessageApprovalStatus.PENDING if request.status == ApprovalStatus.PENDING
                             else MessageApprovalStatus.APPROVED)
        )
        self.conversation_logs.link_request(session_id, request.id)

        if request.status == ApprovalStatus.PENDING and request.priority == Priority.CRITICAL:
            self.conversation_logs.set_status(session_id, ConversationStatus.ESCALATED)

        self._emit_created(request)
        return request

    def approve(self, request_id: str, admin_id: str, admin_response: Optional[str] = None) -> bool:
        request = self.requests.get(request_id)
        if request is None or request.status != ApprovalStatus.PENDING:
            logger.warning(f"Approve rejected for {request_id}: "
                           f"{'unknown request' if request is None else 'status ' + request.status.value}")
            return False

        request.status = ApprovalStatus.APPROVED
        request.admin_id = admin_id
        request.admin_response = admin_response
        request.resolved_at = self.clock()
        response_text = admin_response or request.suggested_response

        self.conversation_logs.append(
            request.session_id,
            "bot",
            response_text,
            MessageType.BOT,
            language=request.language,
            requires_approval=False,
            approval_status=MessageApprovalStatus.APPROVED
        )
        logger.info(f"Request {request_id} approved by {admin_id}")

        if self.event_bus is not None:
            self.event_bus.send_solution_notification(request.user_id, {
                "approvalId": request.id,
                "response": response_text,
                "approvedBy": admin_id,
                "timestamp": request.resolved_at.isoformat(),
            })
        return True

    def reject(self, request_id: str, admin_id: str, reason: str) -> bool:
        request = self.requests.get(request_id)
        if request is None or request.status != ApprovalStatus.PENDING:
            logger.warning(f"Reject rejected for {request_id}: "
                           f"{'unknown request' if request is None else 'status ' + request.status.value}")
            return False

        request.status = ApprovalStatus.REJECTED
        request.admin_id = admin_id
        request.admin_response = reason
        request.resolved_at = self.clock()

        self.conversation_logs.append(
            request.session_id,
            "system",
            f"Request rejected: {reason}",
            MessageType.SYSTEM,
            language=request.language,
            requires_approval=False,
            approval_status=MessageApprovalStatus.REJECTED
        )
        logger.info(f"Request {request_id} rejected by {admin_id}: {reason}")

        if self.event_bus is not None:
            self.event_bus.send_status_update(
                {"approvalId": request.id, "status": request.status.value, "reason": reason, "rejectedBy": admin_id},
                session_id=request.session_id,
                priority=Priority.MEDIUM
            )
        return True

    def get_request(self, request_id: str) -> Optional[ApprovalRequest]:
        return self.requests.get(request_id)

    def list_requests(self, status: Optional[ApprovalStatus] = None) -> List[ApprovalRequest]:
        requests = list(self.requests.values())
        if status is not None:
            requests = [request for request in requests if request.status == ApprovalStatus(status)]
        return requests

    def list_pending(self) -> List[ApprovalRequest]:
        """Pending requests, most urgent first, newest first within a priority"""
        pending = self.list_requests(ApprovalStatus.PENDING)
        return sorted(
            pending,
            key=lambda request: (request.priority.rank, request.timestamp),
            reverse=True
        )

    def get_stats(self) -> ApprovalStats:
        requests = list(self.requests.values())
        total = len(requests)
        counts = {status: 0 for status in ApprovalStatus}
        for request in requests:
            counts[request.status] += 1

        auto_approved = counts[ApprovalStatus.AUTO_APPROVED]
        approved = counts[ApprovalStatus.APPROVED]
        return ApprovalStats(
            total=total,
            pending=counts[ApprovalStatus.PENDING],
            approved=approved,
            rejected=counts[ApprovalStatus.REJECTED],
            auto_approved=auto_approved,
            auto_approval_rate=(auto_approved / total) * 100 if total else 0.0,
            approval_rate=((approved + auto_approved) / total) * 100 if total else 0.0
        )

    def _emit_created(self, request: ApprovalRequest) -> None:
        if self.event_bus is None:
            return
        if request.status == ApprovalStatus.PENDING:
            self.event_bus.send_escalation_alert(
                request.session_id,
                f"Approval required for {request.suggested_action or 'user interaction'}",
                priority=request.priority
            )
        else:
            self.event_bus.send_status_update(
                {
                    "approvalId": request.id,
                    "status": request.status.value,
                    "reason": request.auto_approval_reason,
                },
                session_id=request.session_id,
                priority=Priority.LOW
            )
