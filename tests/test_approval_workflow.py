"""Tests for ApprovalWorkflow."""

import pytest

from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow import ApprovalWorkflow
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import ApprovalStatus
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log import ConversationLogStore
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log_schema import (
    ConversationStatus, MessageApprovalStatus, MessageType
)
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus import RealtimeEventBus
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority


@pytest.fixture
def dashboard(bus: RealtimeEventBus, make_transport):
    """Admin dashboard connection that also receives the customer's session events"""
    transport = make_transport()
    bus.add_connection("dashboard", "admin", "s1", transport, subscriptions=["solution", "status_update"])
    return transport


def create(workflow: ApprovalWorkflow, message: str, action: str = "GENERAL_INQUIRY", session_id: str = "s1"):
    return workflow.create_request(session_id, "u1", message, "We are on it", action, "general", "en")


def test_greeting_is_auto_approved(workflow: ApprovalWorkflow, conversation_logs: ConversationLogStore, dashboard):
    request = workflow.create_request("s1", "u1", "Hello", "Hi there", "GREETING_RESPONSE", "general", "en")

    assert request.status == ApprovalStatus.AUTO_APPROVED
    assert request.priority == Priority.LOW
    assert request.auto_approval_rule == "greeting"
    assert request.auto_approval_reason == "Standard greeting response"
    assert workflow.list_pending() == []

    log = conversation_logs.get("s1")
    assert log.approval_requests == [request.id]
    assert log.messages[-1].type == MessageType.USER
    assert log.messages[-1].requires_approval
    assert log.messages[-1].approval_status == MessageApprovalStatus.APPROVED

    event = dashboard.events()[-1]
    assert event["type"] == "status_update"
    assert event["priority"] == "low"
    assert event["data"]["status"] == "auto_approved"


@pytest.mark.parametrize("message, action, rule", [
    ("What are your opening hours", "GENERAL_INQUIRY", "basic_info"),
    ("roaming charges abroad", "FAQ_LOOKUP", "faq"),
    ("Thanks a lot", "ACKNOWLEDGMENT", "acknowledgment"),
])
def test_auto_approval_rules(workflow: ApprovalWorkflow, message: str, action: str, rule: str):
    request = create(workflow, message, action)
    assert request.status == ApprovalStatus.AUTO_APPROVED
    assert request.auto_approval_rule == rule


def test_greeting_keyword_needs_whole_word(workflow: ApprovalWorkflow):
    request = create(workflow, "Is this thing on")
    assert request.status == ApprovalStatus.PENDING
    assert request.auto_approval_rule is None


def test_basic_info_requires_low_priority(workflow: ApprovalWorkflow):
    request = create(workflow, "I need your contact address")
    assert request.priority == Priority.MEDIUM
    assert request.status == ApprovalStatus.PENDING


def test_critical_request_is_never_auto_approved(
    workflow: ApprovalWorkflow, conversation_logs: ConversationLogStore, dashboard
):
    request = create(workflow, "Hello, there is fraud on my card", "URGENT_ESCALATION")

    assert request.priority == Priority.CRITICAL
    assert request.status == ApprovalStatus.PENDING
    assert conversation_logs.get("s1").status == ConversationStatus.ESCALATED

    event = dashboard.events()[-1]
    assert event["type"] == "escalation"
    assert event["priority"] == "critical"
    assert event["sessionId"] == "s1"
    assert event["data"]["requiresImmediate"] is True


def test_priority_includes_suggested_action(workflow: ApprovalWorkflow):
    request = create(workflow, "please call me back", "URGENT_ESCALATION")
    assert request.priority == Priority.CRITICAL


@pytest.mark.parametrize("session_id, user_id, message", [
    ("", "u1", "help"),
    ("s1", "", "help"),
    ("s1", "u1", "   "),
])
def test_missing_fields_create_nothing(workflow: ApprovalWorkflow, session_id, user_id, message):
    assert workflow.create_request(session_id, user_id, message, "", "GENERAL_INQUIRY", "general", "en") is None
    assert workflow.list_requests() == []


def test_approve_pending_request(workflow: ApprovalWorkflow, conversation_logs: ConversationLogStore, bus, dashboard,
                                 make_transport):
    customer = make_transport()
    bus.add_connection("customer", "u1", "other-session", customer)
    request = create(workflow, "I want a refund please")
    assert request.status == ApprovalStatus.PENDING

    assert workflow.approve(request.id, "admin-7", "Refund issued")

    approved = workflow.get_request(request.id)
    assert approved.status == ApprovalStatus.APPROVED
    assert approved.admin_id == "admin-7"
    assert approved.admin_response == "Refund issued"
    assert approved.resolved_at is not None

    reply = conversation_logs.get("s1").messages[-1]
    assert reply.type == MessageType.BOT
    assert reply.content == "Refund issued"
    assert reply.approval_status == MessageApprovalStatus.APPROVED

    solution = customer.events()[-1]
    assert solution["type"] == "solution"
    assert solution["userId"] == "u1"
    assert solution["priority"] == "high"
    assert solution["data"]["solution"]["response"] == "Refund issued"


def test_approve_without_override_uses_suggested_reply(workflow: ApprovalWorkflow, conversation_logs):
    request = create(workflow, "I want a refund please")
    assert workflow.approve(request.id, "admin-7")
    assert conversation_logs.get("s1").messages[-1].content == "We are on it"


def test_reject_pending_request(workflow: ApprovalWorkflow, conversation_logs: ConversationLogStore, dashboard):
    request = create(workflow, "I want a refund please")

    assert workflow.reject(request.id, "admin-7", "Outside refund window")

    rejected = workflow.get_request(request.id)
    assert rejected.status == ApprovalStatus.REJECTED
    assert rejected.admin_id == "admin-7"

    note = conversation_logs.get("s1").messages[-1]
    assert note.type == MessageType.SYSTEM
    assert note.content == "Request rejected: Outside refund window"

    event = dashboard.events()[-1]
    assert event["type"] == "status_update"
    assert event["data"]["status"] == "rejected"


def test_resolved_requests_cannot_change(workflow: ApprovalWorkflow):
    approved = create(workflow, "I want a refund please")
    rejected = create(workflow, "I want to dispute a charge")
    auto = create(workflow, "Hello")
    workflow.approve(approved.id, "admin")
    workflow.reject(rejected.id, "admin", "no")

    for request in (approved, rejected, auto):
        status = workflow.get_request(request.id).status
        assert not workflow.approve(request.id, "admin")
        assert not workflow.reject(request.id, "admin", "late")
        assert workflow.get_request(request.id).status == status


def test_unknown_request(workflow: ApprovalWorkflow):
    assert workflow.get_request("nope") is None
    assert not workflow.approve("nope", "admin")
    assert not workflow.reject("nope", "admin", "reason")


def test_pending_sorted_by_priority_then_newest(workflow: ApprovalWorkflow):
    medium_old = create(workflow, "I need help with my bill", session_id="a")
    critical = create(workflow, "urgent: my card was stolen", session_id="b")
    high = create(workflow, "there is a problem with my bill", session_id="c")
    medium_new = create(workflow, "I need help with roaming", session_id="d")

    pending = workflow.list_pending()
    assert [request.id for request in pending] == [critical.id, high.id, medium_new.id, medium_old.id]


def test_stats(workflow: ApprovalWorkflow):
    assert workflow.get_stats().total == 0
    assert workflow.get_stats().approval_rate == 0.0

    create(workflow, "Hello")
    approved = create(workflow, "I want a refund please")
    rejected = create(workflow, "I want to dispute a charge")
    create(workflow, "I need help with my bill")
    workflow.approve(approved.id, "admin")
    workflow.reject(rejected.id, "admin", "no")

    stats = workflow.get_stats()
    assert stats.total == 4
    assert stats.pending == 1
    assert stats.approved == 1
    assert stats.rejected == 1
    assert stats.auto_approved == 1
    assert stats.auto_approval_rate == pytest.approx(25.0)
    assert stats.approval_rate == pytest.approx(50.0)


def test_list_requests_by_status(workflow: ApprovalWorkflow):
    create(workflow, "Hello")
    create(workflow, "I want a refund please")
    assert len(workflow.list_requests()) == 2
    assert len(workflow.list_requests(ApprovalStatus.AUTO_APPROVED)) == 1
    assert len(workflow.list_requests("pending")) == 1


def test_workflow_without_event_bus(conversation_logs: ConversationLogStore):
    workflow = ApprovalWorkflow(conversation_logs=conversation_logs)
    request = workflow.create_request("s1", "u1", "I want a refund", "ok", "GENERAL_INQUIRY", "general", "en")
    assert workflow.approve(request.id, "admin")
