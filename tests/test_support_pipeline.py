"""Tests for SupportPipeline.handle_message."""

import pytest

from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import ApprovalStatus
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log_schema import (
    ConversationStatus, MessageType
)
from com.kizuna.app.services.language_services.language_detector.language_detector_schema import Language
from com.kizuna.app.services.triage_services.support_pipeline.support_pipeline import SupportPipeline
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority


@pytest.fixture
def pipeline(detector, classifier, workflow, conversation_logs):
    return SupportPipeline(detector, classifier, workflow, conversation_logs)


def test_simple_greeting_is_answered_directly(pipeline: SupportPipeline, conversation_logs, workflow):
    outcome = pipeline.handle_message("s1", "u1", "Hello")

    assert not outcome.requires_approval
    assert outcome.auto_approved
    assert outcome.suggested_action == "GREETING_RESPONSE"
    assert outcome.response == "Hello! How can I help you today?"
    assert outcome.approval_request is None
    assert workflow.list_requests() == []

    messages = conversation_logs.get("s1").messages
    assert [message.type for message in messages] == [MessageType.USER, MessageType.BOT]
    assert messages[1].content == outcome.response


def test_luganda_message_gets_luganda_reply(pipeline: SupportPipeline):
    outcome = pipeline.handle_message("s1", "u1", "Nkulamuse, sente zange ziggweewo")

    assert outcome.language.primary_language == Language.LG
    assert outcome.language.local_terms[0].meaning == "money"
    assert outcome.response == "Ntegeeza. Ka nkuyambe."


def test_emergency_goes_to_approval(pipeline: SupportPipeline, conversation_logs, workflow):
    outcome = pipeline.handle_message("s1", "u1", "My account was hacked, this is urgent!")

    assert outcome.should_escalate
    assert outcome.requires_approval
    assert not outcome.auto_approved
    assert outcome.response is None
    assert outcome.triage.priority == Priority.CRITICAL
    assert outcome.business_type == "banking"
    assert outcome.approval_request.status == ApprovalStatus.PENDING
    assert [request.id for request in workflow.list_pending()] == [outcome.approval_request.id]

    log = conversation_logs.get("s1")
    assert log.status == ConversationStatus.ESCALATED
    assert [message.type for message in log.messages] == [MessageType.USER]


def test_sensitive_request_auto_approved_by_rule(pipeline: SupportPipeline, conversation_logs):
    outcome = pipeline.handle_message("s1", "u1", "Hello, I want a refund")

    assert outcome.requires_approval
    assert outcome.auto_approved
    assert outcome.approval_request.auto_approval_rule == "greeting"
    assert outcome.response == "Hello! How can I help you today?"
    assert [message.type for message in conversation_logs.get("s1").messages] == [MessageType.USER, MessageType.BOT]


def test_upstream_reply_and_business_type_are_kept(pipeline: SupportPipeline):
    outcome = pipeline.handle_message("s1", "u1", "I want a refund", suggested_response="Refunds take 3 days",
                                      business_type="ecommerce")

    assert outcome.business_type == "ecommerce"
    assert outcome.approval_request.suggested_response == "Refunds take 3 days"
    assert outcome.approval_request.business_type == "ecommerce"


def test_missing_user_id_is_derived_from_session(pipeline: SupportPipeline, conversation_logs):
    outcome = pipeline.handle_message("s9", None, "buy data bundle")
    assert outcome.user_id == "user_s9"
    assert conversation_logs.get("s9").user_id == "user_s9"


@pytest.mark.parametrize("message", ["", "   "])
def test_blank_message_is_ignored(pipeline: SupportPipeline, conversation_logs, message):
    assert pipeline.handle_message("s1", "u1", message) is None
    assert conversation_logs.get("s1") is None
