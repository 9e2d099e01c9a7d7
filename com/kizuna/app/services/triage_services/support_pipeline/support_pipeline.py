import logging
from typing import Optional
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow import ApprovalWorkflow
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_schema import ApprovalStatus
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log import ConversationLogStore
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log_schema import (
    MessageType, MessageApprovalStatus
)
from com.kizuna.app.services.language_services.language_detector.language_detector import LanguageDetector
from com.kizuna.app.services.language_services.language_detector.language_detector_schema import Language
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier import TriageClassifier
from com.kizuna.app.services.triage_services.support_pipeline.support_pipeline_schema import TriageOutcome

logger = logging.getLogger(__name__)

class SupportPipeline:
    """Inbound message flow: detect language, triage, then approve or reply"""

    def __init__(
        self,
        detector: LanguageDetector,
        classifier: TriageClassifier,
        approvals: ApprovalWorkflow,
        conversation_logs: ConversationLogStore
    ):
        self.detector = detector
        self.classifier = classifier
        self.approvals = approvals
        self.conversation_logs = conversation_logs
        logger.debug("SupportPipeline initialized")

    def handle_message(
        self,
        session_id: str,
        user_id: Optional[str],
        message: str,
        suggested_response: Optional[str] = None,
        business_type: Optional[str] = None
    ) -> Optional[TriageOutcome]:
        """Triage one customer message. Returns None when the message is blank."""
        if not message or not message.strip():
            logger.warning(f"Empty message for session {session_id}")
            return None

        user_id = user_id or f"user_{session_id}"
        detection = self.detector.detect(message)
        triage = self.classifier.classify(message)
        business_type = business_type or self.classifier.detect_business_type(message)
        suggested_action = self.classifier.determine_suggested_action(message)
        reply_language = detection.suggested_response
        response_text = suggested_response or self._fallback_response(suggested_action, reply_language)

        requires_approval = triage.should_escalate or self.classifier.requires_approval(
            message, suggested_action, business_type
        )
        logger.info(f"Session {session_id}: {detection.primary_language.value}, {triage.priority.value}, "
                    f"{suggested_action}, approval={'yes' if requires_approval else 'no'}")

        if requires_approval:
            request = self.approvals.create_request(
                session_id, user_id, message, response_text, suggested_action, business_type, reply_language.value
            )
            auto_approved = request is not None and request.status == ApprovalStatus.AUTO_APPROVED
            if auto_approved:
                self._log_reply(session_id, response_text, reply_language.value)
            return TriageOutcome(
                session_id=session_id,
                user_id=user_id,
                language=detection,
                triage=triage,
                should_escalate=triage.should_escalate,
                suggested_action=suggested_action,
                business_type=business_type,
                requires_approval=True,
                approval_request=request,
                response=response_text if auto_approved else None,
                auto_approved=auto_approved
            )

        self.conversation_logs.append(session_id, user_id, message, MessageType.USER, language=reply_language.value)
        self._log_reply(session_id, response_text, reply_language.value)
        return TriageOutcome(
            session_id=session_id,
            user_id=user_id,
            language=detection,
            triage=triage,
            should_escalate=triage.should_escalate,
            suggested_action=suggested_action,
            business_type=business_type,
            requires_approval=False,
            response=response_text,
            auto_approved=True
        )

    def _log_reply(self, session_id: str, response_text: str, language: str) -> None:
        self.conversation_logs.append(
            session_id, "bot", response_text, MessageType.BOT,
            language=language, approval_status=MessageApprovalStatus.APPROVED
        )

    def _fallback_response(self, suggested_action: str, language: Language) -> str:
        if suggested_action == "GREETING_RESPONSE":
            return self.detector.get_greeting(language)
        phrases = self.detector.get_response_phrases(language)
        return f"{phrases['understanding']}. {phrases['helping']}."
