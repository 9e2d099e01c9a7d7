import time
import uuid
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log_schema import (
    ConversationLog, ConversationMessage, ConversationStatus, MessageType, MessageApprovalStatus
)
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier import TriageClassifier
from com.kizuna.app.services.triage_services.triage_utils.dictionary_utils.triage_dictionary import GENERAL_BUSINESS_TYPE

logger = logging.getLogger(__name__)

def generate_message_id() -> str:
    return f"msg_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class ConversationLogStore:
    """Per-session conversation ledgers kept in memory"""

    def __init__(self, classifier: Optional[TriageClassifier] = None, clock: Callable[[], datetime] = utc_now):
        self.logs: Dict[str, ConversationLog] = {}
        self.classifier = classifier or TriageClassifier()
        self.clock = clock
        logger.debug("ConversationLogStore initialized")

    def append(
        self,
        session_id: str,
        user_id: str,
        content: str,
        message_type: MessageType,
        language: Optional[str] = None,
        requires_approval: bool = False,
        approval_status: Optional[MessageApprovalStatus] = None
    ) -> ConversationMessage:
        """Append a message, creating the session's log on first use"""
        now = self.clock()
        conversation = self.logs.get(session_id)
        if conversation is None:
            logger.debug(f"Creating conversation log for session {session_id}")
            conversation = ConversationLog(
                id=session_id,
                session_id=session_id,
                user_id=user_id,
                start_time=now,
                last_activity=now
            )
            self.logs[session_id] = conversation

        message = ConversationMessage(
            id=generate_message_id(),
            type=MessageType(message_type),
            content=content,
            timestamp=now,
            language=language,
            requires_approval=requires_approval,
            approval_status=approval_status
        )
        conversation.messages.append(message)
        # clocks are not guaranteed monotonic
        conversation.last_activity = max(now, conversation.start_time)

        if message.type == MessageType.USER:
            detected = self.classifier.detect_business_type(content)
            if detected != GENERAL_BUSINESS_TYPE:
                if detected != conversation.business_type:
                    logger.debug(f"Session {session_id} business type {conversation.business_type} -> {detected}")
                conversation.business_type = detected

        logger.debug(f"Added {message.type.value} message to session {session_id}")
        return message

    def get(self, session_id: str) -> Optional[ConversationLog]:
        return self.logs.get(session_id)

    def get_active_conversations(self) -> List[ConversationLog]:
        active = [log for log in self.logs.values() if log.status == ConversationStatus.ACTIVE]
        return sorted(active, key=lambda log: log.last_activity, reverse=True)

    def set_status(self, session_id: str, status: ConversationStatus) -> bool:
        conversation = self.logs.get(session_id)
        if conversation is None:
            logger.warning(f"Cannot set status on unknown session {session_id}")
            return False
        conversation.status = ConversationStatus(status)
        logger.debug(f"Session {session_id} status set to {conversation.status.value}")
        return True

    def link_request(self, session_id: str, request_id: str) -> bool:
        conversation = self.logs.get(session_id)
        if conversation is None:
            return False
        conversation.approval_requests.append(request_id)
        return True
