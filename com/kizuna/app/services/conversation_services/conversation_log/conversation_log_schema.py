from enum import Enum
from datetime import datetime
from typing import List, Optional
from com.kizuna.app.common.schema_base import CamelModel, FrozenCamelModel

class MessageType(str, Enum):
    USER = "user"
    BOT = "bot"
    SYSTEM = "system"

class ConversationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ESCALATED = "escalated"

class MessageApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class ConversationMessage(FrozenCamelModel):
    id: str
    type: MessageType
    content: str
    timestamp: datetime
    language: Optional[str] = None
    requires_approval: bool = False
    approval_status: Optional[MessageApprovalStatus] = None

class ConversationLog(CamelModel):
    """Append-only message ledger for one session"""
    id: str
    session_id: str
    user_id: str
    messages: List[ConversationMessage] = []
    business_type: str = "general"
    status: ConversationStatus = ConversationStatus.ACTIVE
    start_time: datetime
    last_activity: datetime
    approval_requests: List[str] = []
