import copy
from enum import Enum
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set, Union
from pydantic import Field, field_validator
from com.kizuna.app.common.schema_base import CamelModel, FrozenCamelModel
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority

class EventType(str, Enum):
    COMPLAINT = "complaint"
    SOLUTION = "solution"
    ESCALATION = "escalation"
    STATUS_UPDATE = "status_update"
    VOICE_CALL = "voice_call"

class RealtimeEvent(FrozenCamelModel):
    id: str
    type: EventType
    timestamp: datetime
    data: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    priority: Priority = Priority.MEDIUM

    @field_validator("data", mode="before")
    @classmethod
    def snapshot_data(cls, value: Any) -> Any:
        # the event must not share the caller's dict
        return copy.deepcopy(value) if value is not None else {}

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape: camelCase keys, ISO-8601 timestamp, absent ids omitted"""
        payload = self.model_dump(mode="json", by_alias=True)
        for key in ("userId", "sessionId"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload

class BroadcastEventRequest(CamelModel):
    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    priority: Priority = Priority.MEDIUM

Frame = Union[str, bytes]

@dataclass
class Subscriber:
    """A live connection or stream together with its routing filter"""
    id: str
    user_id: str
    session_id: str
    transport: Any
    predicate: Callable[["Subscriber", RealtimeEvent], bool]
    encoder: Callable[[RealtimeEvent], Frame]
    last_activity: datetime
    subscriptions: Set[str] = field(default_factory=set)
    idle_evictable: bool = True

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "sessionId": self.session_id,
            "lastActivity": self.last_activity.isoformat(),
            "subscriptions": sorted(self.subscriptions),
        }
