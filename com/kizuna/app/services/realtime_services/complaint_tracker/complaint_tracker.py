import time
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from com.kizuna.app.services.realtime_services.complaint_tracker.complaint_tracker_schema import (
    Complaint, ComplaintUpdate, ComplaintSolution, ComplaintResolution, SolutionRecommendations
)
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus import RealtimeEventBus
from com.kizuna.app.services.realtime_services.realtime_utils.dictionary_utils.complaint_dictionary import (
    ALL_COMPLAINT_SOLUTIONS, COMPLAINT_PRIORITY_RULES, find_relevant_solution, list_solutions
)
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier import TriageClassifier
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class ComplaintTracker:
    """Tracks complaint status, matches complaints against the solution catalogue and pushes every change onto the event bus"""

    def __init__(
        self,
        event_bus: RealtimeEventBus,
        classifier: Optional[TriageClassifier] = None,
        solutions: Optional[Dict[str, List[ComplaintSolution]]] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.complaints: Dict[str, Complaint] = {}
        self.event_bus = event_bus
        self.classifier = classifier or TriageClassifier(rules=COMPLAINT_PRIORITY_RULES)
        self.solutions = solutions if solutions is not None else ALL_COMPLAINT_SOLUTIONS
        self.clock = clock
        logger.debug("ComplaintTracker initialized")

    def create_complaint(self, user_id: str, session_id: str, complaint: str, business_type: str) -> str:
        complaint_id = f"complaint_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
        record = Complaint(
            id=complaint_id,
            user_id=user_id,
            session_id=session_id,
            complaint=complaint,
            business_type=business_type,
            timestamp=self.clock(),
            priority=self._calculate_priority(complaint)
        )
        self.complaints[complaint_id] = record
        logger.info(f"Complaint {complaint_id} received ({record.priority.value})")

        self.event_bus.send_complaint_update(complaint_id, record.status, record.model_dump(mode="json", by_alias=True))
        return complaint_id

    def file_complaint(self, user_id: str, session_id: str, complaint: str, business_type: str) -> ComplaintResolution:
        """Create a complaint and resolve it against the catalogue for its business type.

        A match moves the complaint to solution_provided; otherwise it waits in needs_analysis.
        """
        solution = self.find_solution(complaint, business_type)
        complaint_id = self.create_complaint(user_id, session_id, complaint, business_type)

        if solution is None:
            self.update_complaint(complaint_id, "needs_analysis", {"reason": "No matching solution found"})
            return ComplaintResolution(complaint=self.complaints[complaint_id])

        self.update_complaint(complaint_id, "solution_provided", {
            "solutionId": solution.id,
            "category": solution.category,
            "priority": solution.priority.value,
            "estimatedTime": solution.estimated_time,
            "escalationRequired": solution.escalation_required,
        })
        return ComplaintResolution(
            complaint=self.complaints[complaint_id],
            solution=solution,
            recommendations=SolutionRecommendations(
                priority=solution.priority,
                estimated_time=solution.estimated_time,
                escalation_required=solution.escalation_required,
                follow_up_actions=list(solution.follow_up_actions)
            )
        )

    def update_complaint(self, complaint_id: str, status: str, details: Any = None) -> bool:
        record = self.complaints.get(complaint_id)
        if record is None:
            logger.warning(f"Update for unknown complaint {complaint_id}")
            return False

        record.status = status
        record.updates.append(ComplaintUpdate(timestamp=self.clock(), status=status, details=details))
        logger.info(f"Complaint {complaint_id} -> {status}")

        self.event_bus.send_complaint_update(complaint_id, status, details)
        return True

    def get_complaint(self, complaint_id: str) -> Optional[Complaint]:
        return self.complaints.get(complaint_id)

    def find_solution(self, complaint: str, business_type: str) -> Optional[ComplaintSolution]:
        return find_relevant_solution(complaint, business_type, self.solutions)

    def list_solutions(self, business_type: Optional[str] = None, category: Optional[str] = None) -> List[ComplaintSolution]:
        return list_solutions(business_type, category, self.solutions)

    def _calculate_priority(self, complaint: str) -> Priority:
        # a complaint is never below medium
        priority = self.classifier.calculate_priority(complaint)
        return priority if priority.rank >= Priority.MEDIUM.rank else Priority.MEDIUM
