import logging
from typing import Optional
from fastapi import Request
from com.kizuna.app.config.config import Config
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow import ApprovalWorkflow
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log import ConversationLogStore
from com.kizuna.app.services.language_services.language_detector.language_detector import LanguageDetector
from com.kizuna.app.services.realtime_services.complaint_tracker.complaint_tracker import ComplaintTracker
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus import RealtimeEventBus
from com.kizuna.app.services.triage_services.support_pipeline.support_pipeline import SupportPipeline
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier import TriageClassifier

logger = logging.getLogger(__name__)

class ServiceContainer:
    """Process-wide services, built once at startup and shared by reference"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

        self.language_detector = LanguageDetector(term_priority=self.config.local_term_priority)
        self.triage_classifier = TriageClassifier()
        self.event_bus = RealtimeEventBus(
            history_size=self.config.event_history_size,
            idle_timeout_seconds=self.config.connection_idle_timeout_seconds,
            sweep_interval_seconds=self.config.connection_sweep_interval_seconds,
            subscriber_queue_size=self.config.subscriber_queue_size
        )
        self.conversation_logs = ConversationLogStore(classifier=self.triage_classifier)
        self.approval_workflow = ApprovalWorkflow(
            conversation_logs=self.conversation_logs,
            event_bus=self.event_bus,
            classifier=self.triage_classifier
        )
        self.complaint_tracker = ComplaintTracker(self.event_bus)
        self.support_pipeline = SupportPipeline(
            detector=self.language_detector,
            classifier=self.triage_classifier,
            approvals=self.approval_workflow,
            conversation_logs=self.conversation_logs
        )
        self._started = False
        logger.debug("ServiceContainer built")

    async def init(self) -> None:
        if self._started:
            return
        await self.event_bus.start()
        self._started = True
        logger.info("Services started")

    async def shutdown(self) -> None:
        if not self._started:
            return
        await self.event_bus.shutdown()
        self._started = False
        logger.info("Services stopped")

def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the container built in the app lifespan"""
    return request.app.state.services
