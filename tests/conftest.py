import json
from datetime import datetime, timedelta, timezone

import pytest

from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow import ApprovalWorkflow
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log import ConversationLogStore
from com.kizuna.app.services.language_services.language_detector.language_detector import LanguageDetector
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus import RealtimeEventBus
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier import TriageClassifier


class StepClock:
    """Deterministic clock advancing by a fixed step on every read"""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, delta):
        self.now = self.now + delta


class FakeTransport:
    """Socket stand-in recording every frame it is sent"""

    def __init__(self, fail=False):
        self.frames = []
        self.closed = False
        self.fail = fail

    def send(self, frame):
        if self.fail:
            raise ConnectionResetError("peer went away")
        if self.closed:
            raise ConnectionError("closed")
        self.frames.append(frame)

    def close(self):
        self.closed = True

    def messages(self):
        return [json.loads(frame) for frame in self.frames]

    def events(self):
        return [message["data"] for message in self.messages() if message["type"] == "realtime_event"]


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def classifier():
    return TriageClassifier()


@pytest.fixture
def detector():
    return LanguageDetector()


@pytest.fixture
def bus(clock):
    return RealtimeEventBus(clock=clock)


@pytest.fixture
def conversation_logs(classifier, clock):
    return ConversationLogStore(classifier=classifier, clock=clock)


@pytest.fixture
def workflow(conversation_logs, bus, classifier, clock):
    return ApprovalWorkflow(conversation_logs=conversation_logs, event_bus=bus, classifier=classifier, clock=clock)


@pytest.fixture
def make_transport():
    return FakeTransport
