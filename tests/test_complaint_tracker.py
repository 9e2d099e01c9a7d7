"""Tests for ComplaintTracker and the complaint solution catalogue."""

import pytest

from com.kizuna.app.services.realtime_services.complaint_tracker.complaint_tracker import ComplaintTracker
from com.kizuna.app.services.realtime_services.realtime_utils.dictionary_utils.complaint_dictionary import (
    find_relevant_solution, list_solutions
)
from com.kizuna.app.services.triage_services.triage_classifier.triage_classifier_schema import Priority


@pytest.fixture
def tracker(bus, clock):
    return ComplaintTracker(bus, clock=clock)


@pytest.fixture
def dashboard(bus, make_transport):
    transport = make_transport()
    bus.add_connection("dashboard", "admin", "admin-session", transport, subscriptions=["complaint"])
    return transport


def test_create_complaint_broadcasts_record(tracker: ComplaintTracker, dashboard):
    complaint_id = tracker.create_complaint("u1", "s1", "My phone was stolen", "telecom")

    complaint = tracker.get_complaint(complaint_id)
    assert complaint.status == "received"
    assert complaint.updates == []

    event = dashboard.events()[-1]
    assert event["type"] == "complaint"
    assert event["data"]["complaintId"] == complaint_id
    assert event["data"]["status"] == "received"
    assert event["data"]["details"]["userId"] == "u1"
    assert event["data"]["details"]["businessType"] == "telecom"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I need help immediately", Priority.CRITICAL),
        ("This is an emergency", Priority.CRITICAL),
        ("Payment failed on my account", Priority.HIGH),
        ("The app is not working", Priority.HIGH),
        ("There is an issue with my bill", Priority.HIGH),
        ("My phone was stolen", Priority.MEDIUM),
        ("The queue at the branch was long", Priority.MEDIUM),
    ],
)
def test_complaint_priority(tracker: ComplaintTracker, text, expected):
    complaint_id = tracker.create_complaint("u1", "s1", text, "banking")
    assert tracker.get_complaint(complaint_id).priority == expected


def test_update_complaint(tracker: ComplaintTracker, dashboard):
    complaint_id = tracker.create_complaint("u1", "s1", "Payment failed on my account", "banking")

    assert tracker.update_complaint(complaint_id, "resolved", {"note": "refund issued"})

    complaint = tracker.get_complaint(complaint_id)
    assert complaint.status == "resolved"
    assert complaint.priority == Priority.HIGH
    assert [update.status for update in complaint.updates] == ["resolved"]
    assert complaint.updates[0].details == {"note": "refund issued"}

    event = dashboard.events()[-1]
    assert event["data"]["status"] == "resolved"
    assert event["data"]["details"] == {"note": "refund issued"}


def test_unknown_complaint(tracker: ComplaintTracker, bus):
    assert tracker.get_complaint("missing") is None
    assert not tracker.update_complaint("missing", "resolved")
    assert bus.get_event_history() == []


def test_matched_complaint_gets_catalogue_solution(tracker: ComplaintTracker, dashboard):
    resolution = tracker.file_complaint("u1", "s1", "I cannot buy bundles, the system failing all day", "telecom")

    assert resolution.solution.id == "tel_001"
    assert resolution.recommendations.priority == Priority.HIGH
    assert resolution.recommendations.estimated_time == "2-5 minutes"
    assert resolution.recommendations.escalation_required is False
    assert resolution.recommendations.follow_up_actions[0] == "Verify bundle activation"

    complaint = tracker.get_complaint(resolution.complaint.id)
    assert complaint.status == "solution_provided"
    assert complaint.updates[-1].details == {
        "solutionId": "tel_001",
        "category": "Data Services",
        "priority": "high",
        "estimatedTime": "2-5 minutes",
        "escalationRequired": False,
    }
    assert [event["data"]["status"] for event in dashboard.events()] == ["received", "solution_provided"]


def test_unmatched_complaint_needs_analysis(tracker: ComplaintTracker, dashboard):
    resolution = tracker.file_complaint("u1", "s1", "The shop assistant was rude to me", "telecom")

    assert resolution.solution is None
    assert resolution.recommendations is None
    assert resolution.complaint.status == "needs_analysis"
    assert resolution.complaint.updates[-1].details == {"reason": "No matching solution found"}
    assert [event["data"]["status"] for event in dashboard.events()] == ["received", "needs_analysis"]


def test_unknown_business_type_has_no_solution(tracker: ComplaintTracker):
    resolution = tracker.file_complaint("u1", "s1", "No network coverage in my area", "general")
    assert resolution.solution is None
    assert resolution.complaint.status == "needs_analysis"


def test_solution_scoring():
    # description containment outweighs a single local term
    assert find_relevant_solution("no water supply", "utilities").id == "util_002"
    assert find_relevant_solution("My bill is 10 times normal, cannot afford it", "utilities").id == "util_003"
    assert find_relevant_solution("money deducted but order failed", "ecommerce").id == "ecom_003"
    assert find_relevant_solution("", "telecom") is None
    assert find_relevant_solution("hello there", "banking") is None


def test_solution_ties_keep_first_entry():
    # "sente" scores tel_001 and tel_003 equally
    assert find_relevant_solution("sente", "telecom").id == "tel_001"


def test_list_solutions(tracker: ComplaintTracker):
    assert len(list_solutions()) == 12
    assert [solution.id for solution in tracker.list_solutions("telecom")] == ["tel_001", "tel_002", "tel_003"]
    assert [solution.id for solution in tracker.list_solutions("banking", "LOAN")] == ["bank_003"]
    assert tracker.list_solutions("banking", "insurance") == []
    assert len(tracker.list_solutions("unknown", "loan")) == 12
