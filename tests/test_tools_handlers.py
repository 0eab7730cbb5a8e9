import json
import time
from datetime import date

import pytest

from config import Confidence
from context.loader import LocalStore
from orchestrator.errors import MalformedToolOutput
from orchestrator.models import DecisionResult
from tools.decisions import NO_REASONING, NO_RECOMMENDATION, analyze_decision, decision_from_payload
from tools.insights import generate_daily_insights
from tools.progress import assess_progress_and_suggest, collect_month

from conftest import FakeGateway


# --- generate_daily_insights ---------------------------------------------------
def test_daily_insights_splits_lines_and_echoes_inputs(make_ctx):
    gateway = FakeGateway(completions=["Insight A\nInsight B\n"])
    result = generate_daily_insights(
        {"focus": "ship v1", "blocker": "flaky tests", "bold_move": "cut scope"}, make_ctx(gateway)
    )
    assert result.insights == ["Insight A", "Insight B"]
    assert (result.focus, result.blocker, result.bold_move) == ("ship v1", "flaky tests", "cut scope")

    system, prompt = gateway.prompts[0]
    assert "productivity assistant" in system
    assert "Focus: ship v1" in prompt
    assert "Bold Move: cut scope" in prompt


def test_daily_insights_missing_arguments_default_to_empty(make_ctx):
    gateway = FakeGateway(completions=[""])
    result = generate_daily_insights({}, make_ctx(gateway))
    assert result.insights == []
    assert result.focus == ""


# --- analyze_decision ----------------------------------------------------------
def test_analyze_decision_parses_fenced_json(make_ctx):
    reply = '```json\n{"recommendation": "Take the offer", "reasoning": ["More pay", "Growth"], "confidence": "high"}\n```'
    gateway = FakeGateway(completions=[reply])
    result = analyze_decision({"dilemma": "Should I switch jobs?"}, make_ctx(gateway))
    assert result == DecisionResult(
        recommendation="Take the offer", reasoning=["More pay", "Growth"], confidence=Confidence.HIGH
    )
    assert "Should I switch jobs?" in gateway.prompts[0][1]


def test_missing_confidence_defaults_to_medium():
    result = decision_from_payload({"recommendation": "Wait", "reasoning": ["Too early"]})
    assert result.confidence == Confidence.MEDIUM


@pytest.mark.parametrize("value", ["HIGH", " Low ", "very sure", 5, None])
def test_confidence_always_in_allowed_set(value):
    result = decision_from_payload({"recommendation": "x", "reasoning": ["y"], "confidence": value})
    assert result.confidence.value in {"high", "medium", "low"}


def test_unrecognised_confidence_is_medium_and_case_folds():
    assert decision_from_payload({"confidence": "very sure"}).confidence == Confidence.MEDIUM
    assert decision_from_payload({"confidence": "HIGH"}).confidence == Confidence.HIGH
    assert decision_from_payload({"confidence": " Low "}).confidence == Confidence.LOW


def test_missing_reasoning_gets_single_fallback():
    result = decision_from_payload({"recommendation": "Go"})
    assert result.reasoning == [NO_REASONING]
    assert decision_from_payload({"reasoning": []}).reasoning == [NO_REASONING]


def test_reasoning_string_becomes_one_item_list():
    assert decision_from_payload({"reasoning": "Only one reason"}).reasoning == ["Only one reason"]


def test_missing_recommendation_default():
    assert decision_from_payload({}).recommendation == NO_RECOMMENDATION


def test_analyze_decision_bad_json_raises(make_ctx):
    gateway = FakeGateway(completions=["not json at all"])
    with pytest.raises(MalformedToolOutput):
        analyze_decision({"dilemma": "x"}, make_ctx(gateway))


# --- assess_progress_and_suggest -----------------------------------------------
def _store(events=(), decisions=(), priorities=()):
    return LocalStore({
        "calendarEvents": json.dumps(list(events)),
        "decisionHistory": json.dumps(list(decisions)),
        "priorities": json.dumps(list(priorities)),
    })


def test_progress_filters_events_to_current_month(make_ctx):
    store = _store(
        events=[
            {"id": "old", "title": "January run", "date": "2024-01-15"},
            {"id": "new", "title": "February launch", "date": "2024-02-03"},
        ],
    )
    gateway = FakeGateway(completions=['{"assessment": "ok"}'])
    assess_progress_and_suggest({}, make_ctx(gateway, store))

    prompt = gateway.prompts[0][1]
    assert "February launch" in prompt
    assert "January run" not in prompt


def test_progress_filters_decisions_by_epoch_millis_but_keeps_all_priorities(make_ctx):
    store = _store(
        decisions=[
            {"id": "d_old", "question": "old call", "timestamp": 1704067200000},   # 2024-01-01
            {"id": "d_new", "question": "new call", "timestamp": 1706918400000},   # 2024-02-03
        ],
        priorities=[{"id": "p1", "title": "Ancient priority", "createdAt": "2022-05-01"}],
    )
    month = collect_month(make_ctx(FakeGateway(), store))
    assert [d["id"] for d in month["decisions"]] == ["d_new"]
    assert [p["id"] for p in month["priorities"]] == ["p1"]


@pytest.fixture()
def utc_plus_two(monkeypatch: pytest.MonkeyPatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "CLR-2")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_progress_window_follows_local_calendar_day(make_ctx, utc_plus_two):
    store = _store(
        decisions=[
            {"id": "d_epoch", "timestamp": 1706740200000},               # 2024-01-31T22:30Z, Feb 1 00:30 local
            {"id": "d_iso", "timestamp": "2024-01-31T22:30:00.000Z"},    # same instant
            {"id": "d_jan", "timestamp": "2024-01-31T21:30:00Z"},        # Jan 31 23:30 local
        ],
        events=[
            {"id": "ev_first", "date": "2024-02-01T00:15:00+02:00"},
            {"id": "ev_jan", "date": "2024-01-31T23:45:00"},
        ],
    )
    month = collect_month(make_ctx(FakeGateway(), store, today=date(2024, 2, 10)))

    assert [d["id"] for d in month["decisions"]] == ["d_epoch", "d_iso"]
    assert [e["id"] for e in month["events"]] == ["ev_first"]


def test_progress_returns_all_four_fields(make_ctx):
    reply = json.dumps({
        "assessment": "Solid month.",
        "achievements": ["Shipped v1"],
        "improvements": ["Sleep more"],
        "recommendations": ["Plan Q2", "Hire help"],
    })
    gateway = FakeGateway(completions=[reply])
    result = assess_progress_and_suggest({}, make_ctx(gateway, _store()))
    assert result.assessment == "Solid month."
    assert result.achievements == ["Shipped v1"]
    assert result.improvements == ["Sleep more"]
    assert result.recommendations == ["Plan Q2", "Hire help"]


def test_progress_missing_fields_default_empty(make_ctx):
    gateway = FakeGateway(completions=['{"insights": ["legacy shape"]}'])
    result = assess_progress_and_suggest({}, make_ctx(gateway))
    assert result.assessment == ""
    assert result.achievements == []
    assert result.recommendations == []


def test_progress_bad_json_raises(make_ctx):
    gateway = FakeGateway(completions=["Here is your review: great job"])
    with pytest.raises(MalformedToolOutput):
        assess_progress_and_suggest({}, make_ctx(gateway))
