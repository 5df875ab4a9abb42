import pytest

from backend.schemas.timeline import EventAnalysis, EventItem, ExamPoint
from backend.services.series import SeriesBootstrapError, apply_analysis, merge_exam_point, replay_series

BASELINE = (ExamPoint(date="2025-08-12", urea=60, creatinine=1.6, leukocytes=13800),)


def test_partial_values_carry_forward_from_last_point():
    merged = merge_exam_point(BASELINE, "2025-08-14", EventAnalysis(leukocytes=12000))
    assert len(merged) == 2
    assert merged[0] == BASELINE[0]
    assert merged[-1] == ExamPoint(date="2025-08-14", urea=60, creatinine=1.6, leukocytes=12000)


def test_merge_returns_new_sequence_without_touching_input():
    points = BASELINE
    merge_exam_point(points, "2025-08-14", EventAnalysis(urea=55))
    assert points == BASELINE


def test_dates_are_not_required_to_increase():
    merged = merge_exam_point(BASELINE, "2025-08-01", EventAnalysis(creatinine=1.2))
    assert merged[-1].date == "2025-08-01"
    assert merged[-1].creatinine == 1.2


def test_merge_requires_at_least_one_value():
    with pytest.raises(ValueError):
        merge_exam_point(BASELINE, "2025-08-14", EventAnalysis(notes="nothing here"))


def test_empty_series_needs_complete_first_point():
    with pytest.raises(SeriesBootstrapError):
        merge_exam_point((), "2025-08-14", EventAnalysis(urea=40))

    merged = merge_exam_point((), "2025-08-14", EventAnalysis(urea=40, creatinine=1.1, leukocytes=8000))
    assert merged == (ExamPoint(date="2025-08-14", urea=40, creatinine=1.1, leukocytes=8000),)


def test_apply_analysis_skips_partial_bootstrap():
    points, explanation = apply_analysis((), "unchanged", "2025-08-14", EventAnalysis(leukocytes=9000))
    assert points == ()
    assert explanation == "unchanged"


def test_apply_analysis_narrates_only_when_leukocytes_change():
    points, explanation = apply_analysis(BASELINE, "baseline", "2025-08-14", EventAnalysis(urea=70))
    assert len(points) == 2
    assert explanation == "baseline"

    points, explanation = apply_analysis(points, explanation, "2025-08-15", EventAnalysis(leukocytes=12000))
    assert len(points) == 3
    assert "fell" in explanation


def test_replay_rebuilds_series_from_events():
    events = [
        EventItem(date="2025-08-12", event="Admission", details="vomiting"),
        EventItem(date="2025-08-13", event="Labs", analysis=EventAnalysis(creatinine=1.9)),
        EventItem(date="2025-08-15", event="Labs", analysis=EventAnalysis(leukocytes=15000)),
    ]
    points, explanation = replay_series(events, BASELINE, "baseline")
    assert [p.date for p in points] == ["2025-08-12", "2025-08-13", "2025-08-15"]
    assert points[-1] == ExamPoint(date="2025-08-15", urea=60, creatinine=1.9, leukocytes=15000)
    assert "rose" in explanation


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_exam_values_must_be_finite(value):
    with pytest.raises(ValueError):
        EventAnalysis(leukocytes=value)
    with pytest.raises(ValueError):
        ExamPoint(date="2025-08-14", urea=60, creatinine=1.6, leukocytes=value)
