import logging
from collections.abc import Iterable

from backend.schemas.timeline import EXAM_FIELDS, EventAnalysis, EventItem, ExamPoint
from backend.services.trend_analyzer import narrate_leukocytes

logger = logging.getLogger(__name__)


class SeriesBootstrapError(ValueError):
    """A partial analysis arrived while the series had no point to carry values from."""


def merge_exam_point(points: tuple[ExamPoint, ...], date: str, analysis: EventAnalysis) -> tuple[ExamPoint, ...]:
    values = analysis.values()
    if not values:
        raise ValueError("analysis carries no exam values")

    if not points:
        missing = [name for name in EXAM_FIELDS if name not in values]
        if missing:
            raise SeriesBootstrapError(f"first exam point needs every field, missing: {', '.join(missing)}")
        return (ExamPoint(date=date, **values),)

    last = points[-1]
    merged = {name: values.get(name, getattr(last, name)) for name in EXAM_FIELDS}
    return (*points, ExamPoint(date=date, **merged))


def apply_analysis(
    points: tuple[ExamPoint, ...],
    explanation: str,
    date: str,
    analysis: EventAnalysis | None,
) -> tuple[tuple[ExamPoint, ...], str]:
    """Fold one event's analysis into the series and refresh the explanation."""
    if analysis is None or not analysis.has_values():
        return points, explanation

    try:
        merged = merge_exam_point(points, date, analysis)
    except SeriesBootstrapError as exc:
        logger.warning("Skipping exam point for %s: %s", date, exc)
        return points, explanation

    if analysis.leukocytes is not None and points:
        explanation = narrate_leukocytes(points[-1].leukocytes, analysis.leukocytes)
    return merged, explanation


def replay_series(
    events: Iterable[EventItem],
    baseline: tuple[ExamPoint, ...] = (),
    explanation: str = "",
) -> tuple[tuple[ExamPoint, ...], str]:
    points = tuple(baseline)
    for item in events:
        points, explanation = apply_analysis(points, explanation, item.date, item.analysis)
    return points, explanation
