from backend.schemas.timeline import EventItem, ExamPoint

BASELINE_POINTS = (
    ExamPoint(date="2025-08-12", urea=60, creatinine=1.6, leukocytes=13800),
)

BASELINE_EXPLANATION = "Blood count: elevated leukocytes (13.800/µL) — indicates an inflammatory response."

DEFAULT_TIMELINE = (
    EventItem(
        date="2025-08-12",
        event="Admitted for dehydration",
        details="Low blood pressure, tachycardia, vomiting",
    ),
)
