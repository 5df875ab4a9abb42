import logging
import threading

from backend.errors import EventValidationError, ExternalServiceError, PersistenceError
from backend.schemas.timeline import AddEventOutcome, EventDraft, EventItem, FileUpload, TimelineState
from backend.seed.timeline_seed import BASELINE_EXPLANATION, BASELINE_POINTS, DEFAULT_TIMELINE
from backend.services.resolver import AnalysisResolver
from backend.services.series import apply_analysis, replay_series
from backend.services.storage import BlobStore, TimelineStore

logger = logging.getLogger(__name__)

UPLOAD_FAILED_WARNING = "File upload failed; the event was saved without an attachment."


def validate_draft(draft: EventDraft) -> EventDraft:
    if not draft.date.strip() or not draft.event.strip():
        raise EventValidationError("date and event are required")
    return draft


class TimelineOrchestrator:
    """Runs the add-event pipeline and owns the current TimelineState snapshot.

    The snapshot is replaced only after the timeline document has been saved,
    so a failure anywhere in the pipeline leaves the previous state in place.
    Add-event calls are serialized within the process.
    """

    def __init__(
        self,
        store: TimelineStore,
        blobs: BlobStore,
        resolver: AnalysisResolver,
        baseline=BASELINE_POINTS,
        baseline_explanation: str = BASELINE_EXPLANATION,
        seed_on_empty: bool = True,
    ):
        self.store = store
        self.blobs = blobs
        self.resolver = resolver
        self.baseline = tuple(baseline)
        self.baseline_explanation = baseline_explanation
        self.seed_on_empty = seed_on_empty
        self._lock = threading.Lock()
        self._state: TimelineState | None = None

    def build_state(self, events) -> TimelineState:
        events = tuple(events)
        points, explanation = replay_series(events, self.baseline, self.baseline_explanation)
        return TimelineState(events=events, exam_points=points, explanation=explanation)

    def reload(self) -> TimelineState:
        events = self.store.load()
        if not events and self.seed_on_empty:
            events = DEFAULT_TIMELINE
        state = self.build_state(events)
        with self._lock:
            self._state = state
        return state

    @property
    def state(self) -> TimelineState:
        if self._state is None:
            return self.reload()
        return self._state

    def _upload(self, upload: FileUpload, warnings: list[str]) -> str | None:
        try:
            return self.blobs.upload(upload.content, upload.filename, upload.content_type)
        except ExternalServiceError as exc:
            logger.warning("Upload of %s failed: %s", upload.filename, exc)
            warnings.append(UPLOAD_FAILED_WARNING)
            return None

    def add_event(self, draft: EventDraft, upload: FileUpload | None = None) -> AddEventOutcome:
        validate_draft(draft)
        current = self.state

        with self._lock:
            if self._state is not None:
                current = self._state
            warnings: list[str] = []
            file_url = self._upload(upload, warnings) if upload is not None else None
            analysis = self.resolver.resolve(draft.details, file_url)

            points, explanation = apply_analysis(current.exam_points, current.explanation, draft.date, analysis)
            item = EventItem(
                date=draft.date,
                event=draft.event,
                details=draft.details,
                file_url=file_url,
                analysis=analysis,
            )
            updated = TimelineState(
                events=(*current.events, item),
                exam_points=points,
                explanation=explanation,
            )

            try:
                self.store.save(updated.events)
            except PersistenceError:
                logger.warning("Timeline save failed; keeping %d events in memory", len(current.events))
                raise

            self._state = updated

        logger.info("Added event %r on %s (analysis: %s)", item.event, item.date, analysis is not None)
        return AddEventOutcome(state=updated, event=item, warnings=warnings)
