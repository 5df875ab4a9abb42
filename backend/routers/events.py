from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from backend.config import settings
from backend.routers.deps import get_orchestrator
from backend.schemas.timeline import EventDraft, FileUpload
from backend.services.timeline import TimelineOrchestrator

router = APIRouter(prefix="/api", tags=["events"])


def read_upload(file: UploadFile | None) -> FileUpload | None:
    if file is None or not file.filename:
        return None
    content = file.file.read()
    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_size_bytes:
        raise HTTPException(status_code=400, detail=f"File too large. Max size is {settings.max_upload_size_mb}MB")
    return FileUpload(filename=file.filename, content=content, content_type=file.content_type)


@router.get("/events")
def list_events(orchestrator: TimelineOrchestrator = Depends(get_orchestrator)):
    return [item.to_document() for item in orchestrator.state.events]


@router.post("/events")
def add_event(
    date: str = Form(default=""),
    event: str = Form(default=""),
    details: str = Form(default=""),
    file: UploadFile | None = File(default=None),
    orchestrator: TimelineOrchestrator = Depends(get_orchestrator),
):
    upload = read_upload(file)
    outcome = orchestrator.add_event(EventDraft(date=date, event=event, details=details), upload)
    return {
        "statusCode": 200,
        "message": "Event added",
        "data": {
            "event": outcome.event.to_document(),
            "warnings": outcome.warnings,
            "total_events": len(outcome.state.events),
        },
    }


@router.get("/exams")
def exam_series(orchestrator: TimelineOrchestrator = Depends(get_orchestrator)):
    state = orchestrator.state
    return {
        "statusCode": 200,
        "message": "Success",
        "data": {
            "points": [point.model_dump() for point in state.exam_points],
            "explanation": state.explanation,
        },
    }
