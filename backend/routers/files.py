from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from backend.errors import ExternalServiceError
from backend.routers.deps import get_blob_store, get_document_analyzer
from backend.routers.events import read_upload
from backend.schemas.timeline import ParseRequest
from backend.services.storage import BlobStore

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/upload")
def upload_file(file: UploadFile | None = File(default=None), blobs: BlobStore = Depends(get_blob_store)):
    upload = read_upload(file)
    if upload is None:
        raise HTTPException(status_code=400, detail="File is required")
    url = blobs.upload(upload.content, upload.filename, upload.content_type)
    return {"url": url}


@router.get("/files/{name:path}")
def download_file(name: str, blobs: BlobStore = Depends(get_blob_store)):
    blob = blobs.fetch(name)
    if blob is None:
        raise HTTPException(status_code=404, detail="File not found")
    filename = blob.original_filename or name.rsplit("/", 1)[-1]
    return Response(
        content=blob.content,
        media_type=blob.content_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/parse")
def parse_file(payload: ParseRequest, analyzer=Depends(get_document_analyzer)):
    if analyzer is None:
        raise ExternalServiceError("document analysis is not configured")
    analysis = analyzer.extract(payload.file_url)
    return {
        "statusCode": 200,
        "message": "Success",
        "data": analysis.model_dump(exclude_none=True) if analysis else None,
    }
