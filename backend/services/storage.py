import json
import logging
import os
import time
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from backend.database import SessionLocal, session_scope
from backend.errors import ExternalServiceError, LoadError, PersistenceError
from backend.models.blob import StoredBlob
from backend.models.timeline import TimelineDocument
from backend.schemas.timeline import EventItem

logger = logging.getLogger(__name__)


class TimelineStore(Protocol):
    def load(self) -> tuple[EventItem, ...]: ...

    def save(self, events: Sequence[EventItem]) -> None: ...


class BlobStore(Protocol):
    def upload(self, content: bytes, filename: str, content_type: str | None = None) -> str: ...

    def fetch(self, name: str) -> StoredBlob | None: ...


def dump_timeline(events: Sequence[EventItem]) -> str:
    return json.dumps([item.to_document() for item in events], indent=2, ensure_ascii=False)


def parse_timeline(raw: str) -> tuple[EventItem, ...]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LoadError(f"timeline document is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise LoadError("timeline document must be a JSON array")
    return tuple(EventItem.model_validate(item) for item in payload)


class SqlTimelineStore:
    """Keeps the whole timeline as one pretty-printed JSON document under a fixed key."""

    def __init__(self, key: str, session_factory: sessionmaker = SessionLocal):
        self.key = key
        self.session_factory = session_factory

    def _document(self, db: Session) -> TimelineDocument | None:
        return db.query(TimelineDocument).filter(TimelineDocument.key == self.key).first()

    def load(self) -> tuple[EventItem, ...]:
        try:
            with session_scope(self.session_factory) as db:
                document = self._document(db)
                raw = document.content if document else None
            if raw is None:
                return ()
            return parse_timeline(raw)
        except Exception as exc:
            logger.warning("Failed to load timeline %s, starting empty: %s", self.key, exc)
            return ()

    def save(self, events: Sequence[EventItem]) -> None:
        content = dump_timeline(events)
        try:
            with session_scope(self.session_factory) as db:
                document = self._document(db)
                if document is None:
                    document = TimelineDocument(key=self.key, content=content, version=1)
                else:
                    document.content = content
                    document.version += 1
                document.updated_at = datetime.utcnow()
                db.add(document)
        except Exception as exc:
            raise PersistenceError(f"failed to save timeline {self.key}") from exc


class SqlBlobStore:
    def __init__(self, base_url: str, prefix: str = "exams", session_factory: sessionmaker = SessionLocal):
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix.strip("/")
        self.session_factory = session_factory

    def blob_name(self, filename: str) -> str:
        safe_name = os.path.basename(filename.replace("\\", "/")) or "file"
        return f"{self.prefix}/{int(time.time() * 1000)}-{safe_name}"

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/api/files/{name}"

    def upload(self, content: bytes, filename: str, content_type: str | None = None) -> str:
        name = self.blob_name(filename)
        try:
            with session_scope(self.session_factory) as db:
                db.add(
                    StoredBlob(
                        name=name,
                        content=content,
                        content_type=content_type,
                        original_filename=filename,
                    )
                )
        except Exception as exc:
            raise ExternalServiceError(f"upload of {filename} failed") from exc
        return self.url_for(name)

    def fetch(self, name: str) -> StoredBlob | None:
        with session_scope(self.session_factory) as db:
            blob = db.query(StoredBlob).filter(StoredBlob.name == name).first()
            if blob is not None:
                db.expunge(blob)
            return blob
