from backend.models.blob import StoredBlob
from backend.models.timeline import TimelineDocument

__all__ = [
    "StoredBlob",
    "TimelineDocument",
]
