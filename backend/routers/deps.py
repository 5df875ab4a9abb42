from functools import lru_cache

from backend.config import settings
from backend.services.analysis import LlamaAnalysisService, build_analysis_service
from backend.services.resolver import AnalysisResolver
from backend.services.storage import SqlBlobStore, SqlTimelineStore
from backend.services.timeline import TimelineOrchestrator


@lru_cache
def get_blob_store() -> SqlBlobStore:
    return SqlBlobStore(base_url=settings.api_base_url, prefix=settings.upload_prefix)


@lru_cache
def get_orchestrator() -> TimelineOrchestrator:
    return TimelineOrchestrator(
        store=SqlTimelineStore(key=settings.timeline_key),
        blobs=get_blob_store(),
        resolver=AnalysisResolver(build_analysis_service(settings)),
        seed_on_empty=settings.seed_timeline_on_empty,
    )


def get_document_analyzer() -> LlamaAnalysisService | None:
    if not settings.openai_api_key or not settings.llama_cloud_api_key:
        return None
    return LlamaAnalysisService(
        openai_api_key=settings.openai_api_key,
        llama_api_key=settings.llama_cloud_api_key,
        timeout=settings.analysis_timeout_seconds,
    )
