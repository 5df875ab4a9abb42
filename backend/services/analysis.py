import logging
import os
from typing import Protocol
from urllib.parse import unquote, urlparse

import requests
from pydantic import ValidationError

from backend.config import Settings
from backend.errors import ExternalServiceError
from backend.schemas.timeline import EventAnalysis
from backend.services.parser import extract_exam_values, parse_document_bytes

logger = logging.getLogger(__name__)


class AnalysisService(Protocol):
    def extract(self, file_url: str) -> EventAnalysis | None:
        """Read exam values out of the document at ``file_url``.

        Raises ExternalServiceError when the service fails or answers with
        something that is not an analysis payload.
        """
        ...


def analysis_from_payload(payload) -> EventAnalysis:
    if not isinstance(payload, dict):
        raise ExternalServiceError(f"analysis payload must be an object, got {type(payload).__name__}")
    try:
        return EventAnalysis.model_validate(payload)
    except ValidationError as exc:
        raise ExternalServiceError(f"malformed analysis payload: {exc.error_count()} errors") from exc


class HttpAnalysisService:
    """Posts the file URL to a remote parse endpoint, as the web client did with /api/parse."""

    def __init__(self, url: str, timeout: float = 120.0, session: requests.Session | None = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def extract(self, file_url: str) -> EventAnalysis | None:
        try:
            response = self.session.post(self.url, json={"fileUrl": file_url}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ExternalServiceError(f"analysis request failed: {exc}") from exc
        if not response.ok:
            raise ExternalServiceError(f"analysis service answered {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise ExternalServiceError("analysis service did not return JSON") from exc

        # The parse route wraps its result in the standard envelope.
        if isinstance(payload, dict) and "data" in payload and "statusCode" in payload:
            payload = payload["data"]
        if payload is None:
            return None
        return analysis_from_payload(payload)


class LlamaAnalysisService:
    """Downloads the document, parses it with LlamaParse and extracts values with an LLM."""

    def __init__(
        self,
        openai_api_key: str,
        llama_api_key: str,
        timeout: float = 120.0,
        session: requests.Session | None = None,
    ):
        self.openai_api_key = openai_api_key
        self.llama_api_key = llama_api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _download(self, file_url: str) -> tuple[bytes, str]:
        try:
            response = self.session.get(file_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ExternalServiceError(f"could not download {file_url}: {exc}") from exc
        file_name = os.path.basename(unquote(urlparse(file_url).path)) or "exam.pdf"
        return response.content, file_name

    def extract(self, file_url: str) -> EventAnalysis | None:
        file_bytes, file_name = self._download(file_url)
        try:
            parsed_text = parse_document_bytes(file_bytes, file_name, llama_api_key=self.llama_api_key)
            analysis = extract_exam_values(parsed_text, openai_api_key=self.openai_api_key)
        except RuntimeError as exc:
            raise ExternalServiceError(str(exc)) from exc
        return analysis if analysis.has_values() else None


def build_analysis_service(config: Settings) -> AnalysisService | None:
    if config.analysis_service_url:
        return HttpAnalysisService(config.analysis_service_url, timeout=config.analysis_timeout_seconds)
    if config.openai_api_key and config.llama_cloud_api_key:
        return LlamaAnalysisService(
            openai_api_key=config.openai_api_key,
            llama_api_key=config.llama_cloud_api_key,
            timeout=config.analysis_timeout_seconds,
        )
    logger.info("No analysis service configured; attached files will not be analysed")
    return None
