import logging

from backend.schemas.timeline import EventAnalysis
from backend.services.analysis import AnalysisService
from backend.services.extractor import extract_from_text
from backend.services.parser import EXTERNAL_NOTE

logger = logging.getLogger(__name__)


class AnalysisResolver:
    """Finds the exam values for a new event.

    Text in the details field always wins, even when it matched only one
    value. The analysis service is asked only when the details gave nothing
    and a file was attached. Service failures degrade to "no analysis".
    """

    def __init__(self, service: AnalysisService | None = None):
        self.service = service

    def resolve(self, details: str, file_url: str | None = None) -> EventAnalysis | None:
        analysis = extract_from_text(details)
        if analysis is not None:
            return analysis
        if not file_url or self.service is None:
            return None

        try:
            analysis = self.service.extract(file_url)
        except Exception as exc:
            logger.warning("Analysis service failed for %s: %s", file_url, exc)
            return None

        if analysis is None or not analysis.has_values():
            return None
        if not analysis.notes:
            analysis = analysis.model_copy(update={"notes": EXTERNAL_NOTE})
        return analysis
