import math
import re
import unicodedata
from dataclasses import dataclass

from backend.schemas.timeline import EXAM_FIELDS, EventAnalysis

DETAILS_NOTE = "Values read from the details field."

_NUMBER = r"[^0-9]*([0-9]+(?:[.,][0-9]+)?)"

# Labels are matched against normalized text: casefolded, diacritics removed.
LABEL_PATTERNS: dict[str, re.Pattern[str]] = {
    "urea": re.compile(r"\b(?:ureias?|ureas?)" + _NUMBER),
    "creatinine": re.compile(r"\b(?:creatininas?|creatinines?)" + _NUMBER),
    "leukocytes": re.compile(r"\b(?:leucocitos?|leukocytes?)" + _NUMBER),
}


@dataclass(frozen=True)
class Matched:
    field: str
    value: float


@dataclass(frozen=True)
class NotFound:
    field: str


ScanResult = Matched | NotFound


def normalize_text(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def parse_decimal(raw: str) -> float:
    return float(raw.replace(",", "."))


def scan_field(normalized: str, field: str) -> ScanResult:
    match = LABEL_PATTERNS[field].search(normalized)
    if not match:
        return NotFound(field)
    value = parse_decimal(match.group(1))
    if not math.isfinite(value):
        return NotFound(field)
    return Matched(field, value)


def extract_from_text(details: str | None) -> EventAnalysis | None:
    """Read urea, creatinine and leukocyte values out of free text.

    Returns None when the text is blank or no label is followed by a number,
    which tells the caller to try the external analysis service instead.
    """
    if not details or not details.strip():
        return None

    normalized = normalize_text(details)
    found = {}
    for field in EXAM_FIELDS:
        result = scan_field(normalized, field)
        if isinstance(result, Matched):
            found[result.field] = result.value

    if not found:
        return None
    return EventAnalysis(**found, notes=DETAILS_NOTE)
