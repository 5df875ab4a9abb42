from pydantic import AliasChoices, BaseModel, ConfigDict, Field

EXAM_FIELDS = ("urea", "creatinine", "leukocytes")


class ExamPoint(BaseModel):
    """One row of the lab-value series. All three readings are always present."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    date: str
    urea: float
    creatinine: float
    leukocytes: float


class EventAnalysis(BaseModel):
    """Lab values attached to one event, plus a note on where they came from."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    urea: float | None = Field(default=None, validation_alias=AliasChoices("urea", "ureia"))
    creatinine: float | None = Field(default=None, validation_alias=AliasChoices("creatinine", "creatinina"))
    leukocytes: float | None = Field(default=None, validation_alias=AliasChoices("leukocytes", "leucocitos"))
    notes: str | None = Field(default=None, validation_alias=AliasChoices("notes", "notas"))

    def values(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in EXAM_FIELDS if getattr(self, name) is not None}

    def has_values(self) -> bool:
        return bool(self.values())


class EventItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str = Field(min_length=1)
    event: str = Field(min_length=1)
    details: str = ""
    file_url: str | None = Field(default=None, alias="fileUrl")
    analysis: EventAnalysis | None = None

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class EventDraft(BaseModel):
    date: str = ""
    event: str = ""
    details: str = ""


class FileUpload(BaseModel):
    filename: str
    content: bytes
    content_type: str | None = None


class TimelineState(BaseModel):
    """Immutable snapshot of the timeline, its exam series and the current explanation."""
    model_config = ConfigDict(frozen=True)

    events: tuple[EventItem, ...] = ()
    exam_points: tuple[ExamPoint, ...] = ()
    explanation: str = ""


class AddEventOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: TimelineState
    event: EventItem
    warnings: list[str] = Field(default_factory=list)


class ParseRequest(BaseModel):
    file_url: str = Field(alias="fileUrl")
