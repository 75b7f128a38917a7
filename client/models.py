"""
Pydantic models for the records exchanged with the funding API.

The backend is loose about types: amounts arrive as "125000000.00" strings,
numbers or null, and endpoints add fields freely. Every model therefore
coerces numeric fields through safe parsing and keeps unknown fields
(``extra="allow"``) so nothing the server sends is lost.

Filter state models hold slider values in crores, the unit the listing
screens display. utils/query.py scales them to rupees when building
requests.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from utils.config import KnownValues
from utils.funding import days_left, fundraising_end, funding_progress, project_progress
from utils.strings import optional_float


def _coerce_amount(value: Any) -> Optional[float]:
    return optional_float(value)


def _coerce_int(value: Any) -> Optional[int]:
    parsed = optional_float(value)
    return None if parsed is None else int(parsed)


Amount = Annotated[Optional[float], BeforeValidator(_coerce_amount)]
OptionalInt = Annotated[Optional[int], BeforeValidator(_coerce_int)]
RangePair = tuple[float, float]


class _ApiRecord(BaseModel):
    # ids arrive as ints or strings depending on the endpoint
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)


# ── Filter state ──────────────────────────────────────────────────────────────

class NumericRange(BaseModel):
    """Observed min/max for one range slider, in crores."""
    min: float = Field(0.0, description="Lowest selectable value")
    max: float = Field(0.0, description="Highest selectable value")

    def as_pair(self) -> RangePair:
        return (self.min, self.max)


def _default_range(pair: tuple[int, int]) -> NumericRange:
    return NumericRange(min=pair[0], max=pair[1])


class ValueRanges(BaseModel):
    """Calibration for the advanced filter sliders (GET /projects/value-ranges)."""
    fund_requirement: NumericRange = Field(
        default_factory=lambda: _default_range(KnownValues.DEFAULT_FUND_REQUIREMENT_RANGE)
    )
    commitment_gap: NumericRange = Field(
        default_factory=lambda: _default_range(KnownValues.DEFAULT_COMMITMENT_GAP_RANGE)
    )
    project_cost: NumericRange = Field(
        default_factory=lambda: _default_range(KnownValues.DEFAULT_PROJECT_COST_RANGE)
    )


class FilterState(BaseModel):
    """Filters on the live projects listing.

    Created with full-range defaults; a range left at its default is not
    sent to the server.
    """
    search: str = ""
    categories: list[str] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)
    status: list[str] = Field(default_factory=list)
    funding_range: RangePair = KnownValues.DEFAULT_FUNDING_RANGE
    progress_range: RangePair = KnownValues.DEFAULT_PROGRESS_RANGE
    days_left_range: RangePair = KnownValues.DEFAULT_DAYS_LEFT_RANGE
    interest_rate_range: RangePair = KnownValues.DEFAULT_INTEREST_RATE_RANGE


class AdvancedFilterState(BaseModel):
    """Filters on the advanced search panel, calibrated by ValueRanges."""
    project_reference_id: str = ""
    location: str = ""
    project_category: str = ""
    project_stage: str = ""
    status: str = ""
    credit_score: str = ""
    funding_type: str = ""
    mode_of_implementation: str = ""
    ownership: str = ""
    fund_requirement: RangePair = KnownValues.DEFAULT_FUND_REQUIREMENT_RANGE
    commitment_gap: RangePair = KnownValues.DEFAULT_COMMITMENT_GAP_RANGE
    project_cost: RangePair = KnownValues.DEFAULT_PROJECT_COST_RANGE

    @classmethod
    def from_value_ranges(cls, ranges: ValueRanges, **overrides: Any) -> "AdvancedFilterState":
        """Fresh state whose sliders span the server-reported ranges.

        Lower bounds are floored at 0 and upper bounds never sit below the
        lower bound.
        """
        def span(r: NumericRange) -> RangePair:
            return (max(0.0, r.min), max(r.min, r.max))

        values = {
            "fund_requirement": span(ranges.fund_requirement),
            "commitment_gap": span(ranges.commitment_gap),
            "project_cost": span(ranges.project_cost),
        }
        values.update(overrides)
        return cls(**values)


# ── Projects ──────────────────────────────────────────────────────────────────

class Project(_ApiRecord):
    """A project listing. Amounts are in rupees."""
    id: OptionalInt = Field(None, description="Numeric project id")
    project_reference_id: Optional[str] = Field(None, description="Public reference", examples=["PROJ-2025-00037"])
    title: Optional[str] = None
    organization_type: Optional[str] = None
    organization_id: Optional[str] = None
    department: Optional[str] = None
    contact_person: Optional[str] = None
    contact_person_designation: Optional[str] = None
    contact_person_email: Optional[str] = None
    contact_person_phone: Optional[str] = None
    category: Optional[str] = None
    project_stage: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    ward: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    fundraising_start_date: Optional[str] = None
    fundraising_end_date: Optional[str] = None
    total_project_cost: Amount = None
    funding_requirement: Amount = Field(None, description="Total funding sought")
    already_secured_funds: Amount = None
    commitment_gap: Amount = Field(None, description="Requirement minus secured funds; the progress target")
    total_committed_amount: Amount = Field(None, description="Sum of commitments received")
    minimum_commitment_amount: Amount = None
    funding_raised: Amount = None
    funding_percentage: Amount = None
    currency: Optional[str] = "INR"
    municipality_credit_rating: Optional[str] = None
    municipality_credit_score: Optional[str] = None
    status: Optional[str] = Field(None, description="draft | active | live | completed | cancelled ...")
    visibility: Optional[str] = None
    is_favorite: bool = False
    favorite_count: OptionalInt = None

    @field_validator("is_favorite", mode="before")
    @classmethod
    def _favorite_flag(cls, value: Any) -> bool:
        return bool(value)

    @property
    def progress(self) -> int:
        """Committed amount against the commitment gap, 0-100."""
        return project_progress(self)

    @property
    def days_left(self) -> int:
        return days_left(self.fundraising_end_date)


class FavoriteProject(_ApiRecord):
    """Row from GET /project-favorites/project-details."""
    project_reference_id: Optional[str] = None
    id: OptionalInt = None
    title: Optional[str] = None
    project_title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    project_category: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    municipality_id: Optional[str] = None
    already_secured_funds: Amount = None
    funding_raised: Amount = None
    funds_secured: Amount = None
    funding_requirement: Amount = None
    funding_required: Amount = None
    funding_end_date: Optional[str] = None
    funding_close_date: Optional[str] = None
    fundraising_end_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None
    favorite_count: OptionalInt = None
    is_favorite: bool = True

    @property
    def display_title(self) -> str:
        return self.title or self.project_title or self.project_reference_id or ""

    @property
    def current_funding(self) -> float:
        for value in (self.already_secured_funds, self.funding_raised, self.funds_secured):
            if value is not None:
                return value
        return 0.0

    @property
    def required_funding(self) -> float:
        for value in (self.funding_requirement, self.funding_required):
            if value is not None:
                return value
        return 0.0

    @property
    def progress(self) -> int:
        """Share of the requirement already raised, 0-100; 0 with no requirement."""
        return funding_progress(self.current_funding, self.required_funding)

    @property
    def days_left(self) -> int:
        return days_left(fundraising_end(self))


class ProjectForm(BaseModel):
    """Create/draft project form, keyed by API field names.

    Numeric and date fields are kept as the strings the user typed;
    validate_project_form() checks them before anything is sent.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    organization_id: str = ""
    organization_type: str = "municipality"
    department: str = ""
    contact_person: str = ""
    contact_person_designation: str = ""
    contact_person_email: str = ""
    contact_person_phone: str = ""
    category: str = ""
    project_stage: str = ""
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    total_project_cost: str = ""
    funding_requirement: str = ""
    already_secured_funds: str = ""
    fundraising_start_date: str = ""
    fundraising_end_date: str = ""
    municipality_credit_rating: str = ""
    municipality_credit_score: str = ""
    state: str = ""
    city: str = ""
    ward: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _blank_none(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @classmethod
    def from_record(cls, record: Any) -> "ProjectForm":
        """Fill a form from a saved draft or a rejected project.

        Timestamps are cut back to their date part.
        """
        data = record.model_dump() if hasattr(record, "model_dump") else dict(record or {})
        values = {name: data.get(name) for name in cls.model_fields if data.get(name) is not None}
        for name in ("start_date", "end_date", "fundraising_start_date", "fundraising_end_date"):
            if values.get(name):
                values[name] = str(values[name]).split("T")[0]
        return cls(**values)

    def to_payload(self) -> dict[str, Any]:
        """Request body for POST /projects/ and the draft endpoints."""
        requirement = optional_float(self.funding_requirement) or 0.0
        secured = optional_float(self.already_secured_funds) or 0.0
        gap = requirement - secured
        stage = self.project_stage.lower().replace(" ", "_") if self.project_stage else "planning"

        payload: dict[str, Any] = {
            "organization_type": self.organization_type,
            "organization_id": self.organization_id,
            "title": self.title,
            "department": self.department,
            "contact_person": self.contact_person,
            "contact_person_designation": self.contact_person_designation or None,
            "contact_person_email": self.contact_person_email or None,
            "contact_person_phone": self.contact_person_phone or None,
            "category": self.category,
            "project_stage": stage,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "total_project_cost": self.total_project_cost or "0.00",
            "funding_requirement": self.funding_requirement or "0.00",
            "already_secured_funds": self.already_secured_funds or "0.00",
            "commitment_gap": gap if gap > 0 else None,
            "fundraising_start_date": (
                f"{self.fundraising_start_date}T00:00:00Z" if self.fundraising_start_date else None
            ),
            "fundraising_end_date": (
                f"{self.fundraising_end_date}T23:59:59Z" if self.fundraising_end_date else None
            ),
            "municipality_credit_rating": self.municipality_credit_rating,
            "municipality_credit_score": self.municipality_credit_score,
            "state": self.state or None,
            "city": self.city or None,
            "ward": self.ward or None,
        }
        return {k: v for k, v in payload.items() if v is not None}


# ── Commitments ───────────────────────────────────────────────────────────────

class Commitment(_ApiRecord):
    """A lender's funding pledge against a project."""
    id: OptionalInt = None
    project_reference_id: Optional[str] = None
    organization_type: Optional[str] = None
    organization_id: Optional[str] = None
    committed_by: Optional[str] = None
    amount: Amount = None
    currency: str = "INR"
    funding_mode: Optional[str] = Field(None, description="loan | grant | csr")
    interest_rate: Amount = None
    tenure_months: OptionalInt = None
    terms_conditions_text: Optional[str] = None
    status: Optional[str] = Field(None, description="under_review | approved | rejected | withdrawn")

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, value: Any) -> Any:
        return value or "INR"

    @property
    def is_under_review(self) -> bool:
        return (self.status or "").lower() == "under_review"


# ── Documents and meetings ────────────────────────────────────────────────────

class UploadedDocument(_ApiRecord):
    """File metadata attached to a document request response."""
    id: OptionalInt = None
    file_id: OptionalInt = None
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: OptionalInt = Field(None, description="Size in bytes")
    uploaded_at: Optional[str] = None

    @property
    def download_id(self) -> Optional[int]:
        return self.file_id if self.file_id is not None else self.id


class MeetingRecording(_ApiRecord):
    id: OptionalInt = None
    file_id: OptionalInt = None
    file: Optional[UploadedDocument] = None
    uploaded_at: Optional[str] = None


class Meeting(_ApiRecord):
    """Meeting scheduled by a municipality in response to a lender request."""
    meeting_scheduled_at: Optional[str] = None
    meeting_link: Optional[str] = None
    meeting_recording: Optional[MeetingRecording] = None


class DocumentRequest(_ApiRecord):
    """A lender's request to a municipality for documents or a meeting."""
    id: OptionalInt = None
    project_reference_id: Optional[str] = None
    project_title: Optional[str] = None
    project: Optional[dict[str, Any]] = None
    requested_by: Optional[str] = None
    description: Optional[str] = None
    requested_at: Optional[str] = None
    request_type: str = Field("document", description="document | meeting")
    status: Optional[str] = Field(None, description="pending | active | completed | cancelled")
    responded_at: Optional[str] = None
    documents: list[UploadedDocument] = Field(default_factory=list)
    meeting_scheduled_at: Optional[str] = None
    meeting_link: Optional[str] = None
    meeting_recording: Optional[MeetingRecording] = None

    @field_validator("documents", mode="before")
    @classmethod
    def _none_documents(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("request_type", mode="before")
    @classmethod
    def _default_request_type(cls, value: Any) -> Any:
        return value or "document"

    @property
    def meeting(self) -> Optional[Meeting]:
        if not (self.meeting_scheduled_at or self.meeting_link or self.meeting_recording):
            return None
        return Meeting(
            meeting_scheduled_at=self.meeting_scheduled_at,
            meeting_link=self.meeting_link,
            meeting_recording=self.meeting_recording,
        )


# ── Q&A and notes ─────────────────────────────────────────────────────────────

class Answer(_ApiRecord):
    reply_text: Optional[str] = None
    replied_by_user_id: Optional[str] = None
    document_links: Optional[str] = None
    created_at: Optional[str] = None


class Question(_ApiRecord):
    """A question asked on a project, with its answer if any."""
    id: OptionalInt = None
    project_id: Optional[str] = None
    project_reference_id: Optional[str] = None
    question_text: Optional[str] = None
    asked_by: Optional[str] = None
    category: str = "General"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    answer: Optional[Answer] = None
    reply_text: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> Any:
        return value or "General"

    @property
    def answer_text(self) -> Optional[str]:
        if self.answer and self.answer.reply_text:
            return self.answer.reply_text
        return self.reply_text

    @property
    def status(self) -> str:
        return "answered" if self.answer_text else "open"


class ProjectNote(_ApiRecord):
    """A private note a lender keeps on a project."""
    id: OptionalInt = None
    project_reference_id: Optional[str] = None
    organization_id: Optional[str] = None
    title: str = ""
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, value: Any) -> Any:
        return [] if value is None else value
