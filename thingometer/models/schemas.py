"""Pydantic models (API requests / responses)"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from thingometer.config import MAX_DB_INT

# Database ids are 32-bit positive integers
RowId = Annotated[int, Field(gt=0, le=MAX_DB_INT)]


class CamelModel(BaseModel):
    """JSON keys are camelCase; Python attributes stay snake_case"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ============ Request models ============

class CategoryInput(CamelModel):
    """Category definition inside an event create/update request"""
    name: str = Field(..., description="Category name")
    required: bool = Field(default=True, description="Must be scored for a score to count as complete")
    has_none_option: bool = Field(default=True, description="0 allowed as an explicit \"none\"")


class EventCreate(CamelModel):
    """Create an event"""
    name: str = Field(..., description="Event name")
    city: str = Field(..., description="City")
    event_date: Optional[datetime] = Field(None, description="Main event date")
    start_date: Optional[datetime] = Field(None, description="Start of the event window")
    end_date: Optional[datetime] = Field(None, description="End of the event window")
    active: bool = Field(default=True, description="Open for signups and judging")
    entry_category_title: Optional[str] = Field(None, description="Label of the overall winner")
    categories: Optional[List[CategoryInput]] = Field(None, description="Defaults to the standard set")
    judges: Optional[List[str]] = Field(None, description="Defaults to Judge 1..3")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Holiday Lights Parade",
                "city": "Springfield",
                "eventDate": "2026-12-12T18:00:00",
                "entryCategoryTitle": "Best Float",
                "judges": ["Alice", "Bob"],
            }
        }


class EventUpdate(CamelModel):
    """Update an event; omitted fields stay unchanged"""
    id: RowId = Field(..., description="Event ID")
    name: Optional[str] = None
    city: Optional[str] = None
    event_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    active: Optional[bool] = None
    entry_category_title: Optional[str] = None
    categories: Optional[List[CategoryInput]] = Field(None, description="Replaces all categories")
    judges: Optional[List[str]] = Field(None, description="Replaces judges without scores")


class CategoryCreate(CamelModel):
    event_id: RowId
    category_name: str
    required: bool = True
    has_none_option: bool = True


class CategoryUpdate(CamelModel):
    event_id: RowId
    category_id: RowId
    category_name: Optional[str] = None
    required: Optional[bool] = None
    has_none_option: Optional[bool] = None


class JudgeCreate(CamelModel):
    event_id: RowId
    name: str


class JudgeRename(CamelModel):
    event_id: RowId
    judge_id: RowId
    name: str


class JudgeUnlockRequest(CamelModel):
    judge_id: RowId


class EntryCreate(CamelModel):
    """Participant signup"""
    organization: str = Field(..., description="Organization name")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    entry_name: Optional[str] = None
    description: Optional[str] = None
    type_of_entry: Optional[str] = None
    event_id: Optional[RowId] = Field(None, description="Defaults to the first active event")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Free-form extra data")
    auto_approve: bool = Field(default=False, description="Honored for coordinators only")


class ApproveRequest(CamelModel):
    """Approve an entry and optionally place it"""
    entry_id: RowId = Field(..., description="Entry ID")
    approved: bool = Field(..., description="Approval flag")
    float_number: Optional[Any] = Field(None, description="Position; 999 = unordered")
    event_id: Optional[RowId] = Field(None, description="Move the entry to this event")

    class Config:
        json_schema_extra = {
            "example": {"entryId": 12, "approved": True, "floatNumber": 5, "eventId": 1}
        }


class PositionUpdate(CamelModel):
    float_id: RowId = Field(..., description="Entry ID")
    float_number: Any = Field(..., description="Position; 999 = unordered")


class ParticipantCreate(CamelModel):
    """New entry for a returning participant"""
    participant_id: Optional[int] = Field(None, description="Id from the participant search; copies the latest details")
    event_id: Optional[RowId] = Field(None, description="Defaults to the first active event")
    float_number: Optional[Any] = Field(None, description="Position; 999 = unordered")
    organization: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    entry_name: Optional[str] = None
    type_of_entry: Optional[str] = None


class StatusUpdate(CamelModel):
    status: str = Field(..., description="pending-consent / registered / checked-in / judged / completed")


class LocationUpdate(CamelModel):
    location: Optional[Dict[str, Any]] = Field(None, description="Assigned spot; null clears it")


class ScoreRequest(CamelModel):
    """Judge score save"""
    float_id: RowId = Field(..., description="Entry ID")
    scores: Dict[str, Any] = Field(..., description="Category name -> null / 0 / 1..max")

    class Config:
        json_schema_extra = {
            "example": {"floatId": 3, "scores": {"Lighting": 18, "Theme": 15, "Music": None}}
        }


# ============ Response models ============

class CategoryResponse(CamelModel):
    id: int
    event_id: int
    category_name: str
    display_order: int
    required: bool
    has_none_option: bool


class JudgeResponse(CamelModel):
    id: int
    event_id: int
    name: str
    submitted: bool


class JudgeWithCountResponse(JudgeResponse):
    score_count: int = Field(..., description="Entries this judge has scored")


class EventResponse(CamelModel):
    id: int
    name: str
    city: str
    event_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    active: bool
    entry_category_title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    categories: List[CategoryResponse] = []
    judges: List[JudgeResponse] = []


class EventDeleteResponse(CamelModel):
    success: bool = True
    deleted: Dict[str, int] = Field(..., description="Removed rows per table")


class EntryResponse(CamelModel):
    id: int
    event_id: Optional[int] = None
    organization: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    entry_name: Optional[str] = None
    description: Optional[str] = None
    type_of_entry: Optional[str] = None
    float_number: Optional[int] = Field(None, description="Position; 999 = unordered")
    approved: bool
    metadata: Dict[str, Any] = {}
    submitted_at: Optional[datetime] = None


class EntryLookupResponse(CamelModel):
    entries: List[EntryResponse]


class ParticipantResponse(CamelModel):
    """A previous participant, collapsed from their past entries"""
    id: int = Field(..., description="Position in this result list")
    organization: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    entry_name: Optional[str] = None
    type_of_entry: Optional[str] = None
    submitted_at: Optional[datetime] = None


class ParticipantEntryResponse(CamelModel):
    success: bool = True
    entry: EntryResponse
    message: str = "Entry created from participant successfully"


class JudgeEntryResponse(EntryResponse):
    """An entry as seen by one judge"""
    status: str = Field(..., description="not_started / incomplete / complete / no_show / no_organization")
    scores: Optional[Dict[str, Optional[int]]] = Field(None, description="This judge's values")
    total: Optional[int] = None


class ScoreResponse(CamelModel):
    id: int
    judge_id: int
    entry_id: int
    event_id: Optional[int] = None
    total: int
    scores: Dict[str, Optional[int]]
    updated_at: Optional[datetime] = None


class AdminScoreRow(CamelModel):
    id: int
    judge_id: int
    judge_name: str
    entry_id: int
    organization: str
    entry_name: Optional[str] = None
    float_number: Optional[int] = None
    total: int
    scores: Dict[str, Optional[int]]


class AdminScoresResponse(CamelModel):
    categories: List[str]
    scores: List[AdminScoreRow]


class RankedEntry(CamelModel):
    """One entry's total in a category"""
    entry_id: int
    organization: str
    entry_name: Optional[str] = None
    float_number: Optional[int] = None
    total: int
    scored: bool = True


class CategoryResult(CamelModel):
    category: str
    winners: List[RankedEntry] = Field(..., description="Entries sharing the top total")
    leaderboard: List[RankedEntry] = Field(..., description="All entries, highest first")


class WinnersResponse(CamelModel):
    event_id: Optional[int] = None
    entry_category_title: str
    categories: List[CategoryResult]
    overall: CategoryResult


class SubmitResponse(CamelModel):
    success: bool = True
    judge: JudgeResponse


class HealthResponse(CamelModel):
    status: str
    version: str
