"""Public and judge-facing API routes"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from thingometer import __version__
from thingometer.config import MAX_DB_INT
from thingometer.api.dependencies import get_judge_id, is_admin
from thingometer.api.serializers import entry_fields, entry_response, event_response
from thingometer.db.crud import (
    create_entry,
    find_entries_by_email,
    get_event_categories,
    list_event_judges,
    list_events,
)
from thingometer.db.database import get_db
from thingometer.judging.scoring import list_entries_for_judge, save_score, submit_judge
from thingometer.models.schemas import (
    CategoryResponse,
    EntryCreate,
    EntryLookupResponse,
    EntryResponse,
    EventResponse,
    HealthResponse,
    JudgeEntryResponse,
    JudgeResponse,
    ScoreRequest,
    ScoreResponse,
    SubmitResponse,
)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/events", response_model=List[EventResponse])
async def get_active_events(db: AsyncSession = Depends(get_db)):
    """Active events, for the signup form and judge login"""
    events = await list_events(db, active_only=True)
    return [event_response(event) for event in events]


@router.get("/event-categories", response_model=List[CategoryResponse])
async def get_categories(
    event_id: int = Query(..., alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Scoring categories of an event in display order"""
    categories = await get_event_categories(db, event_id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.get("/judges", response_model=List[JudgeResponse])
async def get_event_judges(
    event_id: int = Query(..., alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Judges of an event by name, for the judge login"""
    judges = await list_event_judges(db, event_id)
    return [JudgeResponse.model_validate(judge) for judge in judges]


@router.get("/entries", response_model=EntryLookupResponse)
async def lookup_entries(email: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    """A participant's own signups, found by email"""
    entries = await find_entries_by_email(db, email)
    return EntryLookupResponse(entries=[entry_response(entry) for entry in entries])


@router.post("/entries", response_model=EntryResponse, status_code=201)
async def signup(
    request: EntryCreate,
    admin: bool = Depends(is_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Participant signup.

    Entries are created unapproved; a coordinator (admin password) may
    pass ``autoApprove``.
    """
    logger.info(f"Signup request: organization={request.organization}, event={request.event_id}")

    entry = await create_entry(
        db=db,
        data=request.model_dump(exclude={"event_id", "auto_approve"}),
        event_id=request.event_id,
        auto_approve=request.auto_approve and admin,
    )
    return entry_response(entry)


@router.get("/floats", response_model=List[JudgeEntryResponse])
async def get_judge_entries(
    judge_id: int = Depends(get_judge_id),
    db: AsyncSession = Depends(get_db),
):
    """Approved entries of the judge's event with this judge's scores and status"""
    rows = await list_entries_for_judge(db, judge_id)
    return [
        JudgeEntryResponse(
            **entry_fields(row["entry"]),
            status=row["status"],
            scores=row["values"],
            total=row["score"].total if row["score"] else None,
        )
        for row in rows
    ]


@router.post("/scores", response_model=ScoreResponse)
@router.patch("/scores", response_model=ScoreResponse)
async def save_entry_score(
    request: ScoreRequest,
    judge_id: int = Depends(get_judge_id),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the judge's score for one entry"""
    logger.info(f"Score save: judge={judge_id}, entry={request.float_id}")

    score, stored = await save_score(db, judge_id, request.float_id, request.scores)
    return ScoreResponse(
        id=score.id,
        judge_id=score.judge_id,
        entry_id=score.entry_id,
        event_id=score.event_id,
        total=score.total,
        scores=stored,
        updated_at=score.updated_at,
    )


@router.post("/judge/submit", response_model=SubmitResponse)
async def submit_scores(
    judge_id: int = Depends(get_judge_id),
    db: AsyncSession = Depends(get_db),
):
    """Lock the judge's scores"""
    judge = await submit_judge(db, judge_id)
    return SubmitResponse(judge=JudgeResponse.model_validate(judge))
