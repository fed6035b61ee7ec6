"""Admin API routes (password protected)"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from thingometer.config import MAX_DB_INT
from thingometer.api.dependencies import require_admin
from thingometer.api.serializers import event_response, winners_response
from thingometer.db.crud import (
    add_category,
    add_judge,
    create_event,
    delete_category,
    delete_event,
    delete_judge,
    list_events,
    list_judges_with_counts,
    list_scores,
    rename_judge,
    update_category,
    update_event,
)
from thingometer.db.database import get_db
from thingometer.judging.aggregation import aggregate_scores
from thingometer.judging.scoring import unlock_judge
from thingometer.models.schemas import (
    AdminScoreRow,
    AdminScoresResponse,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    EventCreate,
    EventDeleteResponse,
    EventResponse,
    EventUpdate,
    JudgeCreate,
    JudgeRename,
    JudgeResponse,
    JudgeUnlockRequest,
    JudgeWithCountResponse,
    WinnersResponse,
)

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


# ============ Events ============

@router.get("/events", response_model=List[EventResponse])
async def get_events(db: AsyncSession = Depends(get_db)):
    """All events with their categories and judges"""
    events = await list_events(db)
    return [event_response(event) for event in events]


@router.post("/events", response_model=EventResponse, status_code=201)
async def post_event(request: EventCreate, db: AsyncSession = Depends(get_db)):
    """Create an event; default categories and judges are seeded when omitted"""
    logger.info(f"Create event: {request.name} ({request.city})")
    event = await create_event(
        db=db,
        name=request.name,
        city=request.city,
        event_date=request.event_date,
        start_date=request.start_date,
        end_date=request.end_date,
        active=request.active,
        entry_category_title=request.entry_category_title,
        categories=[c.model_dump() for c in request.categories] if request.categories else None,
        judges=request.judges,
    )
    return event_response(event)


@router.patch("/events", response_model=EventResponse)
async def patch_event(request: EventUpdate, db: AsyncSession = Depends(get_db)):
    """Update an event"""
    fields = request.model_dump(exclude_unset=True, exclude={"id", "categories", "judges"})
    event = await update_event(
        db=db,
        event_id=request.id,
        fields=fields,
        categories=[c.model_dump() for c in request.categories] if request.categories is not None else None,
        judges=request.judges,
    )
    return event_response(event)


@router.delete("/events", response_model=EventDeleteResponse)
async def remove_event(
    event_id: int = Query(..., alias="id", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event with all of its entries, scores, categories and judges"""
    counts = await delete_event(db, event_id)
    return EventDeleteResponse(deleted=counts)


# ============ Categories ============

@router.post("/events/categories", response_model=CategoryResponse, status_code=201)
async def post_category(request: CategoryCreate, db: AsyncSession = Depends(get_db)):
    category = await add_category(
        db,
        request.event_id,
        request.category_name,
        required=request.required,
        has_none_option=request.has_none_option,
    )
    return CategoryResponse.model_validate(category)


@router.patch("/events/categories", response_model=CategoryResponse)
async def patch_category(request: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    category = await update_category(
        db,
        request.event_id,
        request.category_id,
        category_name=request.category_name,
        required=request.required,
        has_none_option=request.has_none_option,
    )
    return CategoryResponse.model_validate(category)


@router.delete("/events/categories")
async def remove_category(
    event_id: int = Query(..., alias="eventId", gt=0, le=MAX_DB_INT),
    category_id: int = Query(..., alias="categoryId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    await delete_category(db, event_id, category_id)
    return {"success": True}


# ============ Judges ============

@router.post("/events/judges", response_model=JudgeResponse, status_code=201)
async def post_judge(request: JudgeCreate, db: AsyncSession = Depends(get_db)):
    judge = await add_judge(db, request.event_id, request.name)
    return JudgeResponse.model_validate(judge)


@router.patch("/events/judges", response_model=JudgeResponse)
async def patch_judge(request: JudgeRename, db: AsyncSession = Depends(get_db)):
    judge = await rename_judge(db, request.event_id, request.judge_id, request.name)
    return JudgeResponse.model_validate(judge)


@router.delete("/events/judges")
async def remove_judge(
    event_id: int = Query(..., alias="eventId", gt=0, le=MAX_DB_INT),
    judge_id: int = Query(..., alias="judgeId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Delete a judge; refused once the judge has scored"""
    await delete_judge(db, event_id, judge_id)
    return {"success": True}


@router.get("/judges", response_model=List[JudgeWithCountResponse])
async def get_judges(
    event_id: Optional[int] = Query(None, alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Judges with how many entries each has scored"""
    rows = await list_judges_with_counts(db, event_id)
    return [
        JudgeWithCountResponse(
            id=judge.id,
            event_id=judge.event_id,
            name=judge.name,
            submitted=judge.submitted,
            score_count=count,
        )
        for judge, count in rows
    ]


@router.post("/judges/unlock", response_model=JudgeResponse)
async def post_unlock(request: JudgeUnlockRequest, db: AsyncSession = Depends(get_db)):
    """Reopen a submitted judge's scores for editing"""
    judge = await unlock_judge(db, request.judge_id)
    return JudgeResponse.model_validate(judge)


# ============ Results ============

@router.get("/scores", response_model=AdminScoresResponse)
async def get_scores(
    event_id: Optional[int] = Query(None, alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Every judge's score with per-category values"""
    category_names, rows = await list_scores(db, event_id)
    return AdminScoresResponse(
        categories=category_names,
        scores=[
            AdminScoreRow(
                id=row["score"].id,
                judge_id=row["judge"].id,
                judge_name=row["judge"].name,
                entry_id=row["entry"].id,
                organization=row["entry"].organization,
                entry_name=row["entry"].entry_name,
                float_number=row["entry"].position,
                total=row["score"].total,
                scores=row["values"],
            )
            for row in rows
        ],
    )


@router.get("/winners", response_model=WinnersResponse)
async def get_winners(
    event_id: Optional[int] = Query(None, alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """
    Category and overall winners.

    Without ``eventId`` every event's entries are pooled.
    """
    logger.info(f"Winners requested for event={event_id}")
    report = await aggregate_scores(db, event_id)
    response = winners_response(report, event_id)
    logger.success(
        f"Winners computed: {len(response.categories)} categories, "
        f"{len(response.overall.winners)} overall winner(s)"
    )
    return response
