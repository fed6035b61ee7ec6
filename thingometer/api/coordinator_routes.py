"""Coordinator API routes: approvals, running order and entry logistics"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from thingometer.config import MAX_DB_INT
from thingometer.api.dependencies import require_admin
from thingometer.api.serializers import entry_response
from thingometer.db.crud import (
    approve_entry,
    create_entry_from_participant,
    delete_entry,
    list_unapproved_entries,
    search_participants,
    set_entry_position,
    update_entry_location,
    update_entry_status,
)
from thingometer.db.database import get_db
from thingometer.judging.positions import list_positions
from thingometer.models.schemas import (
    ApproveRequest,
    EntryResponse,
    LocationUpdate,
    ParticipantCreate,
    ParticipantEntryResponse,
    ParticipantResponse,
    PositionUpdate,
    StatusUpdate,
)

router = APIRouter(prefix="/coordinator", dependencies=[Depends(require_admin)])


@router.get("/approve", response_model=List[EntryResponse])
async def get_pending_entries(
    event_id: Optional[int] = Query(None, alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Entries waiting for approval, newest first"""
    entries = await list_unapproved_entries(db, event_id)
    return [entry_response(entry) for entry in entries]


@router.patch("/approve", response_model=EntryResponse)
async def patch_approval(request: ApproveRequest, db: AsyncSession = Depends(get_db)):
    """
    Approve an entry and place it in the running order.

    A taken ``floatNumber`` pushes its holder and every later entry of the
    event back by one; 999 leaves the entry unordered.
    """
    logger.info(
        f"Approval: entry={request.entry_id}, approved={request.approved}, "
        f"floatNumber={request.float_number}, event={request.event_id}"
    )
    entry = await approve_entry(
        db,
        request.entry_id,
        request.approved,
        position=request.float_number,
        event_id=request.event_id,
    )
    return entry_response(entry)


@router.delete("/approve")
async def remove_entry(
    entry_id: int = Query(..., alias="entryId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Delete an entry that has not been scored"""
    await delete_entry(db, entry_id)
    return {"success": True}


@router.get("/floats", response_model=List[EntryResponse])
async def get_running_order(
    event_id: Optional[int] = Query(None, alias="eventId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Entries by position; unpositioned entries last"""
    entries = await list_positions(db, event_id)
    return [entry_response(entry) for entry in entries]


@router.patch("/floats", response_model=EntryResponse)
async def patch_position(request: PositionUpdate, db: AsyncSession = Depends(get_db)):
    """Move an entry to a new position"""
    logger.info(f"Position edit: entry={request.float_id}, floatNumber={request.float_number}")
    entry = await set_entry_position(db, request.float_id, request.float_number)
    return entry_response(entry)


@router.delete("/floats")
async def remove_float(
    float_id: int = Query(..., alias="floatId", gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    """Delete an entry from the running order; scored entries are kept"""
    await delete_entry(db, float_id)
    return {"success": True}


@router.get("/participants", response_model=List[ParticipantResponse])
async def get_participants(
    q: Optional[str] = Query(None),
    limit: int = Query(20, gt=0, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Search previous participants (from past entries) to re-register them"""
    participants = await search_participants(db, q, limit)
    return [ParticipantResponse(**participant) for participant in participants]


@router.post("/participants", response_model=ParticipantEntryResponse)
async def post_participant_entry(request: ParticipantCreate, db: AsyncSession = Depends(get_db)):
    """Create an unapproved entry from a previous participant or direct details"""
    logger.info(
        f"Entry from participant: participant={request.participant_id}, "
        f"organization={request.organization}, event={request.event_id}"
    )
    entry = await create_entry_from_participant(
        db,
        request.model_dump(exclude={"participant_id", "event_id", "float_number"}),
        participant_id=request.participant_id,
        event_id=request.event_id,
        position=request.float_number,
    )
    return ParticipantEntryResponse(entry=entry_response(entry))


@router.patch("/entries/{entry_id}/status", response_model=EntryResponse)
async def patch_status(
    request: StatusUpdate,
    entry_id: int = Path(..., gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    entry = await update_entry_status(db, entry_id, request.status)
    return entry_response(entry)


@router.patch("/entries/{entry_id}/location", response_model=EntryResponse)
async def patch_location(
    request: LocationUpdate,
    entry_id: int = Path(..., gt=0, le=MAX_DB_INT),
    db: AsyncSession = Depends(get_db),
):
    entry = await update_entry_location(db, entry_id, request.location)
    return entry_response(entry)
