"""Position allocation: place entries in an event's running order"""

from typing import Any, List, Optional

from loguru import logger
from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from thingometer.config import MAX_DB_INT, UNORDERED_POSITION
from thingometer.errors import ConflictError, ValidationError
from thingometer.models.database import Entry


def validate_position(value: Any) -> int:
    """
    Parse a requested position number.

    Args:
        value: raw value from the request (int or numeric string)

    Returns:
        The position as an int: a positive number or the unordered sentinel

    Raises:
        ValidationError: non-numeric, zero, negative or too large
    """
    if isinstance(value, bool):
        raise ValidationError("Position number must be a valid number")
    try:
        position = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Position number must be a valid number")
    if isinstance(value, float) and value != position:
        raise ValidationError("Position number must be a whole number")

    if position <= 0 and position != UNORDERED_POSITION:
        raise ValidationError(
            f"Position number must be a positive number or {UNORDERED_POSITION}"
        )
    if position > MAX_DB_INT:
        raise ValidationError(f"Position number must not exceed {MAX_DB_INT}")
    return position


def _same_event(event_id: Optional[int]):
    if event_id is None:
        return Entry.event_id.is_(None)
    return Entry.event_id == event_id


async def shift_positions(
    db: AsyncSession,
    event_id: Optional[int],
    from_position: int,
    exclude_entry_id: Optional[int] = None,
) -> int:
    """
    Push every ordered entry at or after ``from_position`` back by one slot.

    Entries at the unordered sentinel are never touched, and an ordered entry
    never lands on it (998 moves to 1000). The rows are first parked at
    ``-(new position)`` and then flipped positive, so the per-event unique
    index holds after each statement.

    Returns:
        Number of entries shifted
    """
    conditions = [
        _same_event(event_id),
        Entry.position >= from_position,
        Entry.position != UNORDERED_POSITION,
    ]
    if exclude_entry_id is not None:
        conditions.append(Entry.id != exclude_entry_id)

    next_position = case(
        (Entry.position + 1 == UNORDERED_POSITION, UNORDERED_POSITION + 1),
        else_=Entry.position + 1,
    )
    parked = await db.execute(
        update(Entry)
        .where(*conditions)
        .values(position=-next_position)
        .execution_options(synchronize_session="fetch")
    )
    await db.execute(
        update(Entry)
        .where(_same_event(event_id), Entry.position < 0)
        .values(position=-Entry.position)
        .execution_options(synchronize_session="fetch")
    )
    return parked.rowcount


async def assign_position(db: AsyncSession, entry: Entry, target_position: int) -> Entry:
    """
    Assign ``target_position`` to ``entry`` within its event.

    1. The sentinel 999 is written as-is, no uniqueness check
    2. Re-assigning the current position is a no-op
    3. A free slot is written directly
    4. A taken slot shifts that entry and everything after it up by one,
       then the entry takes the slot

    Pending changes on the session (e.g. the approval flag) are committed in
    the same transaction, so the shift and the write land together or not at all.

    Raises:
        ValidationError: invalid position number
        ConflictError: the slot was taken concurrently
    """
    target_position = validate_position(target_position)
    entry_id = entry.id

    if target_position == UNORDERED_POSITION:
        entry.position = target_position
        await _commit_or_conflict(db)
        logger.info(f"Entry {entry_id} moved to unordered position {UNORDERED_POSITION}")
        return entry

    if entry.position == target_position:
        logger.info(f"Entry {entry_id} already at position {target_position}, nothing to do")
        await _commit_or_conflict(db)
        return entry

    result = await db.execute(
        select(Entry.id)
        .where(
            _same_event(entry.event_id),
            Entry.position == target_position,
            Entry.id != entry_id,
        )
        .limit(1)
    )
    occupant_id = result.scalar_one_or_none()

    try:
        if occupant_id is not None:
            # Vacate the entry's old slot so the shift cannot collide with it
            entry.position = None
            await db.flush()
            shifted = await shift_positions(
                db, entry.event_id, target_position, exclude_entry_id=entry_id
            )
            logger.info(
                f"Position {target_position} held by entry {occupant_id}; "
                f"shifted {shifted} entries of event {entry.event_id}"
            )

        entry.position = target_position
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Position {target_position} conflict for entry {entry_id}: {e}")
        raise ConflictError("Position number is already assigned to another entry")

    logger.info(f"Entry {entry_id} assigned position {target_position}")
    return entry


async def list_positions(db: AsyncSession, event_id: Optional[int] = None) -> List[Entry]:
    """Entries ordered by position (unpositioned last), optionally for one event"""
    query = select(Entry).order_by(Entry.position.is_(None), Entry.position, Entry.id)
    if event_id is not None:
        query = query.where(Entry.event_id == event_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def _commit_or_conflict(db: AsyncSession):
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Position write rejected: {e}")
        raise ConflictError("Position number is already assigned to another entry")
