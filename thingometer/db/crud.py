"""Database CRUD operations"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from thingometer.config import (
    DEFAULT_CATEGORIES,
    DEFAULT_ENTRY_CATEGORY_TITLE,
    DEFAULT_JUDGE_NAMES,
    ENTRY_STATUSES,
)
from thingometer.errors import ConflictError, NotFoundError, ValidationError
from thingometer.judging.positions import assign_position, validate_position
from thingometer.models.database import (
    Entry,
    Event,
    EventCategory,
    Judge,
    Score,
    ScoreItem,
)

EVENT_FIELDS = [
    "name",
    "city",
    "event_date",
    "start_date",
    "end_date",
    "active",
    "entry_category_title",
]


# ============ Events ============

async def list_events(db: AsyncSession, active_only: bool = False) -> List[Event]:
    """All events by date, with categories and judges"""
    query = (
        select(Event)
        .options(selectinload(Event.categories), selectinload(Event.judges))
        .order_by(Event.event_date, Event.id)
    )
    if active_only:
        query = query.where(Event.active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Event with categories and judges"""
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .options(selectinload(Event.categories), selectinload(Event.judges))
        .execution_options(populate_existing=True)
    )
    event = result.scalar_one_or_none()
    if event is None:
        raise NotFoundError("Event not found")
    return event


def _category_rows(event_id: int, categories: List[Any]) -> List[EventCategory]:
    """Accepts names or {"name", "required", "has_none_option"} dicts"""
    rows = []
    for index, cat in enumerate(categories):
        if isinstance(cat, str):
            cat = {"name": cat}
        name = (cat.get("name") or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        rows.append(EventCategory(
            event_id=event_id,
            category_name=name,
            display_order=index,
            required=cat.get("required", True) is not False,
            has_none_option=cat.get("has_none_option", True) is not False,
        ))
    return rows


def _judge_rows(event_id: int, names: List[str]) -> List[Judge]:
    rows = []
    for name in names:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Judge name is required")
        rows.append(Judge(event_id=event_id, name=name, submitted=False))
    return rows


async def create_event(
    db: AsyncSession,
    name: str,
    city: str,
    event_date: Optional[datetime] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    active: bool = True,
    entry_category_title: Optional[str] = None,
    categories: Optional[List[Any]] = None,
    judges: Optional[List[str]] = None,
) -> Event:
    """
    Create an event together with its categories and judges.

    Without explicit categories the default five are created; without
    judges, "Judge 1".."Judge 3".
    """
    if not name or not name.strip() or not city or not city.strip():
        raise ValidationError("Name and city are required")

    event = Event(
        name=name.strip(),
        city=city.strip(),
        event_date=event_date,
        start_date=start_date,
        end_date=end_date,
        active=active,
        entry_category_title=entry_category_title or DEFAULT_ENTRY_CATEGORY_TITLE,
    )
    db.add(event)
    await db.flush()

    db.add_all(_category_rows(event.id, categories or DEFAULT_CATEGORIES))
    db.add_all(_judge_rows(event.id, judges or DEFAULT_JUDGE_NAMES))

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Category and judge names must be unique within an event")

    logger.success(f"Created event {event.id}: {event.name} ({event.city})")
    return await get_event(db, event.id)


async def update_event(
    db: AsyncSession,
    event_id: int,
    fields: Dict[str, Any],
    categories: Optional[List[Any]] = None,
    judges: Optional[List[str]] = None,
) -> Event:
    """
    Update event fields; optionally replace categories and judges.

    Replacing judges keeps any judge that already has scores.
    """
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")

    for key, value in fields.items():
        if key not in EVENT_FIELDS:
            continue
        if value is None and key in ("name", "city", "active"):
            continue
        if key == "entry_category_title":
            value = value or DEFAULT_ENTRY_CATEGORY_TITLE
        setattr(event, key, value)
    event.updated_at = datetime.utcnow()

    replaced_scores: List[int] = []
    if categories is not None:
        result = await db.execute(select(EventCategory.id).where(EventCategory.event_id == event_id))
        old_ids = list(result.scalars().all())
        replaced_scores = await _remove_category_items(db, old_ids)
        existing = await db.execute(select(EventCategory).where(EventCategory.event_id == event_id))
        for category in existing.scalars().all():
            await db.delete(category)
        await db.flush()
        db.add_all(_category_rows(event_id, categories))

    if judges is not None:
        existing = await db.execute(select(Judge).where(Judge.event_id == event_id))
        kept = set()
        for judge in existing.scalars().all():
            if await _judge_has_scores(db, judge.id):
                kept.add(judge.name)
            else:
                await db.delete(judge)
        await db.flush()
        db.add_all(_judge_rows(event_id, [n for n in judges if n.strip() not in kept]))

    try:
        if categories is not None:
            await db.flush()
            await _recompute_score_totals(db, replaced_scores)
            await _fill_missing_score_items(db, event_id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Category and judge names must be unique within an event")

    logger.info(f"Updated event {event_id}")
    return await get_event(db, event_id)


async def delete_event(db: AsyncSession, event_id: int) -> Dict[str, int]:
    """Delete an event and everything under it; returns what was removed"""
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")

    counts = {}
    for key, model in (
        ("floats", Entry),
        ("scores", Score),
        ("categories", EventCategory),
        ("judges", Judge),
    ):
        result = await db.execute(select(func.count()).select_from(model).where(model.event_id == event_id))
        counts[key] = result.scalar_one()

    await db.delete(event)
    await db.commit()

    logger.warning(f"Deleted event {event_id}: {counts}")
    return counts


# ============ Categories ============

async def get_event_categories(db: AsyncSession, event_id: int) -> List[EventCategory]:
    """Categories of an event in display order"""
    result = await db.execute(
        select(EventCategory)
        .where(EventCategory.event_id == event_id)
        .order_by(EventCategory.display_order, EventCategory.id)
    )
    return list(result.scalars().all())


async def _get_category(db: AsyncSession, event_id: int, category_id: int) -> EventCategory:
    result = await db.execute(
        select(EventCategory).where(
            EventCategory.id == category_id, EventCategory.event_id == event_id
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def _category_name_taken(
    db: AsyncSession, event_id: int, name: str, exclude_id: Optional[int] = None
) -> bool:
    query = select(EventCategory.id).where(
        EventCategory.event_id == event_id, EventCategory.category_name == name
    )
    if exclude_id is not None:
        query = query.where(EventCategory.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def add_category(
    db: AsyncSession,
    event_id: int,
    category_name: str,
    required: bool = True,
    has_none_option: bool = True,
) -> EventCategory:
    """Append a category after the event's last one"""
    name = (category_name or "").strip()
    if not name:
        raise ValidationError("Event ID and category name are required")

    if await db.get(Event, event_id) is None:
        raise NotFoundError("Event not found")

    if await _category_name_taken(db, event_id, name):
        raise ConflictError("A category with this name already exists for this event")

    result = await db.execute(
        select(func.max(EventCategory.display_order)).where(EventCategory.event_id == event_id)
    )
    max_order = result.scalar_one_or_none()

    category = EventCategory(
        event_id=event_id,
        category_name=name,
        display_order=(max_order if max_order is not None else -1) + 1,
        required=required,
        has_none_option=has_none_option,
    )
    db.add(category)
    try:
        await db.flush()
        await _fill_missing_score_items(db, event_id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A category with this name already exists for this event")

    await db.refresh(category)
    logger.info(f"Added category '{name}' to event {event_id}")
    return category


async def update_category(
    db: AsyncSession,
    event_id: int,
    category_id: int,
    category_name: Optional[str] = None,
    required: Optional[bool] = None,
    has_none_option: Optional[bool] = None,
) -> EventCategory:
    """Rename a category or change its flags"""
    category = await _get_category(db, event_id, category_id)

    if category_name is not None and category_name.strip():
        name = category_name.strip()
        if await _category_name_taken(db, event_id, name, exclude_id=category_id):
            raise ConflictError("A category with this name already exists for this event")
        category.category_name = name
    if required is not None:
        category.required = required
    if has_none_option is not None:
        category.has_none_option = has_none_option

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A category with this name already exists for this event")

    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, event_id: int, category_id: int):
    """Remove a category and its score items; affected score totals are recomputed"""
    category = await _get_category(db, event_id, category_id)
    affected = await _remove_category_items(db, [category_id])
    await db.delete(category)
    await db.flush()
    await _recompute_score_totals(db, affected)
    await db.commit()
    logger.info(f"Deleted category {category_id} from event {event_id}, {len(affected)} score totals recomputed")


async def _remove_category_items(db: AsyncSession, category_ids: List[int]) -> List[int]:
    """Delete the items of these categories; returns the ids of the scores they belonged to"""
    if not category_ids:
        return []
    result = await db.execute(
        select(ScoreItem.score_id).where(ScoreItem.event_category_id.in_(category_ids)).distinct()
    )
    score_ids = list(result.scalars().all())
    await db.execute(
        delete(ScoreItem)
        .where(ScoreItem.event_category_id.in_(category_ids))
        .execution_options(synchronize_session=False)
    )
    return score_ids


async def _recompute_score_totals(db: AsyncSession, score_ids: List[int]):
    """Re-derive the denormalized Score.total from the items that remain"""
    if not score_ids:
        return
    item_sum = (
        select(func.coalesce(func.sum(ScoreItem.value), 0))
        .where(ScoreItem.score_id == Score.id)
        .scalar_subquery()
    )
    await db.execute(
        update(Score)
        .where(Score.id.in_(score_ids))
        .values(total=item_sum, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )


async def _fill_missing_score_items(db: AsyncSession, event_id: int):
    """Give every existing score of the event a NULL item for each category it lacks"""
    result = await db.execute(
        select(Score.id).join(Entry, Score.entry_id == Entry.id).where(Entry.event_id == event_id)
    )
    score_ids = list(result.scalars().all())
    if not score_ids:
        return

    result = await db.execute(select(EventCategory.id).where(EventCategory.event_id == event_id))
    category_ids = list(result.scalars().all())

    result = await db.execute(
        select(ScoreItem.score_id, ScoreItem.event_category_id).where(ScoreItem.score_id.in_(score_ids))
    )
    present = {tuple(row) for row in result.all()}

    db.add_all([
        ScoreItem(score_id=score_id, event_category_id=category_id, value=None)
        for score_id in score_ids
        for category_id in category_ids
        if (score_id, category_id) not in present
    ])


# ============ Judges ============

async def get_judge(db: AsyncSession, judge_id: int) -> Judge:
    judge = await db.get(Judge, judge_id)
    if judge is None:
        raise NotFoundError("Judge not found")
    return judge


async def _get_event_judge(db: AsyncSession, event_id: int, judge_id: int) -> Judge:
    result = await db.execute(
        select(Judge).where(Judge.id == judge_id, Judge.event_id == event_id)
    )
    judge = result.scalar_one_or_none()
    if judge is None:
        raise NotFoundError("Judge not found")
    return judge


async def _judge_name_taken(
    db: AsyncSession, event_id: int, name: str, exclude_id: Optional[int] = None
) -> bool:
    query = select(Judge.id).where(Judge.event_id == event_id, Judge.name == name)
    if exclude_id is not None:
        query = query.where(Judge.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def _judge_has_scores(db: AsyncSession, judge_id: int) -> bool:
    result = await db.execute(select(Score.id).where(Score.judge_id == judge_id).limit(1))
    return result.scalar_one_or_none() is not None


async def add_judge(db: AsyncSession, event_id: int, name: str) -> Judge:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Event ID and judge name are required")

    if await db.get(Event, event_id) is None:
        raise NotFoundError("Event not found")

    if await _judge_name_taken(db, event_id, name):
        raise ConflictError("A judge with this name already exists for this event")

    judge = Judge(event_id=event_id, name=name, submitted=False)
    db.add(judge)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A judge with this name already exists for this event")

    await db.refresh(judge)
    logger.info(f"Added judge '{name}' to event {event_id}")
    return judge


async def rename_judge(db: AsyncSession, event_id: int, judge_id: int, name: str) -> Judge:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Event ID, judge ID, and judge name are required")

    judge = await _get_event_judge(db, event_id, judge_id)
    if await _judge_name_taken(db, event_id, name, exclude_id=judge_id):
        raise ConflictError("A judge with this name already exists for this event")

    judge.name = name
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A judge with this name already exists for this event")

    await db.refresh(judge)
    return judge


async def delete_judge(db: AsyncSession, event_id: int, judge_id: int):
    """Remove a judge that has not scored anything yet"""
    judge = await _get_event_judge(db, event_id, judge_id)
    if await _judge_has_scores(db, judge_id):
        raise ConflictError(
            "Cannot delete judge with existing scores. You can rename the judge instead."
        )
    await db.delete(judge)
    await db.commit()
    logger.info(f"Deleted judge {judge_id} from event {event_id}")


async def list_judges_with_counts(
    db: AsyncSession, event_id: Optional[int] = None
) -> List[Tuple[Judge, int]]:
    """Judges with the number of entries each has scored"""
    query = (
        select(Judge, func.count(Score.id))
        .outerjoin(Score, Score.judge_id == Judge.id)
        .group_by(Judge.id)
        .order_by(Judge.id)
    )
    if event_id is not None:
        query = query.where(Judge.event_id == event_id)
    result = await db.execute(query)
    return [(judge, count) for judge, count in result.all()]


async def list_event_judges(db: AsyncSession, event_id: int) -> List[Judge]:
    """Judges of one event by name, for the judge login picker"""
    result = await db.execute(select(Judge).where(Judge.event_id == event_id).order_by(Judge.name, Judge.id))
    return list(result.scalars().all())


# ============ Entries ============

async def get_entry(db: AsyncSession, entry_id: int) -> Entry:
    entry = await db.get(Entry, entry_id)
    if entry is None:
        raise NotFoundError("Entry not found")
    return entry


async def _resolve_signup_event(db: AsyncSession, event_id: Optional[int]) -> int:
    """The requested event if active, else the first active event"""
    if event_id is not None:
        result = await db.execute(
            select(Event.id).where(Event.id == event_id, Event.active.is_(True))
        )
        if result.scalar_one_or_none() is None:
            raise ValidationError("The selected event is not active or does not exist")
        return event_id

    result = await db.execute(
        select(Event.id).where(Event.active.is_(True)).order_by(Event.id).limit(1)
    )
    active_id = result.scalar_one_or_none()
    if active_id is None:
        raise ValidationError("No active event is accepting entries")
    return active_id


async def create_entry(
    db: AsyncSession,
    data: Dict[str, Any],
    event_id: Optional[int] = None,
    auto_approve: bool = False,
) -> Entry:
    """
    Sign up an entry for an event.

    Entries start unapproved unless a coordinator auto-approves them.
    """
    organization = (data.get("organization") or "").strip()
    if not organization:
        raise ValidationError("Organization Name is required")

    resolved_event_id = await _resolve_signup_event(db, event_id)

    entry = Entry(
        event_id=resolved_event_id,
        organization=organization,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        title=data.get("title"),
        phone=data.get("phone"),
        email=data.get("email"),
        entry_name=data.get("entry_name"),
        description=data.get("description"),
        type_of_entry=data.get("type_of_entry"),
        approved=auto_approve,
        extra=dict(data.get("metadata") or {}),
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)

    logger.info(f"New entry {entry.id} for event {resolved_event_id}: {organization}")
    return entry


async def list_unapproved_entries(db: AsyncSession, event_id: Optional[int] = None) -> List[Entry]:
    """Unapproved entries, newest first"""
    query = select(Entry).where(Entry.approved.is_(False)).order_by(Entry.submitted_at.desc(), Entry.id.desc())
    if event_id is not None:
        query = query.where(Entry.event_id == event_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def find_entries_by_email(db: AsyncSession, email: Optional[str]) -> List[Entry]:
    """Entries submitted with this email, for a participant checking their signups"""
    email = (email or "").strip()
    if not email:
        raise ValidationError("Email parameter is required")
    result = await db.execute(select(Entry).where(Entry.email == email).order_by(Entry.id))
    return list(result.scalars().all())


PARTICIPANT_FIELDS = (
    "organization",
    "first_name",
    "last_name",
    "title",
    "phone",
    "email",
    "entry_name",
    "type_of_entry",
)


async def search_participants(db: AsyncSession, query: Optional[str] = None, limit: int = 20) -> List[dict]:
    """
    Previous participants, taken from past entries.

    Entries are matched on organization, contact names, email or entry name
    (case-insensitive substring) and collapsed by organization + email, most
    recent first. Each result gets a sequential ``id`` local to the response.
    """
    statement = select(Entry).order_by(Entry.submitted_at.desc(), Entry.id.desc()).limit(limit * 5)
    term = (query or "").strip()
    if term:
        pattern = f"%{term}%"
        statement = statement.where(
            or_(
                Entry.organization.ilike(pattern),
                Entry.first_name.ilike(pattern),
                Entry.last_name.ilike(pattern),
                Entry.email.ilike(pattern),
                Entry.entry_name.ilike(pattern),
            )
        )
    result = await db.execute(statement)

    participants: Dict[str, dict] = {}
    for entry in result.scalars().all():
        key = f"{entry.organization}|{entry.email or ''}"
        if key in participants:
            continue
        participant = {field: getattr(entry, field) for field in PARTICIPANT_FIELDS}
        participant["id"] = len(participants) + 1
        participant["submitted_at"] = entry.submitted_at
        participants[key] = participant
        if len(participants) >= limit:
            break
    return list(participants.values())


async def create_entry_from_participant(
    db: AsyncSession,
    details: Dict[str, Any],
    participant_id: Optional[int] = None,
    event_id: Optional[int] = None,
    position: Optional[Any] = None,
) -> Entry:
    """
    Create an unapproved entry for a returning participant.

    With ``participant_id`` the contact details are copied from the most
    recent entry of the same organization (and email, when given); otherwise
    ``details`` are used as-is. A ``position`` is placed like any coordinator
    position edit.

    Raises:
        ValidationError: neither a participant nor an organization given
        NotFoundError: no earlier entry matches, or unknown event
    """
    organization = (details.get("organization") or "").strip()
    email = details.get("email")

    if participant_id is not None:
        if not organization:
            raise ValidationError("Organization is required to look up a participant")
        query = select(Entry).where(Entry.organization == organization)
        if email:
            query = query.where(Entry.email == email)
        result = await db.execute(query.order_by(Entry.submitted_at.desc(), Entry.id.desc()).limit(1))
        source = result.scalar_one_or_none()
        if source is None:
            raise NotFoundError("Participant not found")
        data = {field: getattr(source, field) for field in PARTICIPANT_FIELDS}
    elif organization:
        data = {field: details.get(field) or None for field in PARTICIPANT_FIELDS}
        data["organization"] = organization
    else:
        raise ValidationError("Missing required field: participantId or organization")

    target = validate_position(position) if position is not None else None

    if event_id is not None:
        if await db.get(Event, event_id) is None:
            raise NotFoundError("Event not found")
    else:
        event_id = await _resolve_signup_event(db, None)

    entry = Entry(event_id=event_id, approved=False, extra={}, **data)
    db.add(entry)
    if target is None:
        await db.commit()
    else:
        await db.flush()
        entry = await assign_position(db, entry, target)
    await db.refresh(entry)

    logger.info(f"Entry {entry.id} created from participant '{data['organization']}' for event {event_id}")
    return entry


async def _entry_has_scores(db: AsyncSession, entry_id: int) -> bool:
    result = await db.execute(select(Score.id).where(Score.entry_id == entry_id).limit(1))
    return result.scalar_one_or_none() is not None


async def approve_entry(
    db: AsyncSession,
    entry_id: int,
    approved: bool,
    position: Optional[Any] = None,
    event_id: Optional[int] = None,
) -> Entry:
    """
    Approve (or un-approve) an entry and optionally place it.

    The approval flag, event move and any position shift commit together.
    """
    entry = await get_entry(db, entry_id)

    if event_id is not None:
        if await db.get(Event, event_id) is None:
            raise NotFoundError("Event not found")
        if entry.event_id != event_id:
            if await _entry_has_scores(db, entry_id):
                raise ConflictError("Cannot move an entry that already has scores to another event")
            # Its old slot means nothing in the new event
            entry.position = None
        entry.event_id = event_id

    entry.approved = approved

    if approved and position is not None:
        target = validate_position(position)
        entry = await assign_position(db, entry, target)
    else:
        await db.commit()

    await db.refresh(entry)
    logger.info(f"Entry {entry_id} approved={approved} position={entry.position}")
    return entry


async def set_entry_position(db: AsyncSession, entry_id: int, position: Any) -> Entry:
    """Coordinator position edit"""
    target = validate_position(position)
    entry = await get_entry(db, entry_id)
    entry = await assign_position(db, entry, target)
    await db.refresh(entry)
    return entry


async def delete_entry(db: AsyncSession, entry_id: int):
    """Delete an entry that has no scores"""
    entry = await get_entry(db, entry_id)
    if await _entry_has_scores(db, entry_id):
        raise ConflictError("Cannot delete an entry that already has scores")
    await db.delete(entry)
    await db.commit()
    logger.warning(f"Deleted entry {entry_id}")


async def update_entry_status(db: AsyncSession, entry_id: int, status: str, updated_by: str = "coordinator") -> Entry:
    """Record a lifecycle status in the entry metadata, keeping its history"""
    if status not in ENTRY_STATUSES:
        raise ValidationError("Invalid status value")

    entry = await get_entry(db, entry_id)
    metadata = dict(entry.extra or {})
    history = list(metadata.get("statusHistory") or [])
    history.append({
        "status": status,
        "timestamp": datetime.utcnow().isoformat(),
        "updatedBy": updated_by,
    })
    metadata["status"] = status
    metadata["statusHistory"] = history
    entry.extra = metadata

    await db.commit()
    await db.refresh(entry)
    return entry


async def update_entry_location(db: AsyncSession, entry_id: int, location: Optional[Dict[str, Any]]) -> Entry:
    """Store (or clear) the entry's assigned physical location in its metadata"""
    entry = await get_entry(db, entry_id)
    metadata = dict(entry.extra or {})
    if location:
        metadata["location"] = location
    else:
        metadata.pop("location", None)
    entry.extra = metadata

    await db.commit()
    await db.refresh(entry)
    return entry


# ============ Scores ============

async def list_scores(db: AsyncSession, event_id: Optional[int] = None) -> Tuple[List[str], List[dict]]:
    """
    Every score row with judge, entry and per-category values.

    Returns:
        (category names, [{"score", "judge", "entry", "values"}, ...])
    """
    category_query = select(EventCategory.category_name).order_by(
        EventCategory.display_order, EventCategory.id
    )
    score_query = (
        select(Score)
        .options(selectinload(Score.judge), selectinload(Score.entry))
        .order_by(Score.id)
    )
    if event_id is not None:
        category_query = category_query.where(EventCategory.event_id == event_id)
        score_query = score_query.join(Entry, Score.entry_id == Entry.id).where(Entry.event_id == event_id)

    category_names: List[str] = []
    for name in (await db.execute(category_query)).scalars().all():
        if name not in category_names:
            category_names.append(name)

    scores = list((await db.execute(score_query)).scalars().all())

    values_by_score: Dict[int, Dict[str, Optional[int]]] = {}
    if scores:
        result = await db.execute(
            select(ScoreItem.score_id, EventCategory.category_name, ScoreItem.value)
            .join(EventCategory, ScoreItem.event_category_id == EventCategory.id)
            .where(ScoreItem.score_id.in_([s.id for s in scores]))
        )
        for score_id, category_name, value in result.all():
            values_by_score.setdefault(score_id, {})[category_name] = value

    rows = [
        {
            "score": score,
            "judge": score.judge,
            "entry": score.entry,
            "values": {name: values_by_score.get(score.id, {}).get(name) for name in category_names},
        }
        for score in scores
    ]
    return category_names, rows
