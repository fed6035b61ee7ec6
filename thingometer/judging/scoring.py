"""Judge scoring: score writes, submission lock and progress status"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from thingometer.config import get_settings
from thingometer.db.crud import get_event_categories
from thingometer.errors import ConflictError, LockedError, NotFoundError, ValidationError
from thingometer.models.database import Entry, EventCategory, Judge, Score, ScoreItem

SCORE_STATUSES = ["not_started", "incomplete", "complete", "no_show", "no_organization"]


def validate_score_values(
    categories: List[EventCategory],
    values: Dict[str, Optional[int]],
    max_score: int,
):
    """
    Check submitted values against the event's categories.

    A value is NULL (not scored), 0 (scored as "none") or 1..max_score.

    Raises:
        ValidationError: unknown category, bad value, or 0 where "none" is not allowed
    """
    by_name = {c.category_name: c for c in categories}

    for name, value in values.items():
        category = by_name.get(name)
        if category is None:
            raise ValidationError(f"Invalid category: {name}")

        if value is None:
            continue

        if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > max_score:
            raise ValidationError(
                f"Score for {name} must be null, 0, or an integer between 1 and {max_score}"
            )

        if value == 0 and not category.has_none_option:
            raise ValidationError(f'Category {name} does not allow "None" option')


async def save_score(
    db: AsyncSession,
    judge_id: int,
    entry_id: int,
    values: Dict[str, Optional[int]],
) -> Tuple[Score, Dict[str, Optional[int]]]:
    """
    Create or update one judge's score for one entry.

    Every category of the event gets an item; categories missing from
    ``values`` are stored as NULL. The judge lock is checked up front and
    again by the final conditional UPDATE, inside the same transaction.

    Args:
        db: database session
        judge_id: scoring judge
        entry_id: scored entry
        values: category name -> value

    Returns:
        (score row, category name -> stored value)

    Raises:
        NotFoundError: judge or entry missing
        LockedError: judge has submitted
        ValidationError: entry outside the judge's event, or bad categories or values
    """
    settings = get_settings()

    judge = await db.get(Judge, judge_id)
    if judge is None:
        raise NotFoundError("Judge not found")
    if judge.submitted:
        logger.warning(f"Judge {judge_id} is locked, rejecting score for entry {entry_id}")
        raise LockedError()

    entry = await db.get(Entry, entry_id)
    if entry is None:
        raise NotFoundError("Entry not found")
    if entry.event_id is None:
        raise ValidationError("Entry is not associated with an event")
    if entry.event_id != judge.event_id:
        raise ValidationError("Entry does not belong to this judge's event")

    categories = await get_event_categories(db, entry.event_id)
    if not categories:
        raise ValidationError("Event has no scoring categories defined")

    validate_score_values(categories, values, settings.max_score)

    result = await db.execute(
        select(Score).where(Score.judge_id == judge_id, Score.entry_id == entry_id)
    )
    score = result.scalar_one_or_none()

    if score is None:
        score = Score(event_id=entry.event_id, judge_id=judge_id, entry_id=entry_id, total=0)
        db.add(score)
        await db.flush()
    elif score.event_id != entry.event_id:
        score.event_id = entry.event_id

    result = await db.execute(select(ScoreItem).where(ScoreItem.score_id == score.id))
    existing_items = {item.event_category_id: item for item in result.scalars().all()}

    stored: Dict[str, Optional[int]] = {}
    for category in categories:
        value = values.get(category.category_name)
        item = existing_items.get(category.id)
        if item is None:
            db.add(ScoreItem(score_id=score.id, event_category_id=category.id, value=value))
        else:
            item.value = value
        stored[category.category_name] = value

    total = sum(v for v in stored.values() if v is not None)

    # Only lands while the judge is still unlocked
    unlocked = select(Judge.id).where(Judge.id == judge_id, Judge.submitted.is_(False)).exists()
    guarded = await db.execute(
        update(Score)
        .where(Score.id == score.id, unlocked)
        .values(total=total, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if guarded.rowcount == 0:
        await db.rollback()
        logger.warning(f"Judge {judge_id} submitted during save for entry {entry_id}, rolled back")
        raise LockedError()

    await db.commit()
    await db.refresh(score)

    logger.info(f"Saved score {score.id}: judge={judge_id} entry={entry_id} total={total}")
    return score, stored


async def submit_judge(db: AsyncSession, judge_id: int) -> Judge:
    """Lock all of a judge's scores"""
    result = await db.execute(
        update(Judge)
        .where(Judge.id == judge_id, Judge.submitted.is_(False))
        .values(submitted=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        judge = await db.get(Judge, judge_id)
        await db.rollback()
        if judge is None:
            raise NotFoundError("Judge not found")
        raise ConflictError("Judge has already submitted scores")

    await db.commit()
    judge = await db.get(Judge, judge_id, populate_existing=True)
    logger.success(f"Judge {judge_id} submitted")
    return judge


async def unlock_judge(db: AsyncSession, judge_id: int) -> Judge:
    """Clear a judge's submitted flag so scores can be edited again"""
    result = await db.execute(
        update(Judge)
        .where(Judge.id == judge_id)
        .values(submitted=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Judge not found")

    await db.commit()
    judge = await db.get(Judge, judge_id, populate_existing=True)
    logger.info(f"Judge {judge_id} unlocked")
    return judge


def has_organization(organization: Optional[str]) -> bool:
    if organization is None:
        return False
    cleaned = str(organization).strip()
    return cleaned != "" and cleaned.lower() != "null"


def compute_score_status(
    categories: List[EventCategory],
    values: Optional[Dict[str, Optional[int]]],
    organization: Optional[str] = None,
) -> str:
    """
    Progress status of one entry for one judge.

    - no_organization: entry has no organization name
    - not_started: no score yet, or every value is NULL
    - no_show: every required category scored 0
    - complete: every required category has a value (0 counts)
    - incomplete: anything else
    """
    if not has_organization(organization):
        return "no_organization"

    if not values:
        return "not_started"

    if all(values.get(c.category_name) is None for c in categories):
        return "not_started"

    required = [c for c in categories if c.required]
    all_required_filled = all(values.get(c.category_name) is not None for c in required)
    all_required_zero = bool(required) and all(values.get(c.category_name) == 0 for c in required)

    if all_required_filled and all_required_zero:
        return "no_show"
    if all_required_filled:
        return "complete"
    return "incomplete"


async def list_entries_for_judge(db: AsyncSession, judge_id: int) -> List[dict]:
    """
    Approved entries of the judge's event, in position order, with the
    judge's own values and progress status for each.
    """
    judge = await db.get(Judge, judge_id)
    if judge is None:
        raise NotFoundError("Judge not found")

    categories = await get_event_categories(db, judge.event_id)

    result = await db.execute(
        select(Entry)
        .where(Entry.event_id == judge.event_id, Entry.approved.is_(True))
        .order_by(Entry.position.is_(None), Entry.position, Entry.id)
    )
    entries = list(result.scalars().all())

    result = await db.execute(select(Score).where(Score.judge_id == judge_id))
    scores = {score.entry_id: score for score in result.scalars().all()}

    values_by_score: Dict[int, Dict[str, Optional[int]]] = {}
    if scores:
        result = await db.execute(
            select(ScoreItem.score_id, EventCategory.category_name, ScoreItem.value)
            .join(EventCategory, ScoreItem.event_category_id == EventCategory.id)
            .where(ScoreItem.score_id.in_([s.id for s in scores.values()]))
        )
        for score_id, category_name, value in result.all():
            values_by_score.setdefault(score_id, {})[category_name] = value

    rows = []
    for entry in entries:
        score = scores.get(entry.id)
        values = values_by_score.get(score.id, {}) if score else None
        rows.append({
            "entry": entry,
            "score": score,
            "values": values,
            "status": compute_score_status(categories, values, entry.organization),
        })

    logger.info(f"Judge {judge_id}: {len(rows)} entries, {len(scores)} scored")
    return rows
