"""Score aggregation: category totals, leaderboards and winners"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thingometer.config import DEFAULT_CATEGORIES, DEFAULT_ENTRY_CATEGORY_TITLE
from thingometer.errors import NotFoundError
from thingometer.models.database import Entry, Event, EventCategory, Score, ScoreItem

# (entry_id, category_name, value)
ItemRow = Tuple[int, str, Optional[int]]


def sum_category_totals(
    category_names: List[str],
    entry_ids: List[int],
    items: Iterable[ItemRow],
) -> Tuple[Dict[str, Dict[int, int]], Dict[str, Set[int]]]:
    """
    Sum item values per category and entry across all judges.

    NULL values are "not scored" and are skipped rather than counted as zero.

    Returns:
        (totals[category][entry_id], scored[category] = entry ids with at least one value)
    """
    totals = {name: {entry_id: 0 for entry_id in entry_ids} for name in category_names}
    scored = {name: set() for name in category_names}

    for entry_id, category_name, value in items:
        if category_name not in totals or entry_id not in totals[category_name]:
            continue
        if value is None:
            continue
        totals[category_name][entry_id] += value
        scored[category_name].add(entry_id)

    return totals, scored


def sum_overall_totals(
    totals: Dict[str, Dict[int, int]],
    scored: Dict[str, Set[int]],
    entry_ids: List[int],
) -> Tuple[Dict[int, int], Set[int]]:
    """Overall total per entry = sum of its category totals"""
    overall = {entry_id: 0 for entry_id in entry_ids}
    overall_scored: Set[int] = set()
    for name, per_entry in totals.items():
        for entry_id, total in per_entry.items():
            overall[entry_id] += total
        overall_scored |= scored[name]
    return overall, overall_scored


def pick_winners(
    totals: Dict[int, int],
    scored: Set[int],
    judged: Set[int],
) -> List[Tuple[int, int]]:
    """
    Entries sharing the highest total; ties all win.

    Only entries with at least one scored value compete. An entry with no
    values competes only when it is the single entry in scope and a judge
    has opened a score for it.

    Args:
        totals: entry_id -> total, in display order
        scored: entry ids with at least one non-null value
        judged: entry ids with at least one score row

    Returns:
        [(entry_id, total), ...] in display order
    """
    candidates = {entry_id: total for entry_id, total in totals.items() if entry_id in scored}

    if not candidates and len(totals) == 1:
        (only_entry,) = totals
        if only_entry in judged:
            candidates = {only_entry: totals[only_entry]}

    if not candidates:
        return []

    best = max(candidates.values())
    return [(entry_id, best) for entry_id, total in candidates.items() if total == best]


def rank_totals(totals: Dict[int, int], scored: Set[int]) -> List[dict]:
    """Full leaderboard, highest first; display order breaks equal totals"""
    order = {entry_id: idx for idx, entry_id in enumerate(totals)}
    ranked = sorted(totals.items(), key=lambda kv: (-kv[1], order[kv[0]]))
    return [
        {"entry_id": entry_id, "total": total, "scored": entry_id in scored}
        for entry_id, total in ranked
    ]


def compute_winners(
    category_names: List[str],
    entry_ids: List[int],
    items: Iterable[ItemRow],
    judged: Optional[Set[int]] = None,
) -> dict:
    """
    Reduce score items to per-category and overall results.

    Args:
        category_names: categories in display order
        entry_ids: entries in scope, in display order
        items: (entry_id, category_name, value) for every score item
        judged: entry ids that have at least one score row

    Returns:
        {
            "categories": {name: [(entry_id, total), ...]},
            "overall": [(entry_id, total), ...],
            "leaderboard": {name: [{"entry_id", "total", "scored"}, ...]},
            "overall_leaderboard": [...],
        }
    """
    judged = judged or set()
    totals, scored = sum_category_totals(category_names, entry_ids, items)
    overall, overall_scored = sum_overall_totals(totals, scored, entry_ids)

    return {
        "categories": {
            name: pick_winners(totals[name], scored[name], judged) for name in category_names
        },
        "overall": pick_winners(overall, overall_scored, judged),
        "leaderboard": {
            name: rank_totals(totals[name], scored[name]) for name in category_names
        },
        "overall_leaderboard": rank_totals(overall, overall_scored),
    }


async def resolve_category_names(db: AsyncSession, event_id: Optional[int]) -> List[str]:
    """
    Category names in display order.

    With an event id, that event's categories; without one, every distinct
    name across events. Falls back to the default category set when nothing
    is defined.
    """
    query = select(EventCategory.category_name, EventCategory.display_order)
    if event_id is not None:
        query = query.where(EventCategory.event_id == event_id)
    query = query.order_by(EventCategory.display_order, EventCategory.id)

    result = await db.execute(query)
    names: List[str] = []
    for name, _order in result.all():
        if name not in names:
            names.append(name)

    if not names:
        logger.info(f"No categories defined for event {event_id}, using defaults")
        names = [c["name"] for c in DEFAULT_CATEGORIES]
    return names


async def resolve_entry_category_title(db: AsyncSession, event_id: Optional[int]) -> str:
    """Display label for the overall winner"""
    if event_id is None:
        return DEFAULT_ENTRY_CATEGORY_TITLE
    result = await db.execute(select(Event.entry_category_title).where(Event.id == event_id))
    title = result.scalar_one_or_none()
    return title or DEFAULT_ENTRY_CATEGORY_TITLE


async def aggregate_scores(db: AsyncSession, event_id: Optional[int] = None) -> dict:
    """
    Compute winners for one event, or across all events.

    1. Resolve ordered categories
    2. Resolve entries in scope
    3. Load score rows and their items
    4. Reduce with compute_winners

    Returns:
        compute_winners() output plus "entries" (id -> Entry) and
        "entry_category_title"

    Raises:
        NotFoundError: unknown event id
    """
    if event_id is not None and await db.get(Event, event_id) is None:
        raise NotFoundError("Event not found")

    category_names = await resolve_category_names(db, event_id)

    entry_query = select(Entry).order_by(Entry.position.is_(None), Entry.position, Entry.id)
    if event_id is not None:
        entry_query = entry_query.where(Entry.event_id == event_id)
    entries = list((await db.execute(entry_query)).scalars().all())
    entry_ids = [entry.id for entry in entries]

    judged: Set[int] = set()
    items: List[ItemRow] = []
    if entry_ids:
        score_rows = await db.execute(select(Score.entry_id).where(Score.entry_id.in_(entry_ids)))
        judged = set(score_rows.scalars().all())

        item_rows = await db.execute(
            select(Score.entry_id, EventCategory.category_name, ScoreItem.value)
            .join(ScoreItem, ScoreItem.score_id == Score.id)
            .join(EventCategory, ScoreItem.event_category_id == EventCategory.id)
            .where(Score.entry_id.in_(entry_ids))
        )
        items = [tuple(row) for row in item_rows.all()]

    logger.info(
        f"Aggregating event={event_id}: {len(category_names)} categories, "
        f"{len(entry_ids)} entries, {len(judged)} judged, {len(items)} items"
    )

    report = compute_winners(category_names, entry_ids, items, judged)
    report["entries"] = {entry.id: entry for entry in entries}
    report["entry_category_title"] = await resolve_entry_category_title(db, event_id)
    return report
