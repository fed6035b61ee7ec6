"""ORM rows -> response models"""

from typing import Dict, List, Optional

from thingometer.config import DEFAULT_ENTRY_CATEGORY_TITLE
from thingometer.models.database import Entry, Event
from thingometer.models.schemas import (
    CategoryResponse,
    CategoryResult,
    EntryResponse,
    EventResponse,
    JudgeResponse,
    RankedEntry,
    WinnersResponse,
)


def entry_fields(entry: Entry) -> dict:
    # ``extra`` maps to the "metadata" column; Entry.metadata is the table metadata
    return dict(
        id=entry.id,
        event_id=entry.event_id,
        organization=entry.organization,
        first_name=entry.first_name,
        last_name=entry.last_name,
        title=entry.title,
        phone=entry.phone,
        email=entry.email,
        entry_name=entry.entry_name,
        description=entry.description,
        type_of_entry=entry.type_of_entry,
        float_number=entry.position,
        approved=entry.approved,
        metadata=entry.extra or {},
        submitted_at=entry.submitted_at,
    )


def entry_response(entry: Entry) -> EntryResponse:
    return EntryResponse(**entry_fields(entry))


def event_response(event: Event) -> EventResponse:
    return EventResponse(
        id=event.id,
        name=event.name,
        city=event.city,
        event_date=event.event_date,
        start_date=event.start_date,
        end_date=event.end_date,
        active=event.active,
        entry_category_title=event.entry_category_title or DEFAULT_ENTRY_CATEGORY_TITLE,
        created_at=event.created_at,
        updated_at=event.updated_at,
        categories=[CategoryResponse.model_validate(c) for c in event.categories],
        judges=[JudgeResponse.model_validate(j) for j in event.judges],
    )


def _ranked(entries: Dict[int, Entry], entry_id: int, total: int, scored: bool = True) -> RankedEntry:
    entry = entries[entry_id]
    return RankedEntry(
        entry_id=entry_id,
        organization=entry.organization,
        entry_name=entry.entry_name,
        float_number=entry.position,
        total=total,
        scored=scored,
    )


def _category_result(
    entries: Dict[int, Entry],
    name: str,
    winners: List[tuple],
    leaderboard: List[dict],
) -> CategoryResult:
    return CategoryResult(
        category=name,
        winners=[_ranked(entries, entry_id, total) for entry_id, total in winners],
        leaderboard=[
            _ranked(entries, row["entry_id"], row["total"], row["scored"]) for row in leaderboard
        ],
    )


def winners_response(report: dict, event_id: Optional[int]) -> WinnersResponse:
    """Shape aggregate_scores() output for the API"""
    entries = report["entries"]
    title = report["entry_category_title"]
    return WinnersResponse(
        event_id=event_id,
        entry_category_title=title,
        categories=[
            _category_result(entries, name, winners, report["leaderboard"][name])
            for name, winners in report["categories"].items()
        ],
        overall=_category_result(entries, title, report["overall"], report["overall_leaderboard"]),
    )
