"""Database access"""

from thingometer.db.crud import (
    approve_entry,
    create_entry,
    create_event,
    get_event,
    get_event_categories,
    list_events,
    list_scores,
)

__all__ = [
    "approve_entry",
    "create_entry",
    "create_event",
    "get_event",
    "get_event_categories",
    "list_events",
    "list_scores",
]
