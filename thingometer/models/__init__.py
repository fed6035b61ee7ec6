"""Data models"""

from thingometer.models.database import Base, Entry, Event, EventCategory, Judge, Score, ScoreItem

__all__ = [
    "Base",
    "Event",
    "EventCategory",
    "Entry",
    "Judge",
    "Score",
    "ScoreItem",
]
