"""Database model definitions"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Text,
    DateTime,
    JSON,
    ForeignKey,
    Index,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

from thingometer.config import UNORDERED_POSITION

Base = declarative_base()


class Event(Base):
    """Events (a parade, a lemonade day, ...)"""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    event_date = Column(DateTime, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    entry_category_title = Column(String(100), nullable=True)  # label for the overall winner
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    categories = relationship(
        "EventCategory",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="EventCategory.display_order",
    )
    judges = relationship(
        "Judge",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Judge.name",
    )
    entries = relationship(
        "Entry", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )


class EventCategory(Base):
    """Scoring categories of an event"""
    __tablename__ = "event_categories"
    __table_args__ = (
        UniqueConstraint("event_id", "category_name", name="uq_event_categories_event_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    category_name = Column(String(100), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    required = Column(Boolean, nullable=False, default=True)
    has_none_option = Column(Boolean, nullable=False, default=True)  # 0 allowed as "none"
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="categories")
    score_items = relationship(
        "ScoreItem", back_populates="category", cascade="all, delete-orphan", passive_deletes=True
    )


class Entry(Base):
    """Participant entries (floats / stands)"""
    __tablename__ = "entries"
    __table_args__ = (
        # Position is unique per event, except for the unordered sentinel
        Index(
            "uq_entries_event_position",
            "event_id",
            "position",
            unique=True,
            sqlite_where=text(f"position != {UNORDERED_POSITION}"),
            postgresql_where=text(f"position != {UNORDERED_POSITION}"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True)
    organization = Column(String(200), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    title = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(200), nullable=True)
    entry_name = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    type_of_entry = Column(String(100), nullable=True)
    position = Column(Integer, nullable=True)
    approved = Column(Boolean, nullable=False, default=False)
    extra = Column("metadata", JSON, nullable=True)  # {"status": ..., "location": {...}, ...}
    submitted_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="entries")
    scores = relationship(
        "Score", back_populates="entry", cascade="all, delete-orphan", passive_deletes=True
    )


class Judge(Base):
    """Judges of an event"""
    __tablename__ = "judges"
    __table_args__ = (
        UniqueConstraint("event_id", "name", name="uq_judges_event_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    submitted = Column(Boolean, nullable=False, default=False)  # lock on all of the judge's scores
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="judges")
    scores = relationship(
        "Score", back_populates="judge", cascade="all, delete-orphan", passive_deletes=True
    )


class Score(Base):
    """One judge's scoring record for one entry"""
    __tablename__ = "scores"
    __table_args__ = (
        UniqueConstraint("judge_id", "entry_id", name="uq_scores_judge_entry"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True)
    judge_id = Column(Integer, ForeignKey("judges.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_id = Column(Integer, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True)
    total = Column(Integer, nullable=False, default=0)  # sum of non-null item values
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    judge = relationship("Judge", back_populates="scores")
    entry = relationship("Entry", back_populates="scores")
    items = relationship(
        "ScoreItem", back_populates="score", cascade="all, delete-orphan", passive_deletes=True
    )


class ScoreItem(Base):
    """One category value within a score"""
    __tablename__ = "score_items"
    __table_args__ = (
        UniqueConstraint("score_id", "event_category_id", name="uq_score_items_score_category"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    score_id = Column(Integer, ForeignKey("scores.id", ondelete="CASCADE"), nullable=False, index=True)
    event_category_id = Column(
        Integer, ForeignKey("event_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value = Column(Integer, nullable=True)  # NULL = not scored, 0 = scored as "none"
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    score = relationship("Score", back_populates="items")
    category = relationship("EventCategory", back_populates="score_items")
