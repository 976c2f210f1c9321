"""
Event model.

Key design decisions:
- `id` is an opaque string so public URLs never expose row counts
- `slug` is indexed for public page lookups; uniqueness is handled by the
  slug service at write time, not by a constraint, so legacy collisions
  still load
- `event_date` / `event_time` stay as separate strings and are combined
  only when rendering tickets
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, ForeignKey, Index

from evntos.db.base import Base, TimestampMixin, new_document_id


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=new_document_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    image_url = Column(String(1024), nullable=False, default="")
    slug = Column(String(50), nullable=False)
    venue_name = Column(String(255), nullable=False, default="")
    venue_address = Column(String(1000), nullable=False, default="")
    map_link = Column(String(1024), nullable=False, default="")
    event_date = Column(String(10), nullable=False, default="")  # YYYY-MM-DD
    event_time = Column(String(5), nullable=False, default="")  # HH:MM
    registration_open = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_events_slug", "slug"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug}, owner={self.user_id})>"
