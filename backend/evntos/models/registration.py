"""
Registration model. One row per guest signup; the row id is the ticket number
and the QR payload.

`source` separates real form signups from shared-link visit tracking rows.
Only `form` rows ever appear on guest lists or receive tickets.
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, CheckConstraint, Index

from evntos.db.base import Base, new_document_id, utcnow

SOURCE_FORM = "form"
SOURCE_SHARED_LINK = "shared_link"


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(String(32), primary_key=True, default=new_document_id)
    event_id = Column(
        String(32),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    contact_number = Column(String(50), nullable=True)
    registered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    source = Column(String(20), nullable=False, default=SOURCE_FORM)
    checked_in = Column(Boolean, nullable=False, default=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("source IN ('form', 'shared_link')", name="check_registration_source"),
        # Guest list query: WHERE event_id = ? AND source = 'form'
        Index("ix_registrations_event_source", "event_id", "source"),
    )

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id}, event={self.event_id}, "
            f"source={self.source}, checked_in={self.checked_in})>"
        )
