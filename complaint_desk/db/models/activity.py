import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB

from complaint_desk.db.session import Base
from complaint_desk.util.clock import utcnow


class ActivityEntry(Base):
    """Append-only audit feed; rows are never updated or deleted."""

    __tablename__ = "activity_feed"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # created | status_changed | assigned | commented | auto_closed
    action_type = Column(String(32), nullable=False, index=True)
    description = Column(String, nullable=False)
    complaint_id = Column(String(36), ForeignKey("complaints.id"), nullable=True, index=True)
    # Actor profile
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    meta = Column("metadata", JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
