import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from complaint_desk.db.session import Base
from complaint_desk.util.clock import utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Parent complaint row
    complaint_id = Column(String(36), ForeignKey("complaints.id"), nullable=False, index=True)
    # Author profile
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
