import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text

from complaint_desk.db.session import Base
from complaint_desk.model.enums import ComplaintCategory, ComplaintStatus, ComplaintUrgency
from complaint_desk.util.clock import utcnow


def _enum_column(enum_cls, name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    # technical | facilities | curriculum | mentorship | other
    category = Column(_enum_column(ComplaintCategory, "complaint_category"), nullable=False)
    # low | medium | high | urgent
    urgency = Column(
        _enum_column(ComplaintUrgency, "complaint_urgency"),
        default=ComplaintUrgency.MEDIUM,
        nullable=False,
    )
    # open | in_progress | resolved; resolved_at is set iff resolved
    status = Column(
        _enum_column(ComplaintStatus, "complaint_status"),
        default=ComplaintStatus.OPEN,
        nullable=False,
        index=True,
    )
    # Submitter profile
    student_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    # Admin profile currently handling the complaint
    assigned_to = Column(String(36), ForeignKey("profiles.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
