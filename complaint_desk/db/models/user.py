import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String

from complaint_desk.db.session import Base
from complaint_desk.model.enums import AppRole
from complaint_desk.util.clock import utcnow


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    # student | admin
    role = Column(
        Enum(AppRole, name="app_role", native_enum=False, values_callable=lambda members: [m.value for m in members]),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
