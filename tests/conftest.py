import os
import tempfile
from datetime import timedelta
from pathlib import Path

# Point the engine at a throwaway SQLite file before anything imports it.
_DB_DIR = tempfile.mkdtemp(prefix="complaint_desk_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["REAPER_LOCK_ENABLED"] = "0"

import pytest
from fastapi.testclient import TestClient

from complaint_desk.client.db.psql import session_scope
from complaint_desk.db import models
from complaint_desk.db.session import Base, engine
from complaint_desk.main import app
from complaint_desk.model.enums import AppRole, ComplaintCategory, ComplaintStatus, ComplaintUrgency
from complaint_desk.util.clock import utcnow


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


#scope : function < class < module < package < session
@pytest.fixture(scope="function")
def client():
    return TestClient(app)


@pytest.fixture
def make_profile():
    counter = {"n": 0}

    def _make(full_name: str = "", role: AppRole = AppRole.STUDENT) -> str:
        counter["n"] += 1
        name = full_name or f"user {counter['n']}"
        with session_scope() as db:
            profile = models.Profile(
                full_name=name,
                email=f"user{counter['n']}@campus.test",
                # Spread creation times so roster order is deterministic.
                created_at=utcnow() - timedelta(days=365) + timedelta(seconds=counter["n"]),
            )
            db.add(profile)
            db.flush()
            db.add(models.UserRole(user_id=profile.id, role=role))
            return profile.id

    return _make


@pytest.fixture
def make_complaint(make_profile):
    counter = {"n": 0}

    def _make(
        title: str = "",
        description: str = "Something is not working",
        category: ComplaintCategory = ComplaintCategory.OTHER,
        urgency: ComplaintUrgency = ComplaintUrgency.MEDIUM,
        status: ComplaintStatus = ComplaintStatus.OPEN,
        student_id: str | None = None,
        assigned_to: str | None = None,
        age: timedelta = timedelta(hours=1),
        updated_age: timedelta | None = None,
    ) -> str:
        counter["n"] += 1
        now = utcnow()
        created_at = now - age
        updated_at = now - (updated_age if updated_age is not None else age)
        student_id = student_id or make_profile()
        with session_scope() as db:
            complaint = models.Complaint(
                title=title or f"complaint {counter['n']}",
                description=description,
                category=category,
                urgency=urgency,
                status=status,
                student_id=student_id,
                assigned_to=assigned_to,
                # Keep input order stable for queries ordered by created_at.
                created_at=created_at + timedelta(microseconds=counter["n"]),
                updated_at=updated_at,
                resolved_at=updated_at if status == ComplaintStatus.RESOLVED else None,
            )
            db.add(complaint)
            db.flush()
            return complaint.id

    return _make


@pytest.fixture
def make_comment(make_profile):
    def _make(complaint_id: str, age: timedelta, user_id: str | None = None, message: str = "any update?") -> str:
        with session_scope() as db:
            comment = models.Comment(
                complaint_id=complaint_id,
                user_id=user_id or make_profile(),
                message=message,
                created_at=utcnow() - age,
            )
            db.add(comment)
            db.flush()
            return comment.id

    return _make
