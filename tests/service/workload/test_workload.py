from collections import Counter

import pytest
from sqlalchemy import select

import complaint_desk.service.workload.workload as workload_module
from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import ActivityEntry, Complaint
from complaint_desk.model.enums import AppRole, ComplaintStatus, ComplaintUrgency
from complaint_desk.model.workload.workload_response import Assignment, RosterEntry, WorkloadPlan


def _complaints(n: int, urgency: str = "high") -> list[dict]:
    return [{"id": f"c{i}", "urgency": urgency, "assigned_to": None} for i in range(n)]


def _roster(*loads: int) -> list[RosterEntry]:
    return [RosterEntry(id=f"admin{i}", assigned_count=load) for i, load in enumerate(loads)]


def _final_loads(plan: WorkloadPlan, roster: list[RosterEntry]) -> dict[str, int]:
    added = Counter(a.assignee_id for a in plan.assignments)
    return {admin.id: admin.assigned_count + added[admin.id] for admin in roster}


def test_ten_complaints_over_three_idle_admins():
    complaints = _complaints(10)
    roster = _roster(0, 0, 0)

    plan = workload_module.balance_workload(complaints, roster)

    assert plan.reason is None
    assert plan.unassigned_count == 10
    assert plan.roster_size == 3
    assert sorted(_final_loads(plan, roster).values(), reverse=True) == [4, 3, 3]
    assert sorted(a.complaint_id for a in plan.assignments) == sorted(c["id"] for c in complaints)
    assert [a.assignee_id for a in plan.assignments[:4]] == ["admin0", "admin1", "admin2", "admin0"]


def test_low_urgency_and_assigned_are_skipped():
    complaints = [
        {"id": "low", "urgency": "low", "assigned_to": None},
        {"id": "taken", "urgency": "urgent", "assigned_to": "someone"},
        {"id": "medium", "urgency": ComplaintUrgency.MEDIUM, "assigned_to": None},
    ]

    plan = workload_module.balance_workload(complaints, _roster(0, 0))

    assert [a.complaint_id for a in plan.assignments] == ["medium"]
    assert plan.unassigned_count == 1


def test_least_loaded_admin_goes_first_and_ties_keep_roster_order():
    roster = [
        RosterEntry(id="busy", assigned_count=5),
        RosterEntry(id="idle-a", assigned_count=0),
        RosterEntry(id="some", assigned_count=2),
        RosterEntry(id="idle-b", assigned_count=0),
    ]

    plan = workload_module.balance_workload(_complaints(4), roster)

    assert [a.assignee_id for a in plan.assignments] == ["idle-a", "idle-b", "some", "busy"]


def test_loads_within_one_stay_within_one():
    roster = _roster(1, 0, 1, 0)

    for n in range(0, 12):
        plan = workload_module.balance_workload(_complaints(n), roster)
        loads = _final_loads(plan, roster).values()
        assert max(loads) - min(loads) <= 1


def test_empty_roster_is_reported_not_raised():
    plan = workload_module.balance_workload(_complaints(3), [])

    assert plan.assignments == []
    assert plan.reason == workload_module.NO_ADMINS_AVAILABLE
    assert plan.unassigned_count == 3


def test_nothing_to_assign_is_reported():
    plan = workload_module.balance_workload(_complaints(2, urgency="low"), _roster(0))

    assert plan.assignments == []
    assert plan.reason == workload_module.NOTHING_TO_ASSIGN


@pytest.mark.asyncio
async def test_roster_counts_only_live_assigned_complaints(make_profile, make_complaint):
    admin = make_profile("Ada Admin", role=AppRole.ADMIN)
    make_profile("Sam Student")
    make_complaint(assigned_to=admin, urgency=ComplaintUrgency.URGENT)
    make_complaint(assigned_to=admin, status=ComplaintStatus.IN_PROGRESS)
    make_complaint(assigned_to=admin, status=ComplaintStatus.RESOLVED)

    roster = await workload_module.load_roster()

    assert [entry.id for entry in roster] == [admin]
    assert roster[0].full_name == "Ada Admin"
    assert roster[0].assigned_count == 2
    assert roster[0].high_priority_count == 1


@pytest.mark.asyncio
async def test_auto_balance_assigns_every_eligible_complaint(make_profile, make_complaint):
    admins = [make_profile(f"admin {i}", role=AppRole.ADMIN) for i in range(3)]
    eligible = [make_complaint(urgency=ComplaintUrgency.HIGH) for _ in range(10)]
    low = make_complaint(urgency=ComplaintUrgency.LOW)
    closed = make_complaint(status=ComplaintStatus.RESOLVED)

    response = await workload_module.auto_balance(actor_id=admins[0])

    assert response.report.attempted == 10
    assert response.report.assigned_count == 10
    assert response.report.failed_ids == []
    assert response.message == "10 complaints assigned to 3 admins"

    roster = await workload_module.load_roster()
    assert sorted((entry.assigned_count for entry in roster), reverse=True) == [4, 3, 3]

    with session_scope() as db:
        assigned = dict(db.execute(select(Complaint.id, Complaint.assigned_to)).all())
        feed = db.execute(select(ActivityEntry).where(ActivityEntry.action_type == "assigned")).scalars().all()
        assert all(assigned[cid] in admins for cid in eligible)
        assert assigned[low] is None
        assert assigned[closed] is None
        assert sorted(entry.complaint_id for entry in feed) == sorted(eligible)
        assert all(entry.user_id == admins[0] for entry in feed)


@pytest.mark.asyncio
async def test_auto_balance_without_admins(make_complaint):
    make_complaint(urgency=ComplaintUrgency.HIGH)

    response = await workload_module.auto_balance(actor_id="nobody")

    assert response.plan.reason == workload_module.NO_ADMINS_AVAILABLE
    assert response.report.attempted == 0
    assert response.message == "No admin users found to assign complaints"


@pytest.mark.asyncio
async def test_one_failed_write_does_not_block_others(monkeypatch):
    calls = []

    def flaky_assign(assignment, actor_id):
        calls.append(assignment.complaint_id)
        if assignment.complaint_id == "c1":
            raise RuntimeError("db hiccup")
        return True

    monkeypatch.setattr(workload_module, "_assign_one", flaky_assign)
    plan = workload_module.balance_workload(_complaints(3), _roster(0, 0))

    report = await workload_module.apply_assignments(plan, actor_id="admin0")

    assert sorted(calls) == ["c0", "c1", "c2"]
    assert report.attempted == 3
    assert report.assigned_count == 2
    assert report.failed_ids == ["c1"]


@pytest.mark.asyncio
async def test_complaint_claimed_elsewhere_is_not_overwritten(make_profile, make_complaint):
    admin = make_profile(role=AppRole.ADMIN)
    other = make_profile(role=AppRole.ADMIN)
    complaint_id = make_complaint(assigned_to=other)
    plan = WorkloadPlan(
        assignments=[Assignment(complaint_id=complaint_id, assignee_id=admin)],
        unassigned_count=1,
        roster_size=1,
    )

    report = await workload_module.apply_assignments(plan, actor_id=admin)

    assert report.assigned_count == 0
    assert report.failed_ids == [complaint_id]
    with session_scope() as db:
        assert db.get(Complaint, complaint_id).assigned_to == other
