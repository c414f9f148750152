import enum


class ComplaintCategory(str, enum.Enum):
    TECHNICAL = "technical"
    FACILITIES = "facilities"
    CURRICULUM = "curriculum"
    MENTORSHIP = "mentorship"
    OTHER = "other"


class ComplaintUrgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ComplaintStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class AppRole(str, enum.Enum):
    STUDENT = "student"
    ADMIN = "admin"


# Statuses the reaper, SLA views and workload counts treat as still being worked.
LIVE_STATUSES = (ComplaintStatus.OPEN, ComplaintStatus.IN_PROGRESS)
