import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[2] / ".env")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Hours a live complaint may stay unresolved before it counts as overdue.
SLA_HOURS = 48

# Days without a status update or comment before the reaper closes a complaint.
DEFAULT_STALE_DAYS = int(os.getenv("DEFAULT_STALE_DAYS", "5"))

DEFAULT_DUPLICATE_THRESHOLD = 3

ISSUE_KEYWORDS = [
    "wifi", "internet", "network", "laptop", "computer", "projector",
    "ac", "air conditioner", "fan", "light", "electricity", "power",
    "hostel", "mess", "food", "water", "toilet", "bathroom",
    "mentor", "faculty", "teacher", "class", "schedule", "timetable",
    "lab", "library", "canteen", "parking", "security",
]

# Author for reaper comments and feed entries; empty means the submitter.
SYSTEM_ACTOR_ID = os.getenv("SYSTEM_ACTOR_ID", "")

REAPER_LOCK_ENABLED = os.getenv("REAPER_LOCK_ENABLED", "") == "1"
REAPER_LOCK_KEY = "maintenance:auto_close_stale:lock"
REAPER_LOCK_TTL_SEC = int(os.getenv("REAPER_LOCK_TTL_SEC", "300"))

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
