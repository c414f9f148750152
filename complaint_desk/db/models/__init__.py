from .activity import ActivityEntry
from .comment import Comment
from .complaint import Complaint
from .user import Profile, UserRole

__all__ = ["ActivityEntry", "Comment", "Complaint", "Profile", "UserRole"]
