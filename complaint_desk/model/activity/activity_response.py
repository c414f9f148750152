from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from complaint_desk.model.base import CamelModel


class ActivityResponse(CamelModel):
    id: str
    action_type: str
    description: str
    complaint_id: Optional[str] = None
    user_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
