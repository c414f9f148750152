from pydantic import Field

import complaint_desk.config.config as configs
from complaint_desk.model.base import CamelModel


class ReaperRequest(CamelModel):
    stale_days: int = Field(configs.DEFAULT_STALE_DAYS, gt=0, description="Days of inactivity before closing")
