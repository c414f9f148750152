from pydantic import Field

from complaint_desk.model.base import CamelModel


class BalanceRequest(CamelModel):
    actor_id: str = Field(..., description="Profile id of the admin triggering the balance")
