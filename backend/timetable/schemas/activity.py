from datetime import datetime

from pydantic import BaseModel


class ActivityLogOut(BaseModel):
    id: str
    action: str
    entity_type: str
    entity_id: str
    details: dict
    occurred_at: datetime

    model_config = {"from_attributes": True}
