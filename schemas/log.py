from datetime import datetime
from pydantic import BaseModel


class SendLogOut(BaseModel):
    id: int
    reminder_id: int
    schedule_label: str
    target_email: str
    sent_at: datetime

    class Config:
        from_attributes = True
