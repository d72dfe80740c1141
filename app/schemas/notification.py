from pydantic import BaseModel
from datetime import datetime
from app.schemas.user import CAMEL_CONFIG

class NotificationReceipt(BaseModel):
    success: bool
    message: str
    email_id: str
    sent_at: datetime

    model_config = CAMEL_CONFIG
