# eniqilo_store/models/base.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class TimeStampedModel(BaseModel):
    """Base model for rows stamped with a creation time"""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
