"""
Pydantic schemas for event log reads.
"""

import json
from datetime import datetime

from pydantic import BaseModel, field_validator


class EventLogResponse(BaseModel):
    id: int
    event_type: str
    actor: str | None
    details: dict
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("details", mode="before")
    @classmethod
    def parse_details(cls, value):
        if isinstance(value, str):
            return json.loads(value) if value else {}
        return value
