"""
Envelope for events handed to the outbound bus
"""
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from fulfillment.config import settings


class EventEnvelope(BaseModel):
    """Schema for published event payloads"""
    event_type: str
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_version: str = "1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    source: str = settings.SERVICE_NAME
    data: dict
