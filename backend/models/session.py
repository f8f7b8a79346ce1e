from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from protocol.base import ProtocolHandler


class Session(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    session_id: str
    handler: ProtocolHandler
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
