"""
Session Domain Model
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class SessionEntry(BaseModel):
    """Upstream conversation bound to one credential for the process lifetime"""

    credential: str = Field(..., description="Opaque upstream credential")
    conversation_id: str = Field(..., description="Upstream conversation id")
    title: str = Field("", description="Title the conversation was created with")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation Time",
    )

    model_config = ConfigDict(frozen=True)
