"""
Model Domain Model
"""

from pydantic import BaseModel, ConfigDict, Field


class ModelDescriptor(BaseModel):
    """Upstream model a downstream model identifier resolves to"""

    id: str = Field(..., description="Upstream model id")
    name: str = Field(..., description="Upstream model name")
    provider: str = Field(..., description="Upstream provider tag")

    model_config = ConfigDict(frozen=True)
