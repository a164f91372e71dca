from pydantic import BaseModel, ConfigDict, Field


class Property(BaseModel):
    """A Cloudbeds property the dashboard aggregates over."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Cloudbeds property ID")
    name: str = Field(..., description="Display name")
    api_key: str = Field(..., repr=False, description="Cloudbeds API key for this property")
    capacity: int = Field(0, description="Bed capacity from the static capacity table")
