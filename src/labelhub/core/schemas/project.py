"""Project checklist schemas."""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ChecklistItem(BaseModel):
    """One entry of a project's review checklist."""
    code: str = Field(..., min_length=1, validation_alias=AliasChoices("code", "Code"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "Name"))
    weight: int = Field(default=0, ge=0, validation_alias=AliasChoices("weight", "Weight"))

    model_config = ConfigDict(frozen=True, populate_by_name=True)
