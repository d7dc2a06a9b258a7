"""Competition and event assignment data models."""

from typing import Optional
from pydantic import BaseModel, Field

from archers_edge.models.bale import Bale


class Competition(BaseModel):
    """Represents an archery competition."""

    id: str
    name: str
    date: Optional[str] = None
    location: Optional[str] = None
    divisions: list[str] = []
    type: str = "qualification"


class EventAssignment(BaseModel):
    """A coach's selection of archers for a competition and its bale layout."""

    id: Optional[str] = None
    competition_id: str = Field(..., alias="competitionId")
    assignment_type: str = Field(default="school", alias="assignmentType")
    selected_school: Optional[str] = Field(default=None, alias="selectedSchool")
    archer_ids: list[str] = Field(default=[], alias="archerIds")
    number_of_bales: int = Field(default=8, alias="numberOfBales", gt=0)
    max_archers_per_bale: int = Field(default=4, alias="maxArchersPerBale", gt=0)
    bales: list[Bale] = []
    status: str = "draft"  # draft, assigned
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
