"""Archer profile and identity models."""

from typing import Optional
from pydantic import BaseModel, Field


class Archer(BaseModel):
    """Represents an archer (or staff) profile from the profile store."""

    id: str
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    gender: Optional[str] = None  # M or F
    school: Optional[str] = None
    default_classification: Optional[str] = Field(default=None, alias="defaultClassification")
    division: Optional[str] = None
    role: str = "Archer"
    email: Optional[str] = None
    is_me: bool = Field(default=False, alias="isMe")
    is_favorite: bool = Field(default=False, alias="isFavorite")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    def get_full_name(self) -> str:
        """Get "First Last", skipping empty parts."""
        parts = [p for p in [self.first_name, self.last_name] if p]
        return " ".join(parts)

    def get_classification(self) -> Optional[str]:
        """Get the V/JV/MS classification used for bale grouping."""
        return self.default_classification or self.division


class Identity(BaseModel):
    """Who is acting: a profile id and the role string it holds."""

    profile_id: str = Field(..., alias="profileId")
    role: str = "Archer"

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    def has_role(self, role: str) -> bool:
        return self.role == role
